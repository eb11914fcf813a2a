"""Run recorder writing one output row per event."""

from pathlib import Path
from typing import List, Optional
import h5py
import numpy as np

from .data_models import BeamState, OutputRow, TableHandle, detector_name
from .geometry_builder import layer_count
from .sensitive_registry import SensitiveRegistry
from ..physics.constants import GENERATED_COLUMN, FIELD_COLUMN, NUM_BEAM_COLUMNS
from ..utils.config import SimulationConfig
from ..utils.logging import get_logger
from ..utils.path_utils import PathValidationError, validate_output_path
from ..utils.validation import (
    PersistenceError,
    RecorderClosedError,
    validate_layer_schema
)


logger = get_logger()


def column_names(num_layers: int) -> List[str]:
    """Output column names: beam parameters then one column per layer id."""
    return [GENERATED_COLUMN, FIELD_COLUMN] + [
        detector_name(layer_id) for layer_id in range(1, num_layers + 1)
    ]


class _CsvTableWriter:
    """Streams comma-separated rows to a text file."""

    def __init__(self, path: Path, columns: List[str]):
        self._file = open(path, 'w', newline='')
        try:
            self._file.write(','.join(columns) + '\n')
        except OSError:
            self._file.close()
            raise

    def write(self, values: np.ndarray) -> None:
        np.savetxt(self._file, values[np.newaxis, :], delimiter=',', fmt='%.10g')

    def close(self) -> None:
        self._file.flush()
        self._file.close()


class _Hdf5TableWriter:
    """Appends rows to a resizable HDF5 dataset."""

    def __init__(self, path: Path, columns: List[str]):
        self._file = h5py.File(path, 'w')
        self._dataset = self._file.create_dataset(
            'Energy',
            shape=(0, len(columns)),
            maxshape=(None, len(columns)),
            dtype='f8',
            chunks=True
        )
        self._dataset.attrs['columns'] = columns
        self._dataset.attrs['title'] = 'Deposited energy'

    def write(self, values: np.ndarray) -> None:
        n = self._dataset.shape[0]
        self._dataset.resize(n + 1, axis=0)
        self._dataset[n] = values

    def close(self) -> None:
        self._file.flush()
        self._file.close()


class _MemoryTableWriter:
    """Keeps rows in memory for output_format='object'."""

    def __init__(self, path: Optional[Path], columns: List[str]):
        self.rows: List[np.ndarray] = []
        self.num_columns = len(columns)

    def write(self, values: np.ndarray) -> None:
        self.rows.append(values.copy())

    def table(self) -> np.ndarray:
        if not self.rows:
            return np.zeros((0, self.num_columns))
        return np.vstack(self.rows)

    def close(self) -> None:
        pass


_WRITERS = {
    'csv': _CsvTableWriter,
    'hdf5': _Hdf5TableWriter,
    'object': _MemoryTableWriter,
}


class RunRecorder:
    """Defines the output table and records one row per event.

    The table has a 'Generated' energy column, a 'Magnetic field' column
    and one 'Detector<id>' column per layer. Its detector column count is
    derived from the same radius and ring width as the geometry.

    Attributes:
        config: Simulation configuration
        handle: Currently open table, None before create_schema
    """

    def __init__(self, config: SimulationConfig):
        """Initialize RunRecorder.

        Args:
            config: Simulation configuration
        """
        self.config = config
        self.handle: Optional[TableHandle] = None
        self._writer = None

    @property
    def expected_layer_count(self) -> int:
        return layer_count(self.config.total_radius_cm, self.config.ring_width_cm)

    def create_schema(self, num_layers: int) -> TableHandle:
        """Open the output table for a geometry of ``num_layers`` layers.

        Args:
            num_layers: Number of layers built by the geometry

        Returns:
            Handle of the open table

        Raises:
            SchemaMismatchError: If the layer count disagrees with the configuration
            PersistenceError: If the output table cannot be opened
            RecorderClosedError: If this recorder already closed its table
        """
        if self.handle is not None:
            if self.handle.is_open:
                raise PersistenceError("Output table is already open")
            # One table per recorder
            raise RecorderClosedError(
                f"Output table has already been closed after {self.handle.rows_written} rows"
            )

        columns = column_names(self.expected_layer_count)
        validate_layer_schema(num_layers, len(columns) - NUM_BEAM_COLUMNS)

        path = None
        output_file = self.config.output_file
        if output_file is not None:
            try:
                path = validate_output_path(output_file)
            except PathValidationError as e:
                raise PersistenceError(f"Cannot use output path {output_file}: {e}") from e

        try:
            self._writer = _WRITERS[self.config.output_format](path, columns)
        except OSError as e:
            raise PersistenceError(f"Cannot open output table {path}: {e}") from e

        self.handle = TableHandle(columns=columns, path=str(path) if path else None)
        logger.info(
            f"Output table opened: {len(columns)} columns "
            f"({num_layers} detectors), format={self.config.output_format}"
            + (f", path={path}" if path else "")
        )
        return self.handle

    def _require_open(self) -> TableHandle:
        if self.handle is None:
            raise PersistenceError("Output table has not been created")
        if not self.handle.is_open:
            raise RecorderClosedError("Output table has already been finalized")
        return self.handle

    def write_row(self, state: BeamState, registry: SensitiveRegistry) -> OutputRow:
        """Record one event and clear the accumulators.

        Call once per event, after the transport engine has finished the
        event.

        Args:
            state: Beam state the event was fired with
            registry: Accumulators holding the event's deposits

        Returns:
            The recorded row

        Raises:
            RecorderClosedError: If the table has been finalized
            SchemaMismatchError: If the registry size disagrees with the schema
        """
        handle = self._require_open()
        validate_layer_schema(len(registry), len(handle.detector_columns))

        row = OutputRow(
            generated_energy_MeV=state.energy_MeV,
            field_T=state.field_T,
            deposits_MeV=registry.read_and_reset()
        )

        try:
            self._writer.write(row.as_array())
        except OSError as e:
            raise PersistenceError(f"Failed to write row {handle.rows_written}: {e}") from e

        handle.rows_written += 1
        return row

    def finalize(self) -> Optional[np.ndarray]:
        """Flush and close the output table.

        Returns:
            The full table for output_format='object', otherwise None

        Raises:
            RecorderClosedError: If the table has already been finalized
            PersistenceError: If the table cannot be flushed
        """
        handle = self._require_open()
        table = None
        if isinstance(self._writer, _MemoryTableWriter):
            table = self._writer.table()

        try:
            self._writer.close()
        except OSError as e:
            raise PersistenceError(f"Failed to close output table: {e}") from e
        finally:
            handle.is_open = False
            self._writer = None

        logger.info(f"Output table finalized: {handle.rows_written} rows")
        return table

    def abort(self) -> None:
        """Close the table after a failed run without finalizing it."""
        if self.handle is None or not self.handle.is_open:
            return
        try:
            self._writer.close()
        except OSError as e:
            logger.error(f"Failed to close output table after abort: {e}")
        self.handle.is_open = False
        self._writer = None
        logger.error(f"Run aborted after {self.handle.rows_written} rows; output is incomplete")
