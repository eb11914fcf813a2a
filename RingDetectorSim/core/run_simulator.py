"""Main run orchestration for the ring detector beam scan."""

import time
from pathlib import Path
from typing import Dict, Optional

from .beam_controller import BeamController
from .data_models import BeamState, DetectorGeometry
from .geometry_builder import GeometryBuilder
from .run_recorder import RunRecorder
from .sensitive_registry import SensitiveRegistry
from ..physics.material_database import MaterialDatabase
from ..physics.transport_engine import TransportEngine
from ..utils.config import SimulationConfig
from ..utils.logging import setup_logger
from ..utils.validation import validate_config, validate_layer_schema


class RunSimulator:
    """Main orchestration class for a ring detector run.

    This class coordinates all components of the run:
    - Geometry construction and registration with the transport engine
    - Sensitive detector binding
    - Output table creation
    - The event loop (configure beam, transport, record, ramp)

    Attributes:
        config: Simulation configuration
        engine: Transport engine firing the particles
        material_database: Material lookup
        geometry: Placed detector geometry
        registry: Per-layer energy accumulators
        beam: Beam controller
        recorder: Output table recorder
        state: Current beam state
        logger: Logger instance
    """

    def __init__(self, config: SimulationConfig, engine: TransportEngine):
        """Initialize RunSimulator and build the detector.

        Args:
            config: Simulation configuration
            engine: Transport engine that processes events

        Raises:
            InvalidConfigurationError: If the configuration is unusable
            GeometryOverlapError: If placed volumes overlap under the 'error' policy
        """
        validate_config(config)
        self.config = config
        self.engine = engine

        log_file = None
        if config.output_format != 'object' and config.output_path:
            log_dir = Path(config.output_path)
            log_dir.mkdir(parents=True, exist_ok=True)
            log_file = str(log_dir / 'simulation.log')

        self.logger = setup_logger(log_file=log_file)
        self.logger.info("RunSimulator initialized")
        self.logger.info(
            f"Configuration: radius={config.total_radius_cm} cm, "
            f"ring width={config.ring_width_cm} cm, events={config.num_events}, "
            f"device={config.device}"
        )

        self.material_database = MaterialDatabase(config.material_database_path)
        self.geometry: DetectorGeometry = GeometryBuilder(
            self.material_database, overlap_policy=config.overlap_policy
        ).build(config)
        self.engine.construct(self.geometry)

        self.registry = SensitiveRegistry(device=config.device)
        self.registry.bind(self.geometry.layers, engine=self.engine)
        validate_layer_schema(self.geometry.num_layers, len(self.registry))

        self.beam = BeamController.from_config(config)
        self.state: BeamState = self.beam.initial_state()
        self.recorder = RunRecorder(config)

    def run(self, num_events: Optional[int] = None) -> Dict:
        """Fire the configured number of events and write the output table.

        Any error during an event aborts the run; the partially written
        table is closed and the error propagates. A simulator runs once;
        a second call fails without touching the first table.

        Args:
            num_events: Number of events (defaults to config.num_events)

        Returns:
            Dictionary with run results
        """
        if num_events is None:
            num_events = self.config.num_events
        if num_events < 0:
            raise ValueError(f"num_events must be non-negative, got {num_events}")

        start_time = time.time()

        self.logger.info("=" * 60)
        self.logger.info(f"Starting run of {num_events} events")
        self.logger.info("=" * 60)

        handle = self.recorder.create_schema(self.geometry.num_layers)

        try:
            for _ in range(num_events):
                self.run_event()
        except Exception:
            self.logger.error(
                f"Event {self.state.event_counter} failed, aborting run", exc_info=True
            )
            self.recorder.abort()
            raise

        table = self.recorder.finalize()

        elapsed_time = time.time() - start_time
        results = {
            'output': handle.path if table is None else table,
            'columns': list(handle.columns),
            'events': handle.rows_written,
            'layers': self.geometry.num_layers,
            'final_state': self.state,
            'performance': {
                'total_time_seconds': elapsed_time,
                'events_per_second': handle.rows_written / elapsed_time if elapsed_time > 0 else 0
            }
        }

        self.logger.info("=" * 60)
        self.logger.info(f"Run complete in {elapsed_time:.2f} seconds")
        self.logger.info(
            f"Final beam: {self.state.energy_MeV} MeV, {self.state.field_T} T "
            f"after {self.state.event_counter} events"
        )
        self.logger.info("=" * 60)

        return results

    def run_event(self) -> None:
        """Fire, transport and record a single event, then ramp the beam."""
        particle, state = self.beam.configure_event(self.state)
        self.registry.reset()
        self.engine.process_event(particle, self.registry.on_deposit)
        self.recorder.write_row(state, self.registry)
        self.state = self.beam.advance(state)
