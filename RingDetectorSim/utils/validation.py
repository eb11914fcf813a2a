"""Error types and validation utilities for configuration and run state."""

from pathlib import Path

from .config import SimulationConfig
from .logging import get_logger


logger = get_logger()


class ValidationError(Exception):
    """Base exception for validation errors."""
    pass


class InvalidConfigurationError(ValidationError, ValueError):
    """Raised when configuration parameters are invalid."""
    pass


class SchemaMismatchError(InvalidConfigurationError):
    """Raised when the output schema disagrees with the detector geometry."""
    pass


class GeometryOverlapError(ValidationError):
    """Raised when placed volumes intersect and overlaps are fatal."""
    pass


class DepositRoutingError(RuntimeError):
    """Raised when a deposit arrives for a layer id the registry never bound."""
    pass


class PersistenceError(RuntimeError):
    """Raised when the output table cannot be opened, written or closed."""
    pass


class RecorderClosedError(PersistenceError):
    """Raised when a row is written to a finalized output table."""
    pass


def validate_layer_schema(layer_count: int, column_count: int) -> None:
    """Validate that the output table has one detector column per layer.

    Args:
        layer_count: Number of layers built by the geometry
        column_count: Number of detector columns in the output schema

    Raises:
        SchemaMismatchError: If the counts differ
    """
    if layer_count != column_count:
        raise SchemaMismatchError(
            f"Geometry built {layer_count} layers but the output schema has "
            f"{column_count} detector columns"
        )
    logger.debug(f"Schema validated: {column_count} detector columns")


def validate_config(config: SimulationConfig) -> None:
    """Validate simulation configuration against runtime resources.

    Args:
        config: Simulation configuration

    Raises:
        InvalidConfigurationError: If configuration is invalid
    """
    from ..physics.material_database import MaterialDatabase

    db_path = Path(config.material_database_path)
    if not db_path.exists():
        raise InvalidConfigurationError(
            f"Material database not found: {config.material_database_path}"
        )

    database = MaterialDatabase(str(db_path))
    for material in (config.world_material, config.absorber_material, config.detector_material):
        if material not in database:
            raise InvalidConfigurationError(
                f"Unknown material '{material}'. Available: {sorted(database.names())}"
            )

    if config.device == 'cuda':
        import torch
        if not torch.cuda.is_available():
            raise InvalidConfigurationError(
                "CUDA device requested but CUDA is not available. "
                "Set device='cpu' or install CUDA support."
            )

    if config.output_format != 'object' and config.output_file.exists():
        logger.warning(f"Output table will be overwritten: {config.output_file}")

    logger.debug("Configuration validation passed")
