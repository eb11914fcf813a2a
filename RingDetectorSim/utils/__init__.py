"""Utility modules for configuration, logging, and validation."""

from .config import SimulationConfig
from .logging import setup_logger, get_logger
from .validation import (
    ValidationError,
    InvalidConfigurationError,
    SchemaMismatchError,
    GeometryOverlapError,
    DepositRoutingError,
    PersistenceError,
    RecorderClosedError,
    validate_config,
    validate_layer_schema
)

__all__ = [
    'SimulationConfig',
    'setup_logger',
    'get_logger',
    'ValidationError',
    'InvalidConfigurationError',
    'SchemaMismatchError',
    'GeometryOverlapError',
    'DepositRoutingError',
    'PersistenceError',
    'RecorderClosedError',
    'validate_config',
    'validate_layer_schema'
]
