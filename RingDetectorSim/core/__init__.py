"""Core simulation components."""

from .data_models import (
    MaterialProperties,
    Layer,
    PlacedVolume,
    WorldVolume,
    DetectorGeometry,
    BeamState,
    ParticleSpec,
    OutputRow,
    TableHandle
)
from .geometry_builder import GeometryBuilder, build_layers, layer_count
from .sensitive_registry import SensitiveRegistry, EnergyCounter
from .beam_controller import BeamController
from .run_recorder import RunRecorder
from .run_simulator import RunSimulator

__all__ = [
    'MaterialProperties',
    'Layer',
    'PlacedVolume',
    'WorldVolume',
    'DetectorGeometry',
    'BeamState',
    'ParticleSpec',
    'OutputRow',
    'TableHandle',
    'GeometryBuilder',
    'build_layers',
    'layer_count',
    'SensitiveRegistry',
    'EnergyCounter',
    'BeamController',
    'RunRecorder',
    'RunSimulator'
]
