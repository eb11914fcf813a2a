"""
Ring Detector Beam Scan Simulation

Builds a layered cylindrical detector around a beam axis, fires a beam
with ramped energy and transverse field through it, and records the
energy deposited in every ring per event.
"""

__version__ = "0.1.0"

from .core.run_simulator import RunSimulator
from .utils.config import SimulationConfig

__all__ = ['RunSimulator', 'SimulationConfig']
