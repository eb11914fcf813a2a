"""Physics modules: units, materials and the transport engine interface."""

from .material_database import MaterialDatabase
from .transport_engine import TransportEngine, FixedDepositEngine

__all__ = [
    'MaterialDatabase',
    'TransportEngine',
    'FixedDepositEngine'
]
