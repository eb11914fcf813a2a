"""Interface to the particle transport engine."""

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from ..core.data_models import DetectorGeometry, ParticleSpec
from ..utils.logging import get_logger


logger = get_logger()

DepositCallback = Callable[[int, float], None]


class TransportEngine(ABC):
    """Transport engine that tracks primaries through the detector.

    The engine owns the placed geometry once ``construct`` has been called.
    While processing an event it reports every energy deposit in a
    sensitive layer through the callback it was given, synchronously and
    before ``process_event`` returns.
    """

    @abstractmethod
    def construct(self, geometry: DetectorGeometry) -> None:
        """Register the placed geometry with the engine."""

    @abstractmethod
    def add_sensitive_detector(self, name: str, layer_id: int) -> None:
        """Mark the volume of ``layer_id`` as sensitive under ``name``."""

    @abstractmethod
    def process_event(self, particle: ParticleSpec, deposit: DepositCallback) -> None:
        """Track one primary and report its deposits.

        Args:
            particle: Primary particle and field configuration
            deposit: Called as ``deposit(layer_id, energy_MeV)`` for every deposit
        """


class FixedDepositEngine(TransportEngine):
    """Deterministic engine that deposits fixed amounts on every event.

    Useful for dry runs of the recording chain: no particle is tracked,
    each event simply reports the configured deposits, optionally split
    into several equal steps per layer.

    Attributes:
        deposits: Energy in MeV deposited per layer id on every event
        steps_per_deposit: Number of callbacks each deposit is split into
        geometry: Geometry registered by construct()
        sensitive_detectors: Registered sensitive detector names by layer id
        fired: Particle specs of all processed events
    """

    def __init__(self, deposits: Optional[Dict[int, float]] = None, steps_per_deposit: int = 1):
        if steps_per_deposit < 1:
            raise ValueError(f"steps_per_deposit must be at least 1, got {steps_per_deposit}")
        self.deposits = dict(deposits or {})
        self.steps_per_deposit = steps_per_deposit
        self.geometry: Optional[DetectorGeometry] = None
        self.sensitive_detectors: Dict[int, str] = {}
        self.fired: List[ParticleSpec] = []

    def construct(self, geometry: DetectorGeometry) -> None:
        self.geometry = geometry
        logger.debug(f"FixedDepositEngine received geometry with {geometry.num_layers} layers")

    def add_sensitive_detector(self, name: str, layer_id: int) -> None:
        self.sensitive_detectors[layer_id] = name

    def process_event(self, particle: ParticleSpec, deposit: DepositCallback) -> None:
        if self.geometry is None:
            raise RuntimeError("process_event called before construct")

        self.fired.append(particle)
        for layer_id, amount in self.deposits.items():
            step = amount / self.steps_per_deposit
            for _ in range(self.steps_per_deposit):
                deposit(layer_id, step)
