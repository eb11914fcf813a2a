"""Sensitive detector registry routing energy deposits to per-layer accumulators."""

import math
from typing import Dict, Iterable, List, Optional, Sequence
import numpy as np
import torch

from .data_models import Layer, detector_name
from ..utils.logging import get_logger
from ..utils.validation import DepositRoutingError


logger = get_logger()


class EnergyCounter:
    """Accumulator handle for one detector layer.

    The handle only knows its layer id and the registry slot it reads;
    it holds no reference to the geometry.

    Attributes:
        name: Sensitive detector name ('Detector<id>')
        layer_id: Layer id the counter accumulates for
    """

    def __init__(self, name: str, layer_id: int, registry: 'SensitiveRegistry'):
        self.name = name
        self.layer_id = layer_id
        self._registry = registry

    @property
    def total(self) -> float:
        """Energy deposited in this layer during the current event in MeV."""
        return self._registry.value(self.layer_id)

    def __repr__(self) -> str:
        return f"EnergyCounter(name={self.name!r}, layer_id={self.layer_id}, total={self.total})"


class SensitiveRegistry:
    """Per-layer energy accumulators keyed by layer id.

    Totals live in one float64 tensor on the configured device, slot
    ``i`` holding the layer with the ``i``-th smallest id. Deposits are
    summed during an event and cleared when the event's row is read.

    Attributes:
        device: Device holding the accumulator tensor
        counters: EnergyCounter handles by layer id
    """

    def __init__(self, device: str = 'cpu'):
        """Initialize SensitiveRegistry.

        Args:
            device: Device for the accumulator tensor ('cpu' or 'cuda')
        """
        self.device = device
        self.counters: Dict[int, EnergyCounter] = {}
        self._slots: Dict[int, int] = {}
        self._totals = torch.zeros(0, dtype=torch.float64, device=device)

    def bind(self, layers: Sequence[Layer], engine=None) -> Dict[int, EnergyCounter]:
        """Create one accumulator per layer and register it with the engine.

        Any previous binding is replaced, so the registry can be rebound
        after the geometry is rebuilt.

        Args:
            layers: Layers produced by the geometry builder
            engine: Optional transport engine to register sensitive detectors with

        Returns:
            Mapping from layer id to its EnergyCounter
        """
        layer_ids = [layer.layer_id for layer in layers]
        if len(set(layer_ids)) != len(layer_ids):
            raise ValueError(f"Duplicate layer ids in {layer_ids}")

        self._slots = {layer_id: slot for slot, layer_id in enumerate(sorted(layer_ids))}
        self.counters = {
            layer_id: EnergyCounter(detector_name(layer_id), layer_id, self)
            for layer_id in sorted(layer_ids)
        }
        self._totals = torch.zeros(len(layer_ids), dtype=torch.float64, device=self.device)

        if engine is not None:
            for layer_id, counter in self.counters.items():
                engine.add_sensitive_detector(counter.name, layer_id)

        logger.info(f"Bound {len(self.counters)} sensitive detectors")
        return dict(self.counters)

    def _slot(self, layer_id: int) -> int:
        try:
            return self._slots[layer_id]
        except KeyError:
            raise DepositRoutingError(
                f"Deposit for unknown layer id {layer_id}; "
                f"registry holds {len(self._slots)} layers"
            ) from None

    def on_deposit(self, layer_id: int, energy_MeV: float) -> None:
        """Add one energy deposit to the layer's accumulator.

        Args:
            layer_id: Layer the energy was deposited in
            energy_MeV: Deposited energy in MeV (non-negative)

        Raises:
            DepositRoutingError: If the layer id was never bound
            ValueError: If the energy is negative or not finite
        """
        if not math.isfinite(energy_MeV) or energy_MeV < 0:
            raise ValueError(
                f"Deposited energy must be finite and non-negative, got {energy_MeV}"
            )
        self._totals[self._slot(layer_id)] += energy_MeV

    def deposit_many(self, layer_ids: Iterable[int], energies_MeV: Iterable[float]) -> None:
        """Add a batch of deposits in one tensor operation.

        Args:
            layer_ids: Layer id of each deposit
            energies_MeV: Energy of each deposit in MeV
        """
        slots = torch.tensor(
            [self._slot(int(layer_id)) for layer_id in layer_ids],
            dtype=torch.long, device=self.device
        )
        energies = torch.as_tensor(
            np.asarray(list(energies_MeV), dtype=np.float64), device=self.device
        )
        if slots.numel() != energies.numel():
            raise ValueError(
                f"Got {slots.numel()} layer ids for {energies.numel()} deposits"
            )
        if torch.any(~torch.isfinite(energies)) or torch.any(energies < 0):
            raise ValueError("Deposited energies must be finite and non-negative")
        self._totals.index_add_(0, slots, energies)

    def value(self, layer_id: int) -> float:
        """Current total of one layer in MeV."""
        return float(self._totals[self._slot(layer_id)].item())

    def totals(self) -> np.ndarray:
        """Current totals in ascending layer id order, without resetting."""
        return self._totals.cpu().numpy().copy()

    def read_and_reset(self) -> np.ndarray:
        """Return the totals in ascending layer id order and zero them."""
        values = self.totals()
        self.reset()
        return values

    def reset(self) -> None:
        self._totals.zero_()

    @property
    def layer_ids(self) -> List[int]:
        return sorted(self._slots)

    def __len__(self) -> int:
        return len(self.counters)

    def get(self, layer_id: int) -> Optional[EnergyCounter]:
        return self.counters.get(layer_id)
