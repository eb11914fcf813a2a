"""Beam controller ramping energy and field on a fixed event cadence."""

from dataclasses import replace
from typing import Tuple

from .data_models import BeamState, ParticleSpec
from ..utils.config import SimulationConfig
from ..utils.logging import get_logger


logger = get_logger()


class BeamController:
    """Owns the particle gun settings and steps them between events.

    After every fired event the counter advances by one. When the new
    counter is a multiple of the major interval the energy is stepped up
    and the field is reset to its nominal value; otherwise, when it is a
    multiple of the minor interval, the field is stepped up. The major
    ramp replaces the minor one on counters that satisfy both.

    Attributes:
        particle: Particle name fired by the gun
        position_cm: Gun position
        direction: Gun momentum direction (unit vector)
        initial_energy_MeV: Energy of the first event
        energy_step_MeV: Energy added on each major ramp
        initial_field_T: Field of the first event
        field_step_T: Field added on each minor ramp
        nominal_field_T: Field restored on each major ramp
        minor_interval: Events between minor ramps (K1)
        major_interval: Events between major ramps (K2)
    """

    def __init__(
        self,
        particle: str = 'e-',
        position_cm: Tuple[float, float, float] = (0.0, 0.0, -250.0),
        direction: Tuple[float, float, float] = (0.0, 0.0, 1.0),
        initial_energy_MeV: float = 200.0,
        energy_step_MeV: float = 10.0,
        initial_field_T: float = 0.1,
        field_step_T: float = 0.05,
        nominal_field_T: float = 0.1,
        minor_interval: int = 10,
        major_interval: int = 100
    ):
        if minor_interval <= 0 or major_interval <= 0:
            raise ValueError("Ramp intervals must be positive")
        if major_interval % minor_interval != 0:
            raise ValueError(
                f"major_interval ({major_interval}) must be a multiple of "
                f"minor_interval ({minor_interval})"
            )
        if energy_step_MeV < 0:
            raise ValueError(f"energy_step_MeV must be non-negative, got {energy_step_MeV}")

        norm = sum(c * c for c in direction) ** 0.5
        if norm == 0:
            raise ValueError("direction must be non-zero")

        self.particle = particle
        self.position_cm = tuple(float(c) for c in position_cm)
        self.direction = tuple(float(c) / norm for c in direction)
        self.initial_energy_MeV = initial_energy_MeV
        self.energy_step_MeV = energy_step_MeV
        self.initial_field_T = initial_field_T
        self.field_step_T = field_step_T
        self.nominal_field_T = nominal_field_T
        self.minor_interval = minor_interval
        self.major_interval = major_interval

    @classmethod
    def from_config(cls, config: SimulationConfig) -> 'BeamController':
        return cls(
            particle=config.particle,
            position_cm=config.gun_position_cm,
            direction=config.gun_direction,
            initial_energy_MeV=config.initial_energy_MeV,
            energy_step_MeV=config.energy_step_MeV,
            initial_field_T=config.initial_field_T,
            field_step_T=config.field_step_T,
            nominal_field_T=config.nominal_field_T,
            minor_interval=config.minor_ramp_interval,
            major_interval=config.major_ramp_interval
        )

    def initial_state(self) -> BeamState:
        return BeamState(
            energy_MeV=self.initial_energy_MeV,
            field_T=self.initial_field_T,
            event_counter=0
        )

    def configure_event(self, state: BeamState) -> Tuple[ParticleSpec, BeamState]:
        """Build the primary for the next event from the current state.

        The state is returned unchanged; ramps happen in ``advance``.

        Args:
            state: Current beam state

        Returns:
            Tuple of (particle spec, state)
        """
        spec = ParticleSpec(
            particle=self.particle,
            energy_MeV=state.energy_MeV,
            position_cm=self.position_cm,
            direction=self.direction,
            field_T=(state.field_T, 0.0, 0.0),
            event_id=state.event_counter
        )
        return spec, state

    def advance(self, state: BeamState) -> BeamState:
        """Count one fired event and apply any ramp due at the new count.

        Args:
            state: Beam state the last event was fired with

        Returns:
            Beam state for the next event
        """
        counter = state.event_counter + 1

        if counter % self.major_interval == 0:
            energy = state.energy_MeV + self.energy_step_MeV
            logger.debug(
                f"Event {counter}: energy {state.energy_MeV} -> {energy} MeV, "
                f"field reset to {self.nominal_field_T} T"
            )
            return BeamState(energy_MeV=energy, field_T=self.nominal_field_T, event_counter=counter)

        if counter % self.minor_interval == 0:
            field_T = state.field_T + self.field_step_T
            logger.debug(f"Event {counter}: field {state.field_T} -> {field_T} T")
            return replace(state, field_T=field_T, event_counter=counter)

        return replace(state, event_counter=counter)
