"""Configuration management for ring detector simulations."""

from dataclasses import dataclass
from typing import Optional, Tuple
import yaml
from pathlib import Path

from ..physics_data import DEFAULT_MATERIAL_DATABASE
from ..physics.constants import (
    DEFAULT_TOTAL_RADIUS_CM,
    DEFAULT_RING_WIDTH_CM,
    DEFAULT_DETECTOR_HALF_THICKNESS_CM,
    DEFAULT_ABSORBER_HALF_THICKNESS_CM,
    DEFAULT_ABSORBER_RADIUS_CM,
    DEFAULT_WORLD_HALF_LENGTH_CM,
    DEFAULT_PARTICLE,
    DEFAULT_INITIAL_ENERGY_MEV,
    DEFAULT_ENERGY_STEP_MEV,
    DEFAULT_INITIAL_FIELD_T,
    DEFAULT_FIELD_STEP_T,
    DEFAULT_MINOR_RAMP_INTERVAL,
    DEFAULT_MAJOR_RAMP_INTERVAL,
    DEFAULT_GUN_POSITION_CM,
    DEFAULT_GUN_DIRECTION,
)


OUTPUT_FORMATS = ('csv', 'hdf5', 'object')
OVERLAP_POLICIES = ('error', 'warn')


@dataclass
class SimulationConfig:
    """Configuration for a ring detector beam scan.

    ``total_radius_cm`` and ``ring_width_cm`` are the only inputs to the
    layer partitioning; the geometry and the output schema both read them
    from this object.

    Attributes:
        total_radius_cm: Outer radius of the layered detector in cm
        ring_width_cm: Radial width of each detector ring in cm
        num_events: Number of particles to fire
        detector_half_thickness_cm: Half-length of every layer along the beam axis
        absorber_half_thickness_cm: Half-length of the upstream absorber
        absorber_radius_cm: Radius of the upstream absorber
        detector_z_cm: Centre of the detector layers along z (defaults to
            just downstream of the absorber)
        world_half_length_cm: Half-length of the cubic world volume
        world_material: NIST name of the world material
        absorber_material: NIST name of the absorber material
        detector_material: NIST name of the detector layer material
        particle: Particle fired by the gun (e.g., 'e-')
        initial_energy_MeV: Beam energy of the first event
        energy_step_MeV: Energy increase applied on every major ramp
        initial_field_T: Transverse field of the first event
        field_step_T: Field increase applied on every minor ramp
        nominal_field_T: Field value restored on every major ramp
            (defaults to initial_field_T)
        minor_ramp_interval: Events between field increments (K1)
        major_ramp_interval: Events between energy steps (K2, multiple of K1)
        gun_position_cm: Gun position (x, y, z)
        gun_direction: Gun momentum direction (x, y, z)
        output_format: 'csv', 'hdf5' or 'object'
        output_path: Output directory (required unless output_format='object')
        output_filename: Output table file name (defaults per format)
        overlap_policy: 'error' to abort on overlapping volumes, 'warn' to log them
        device: Device holding the accumulators ('cpu' or 'cuda')
        material_database_path: Path to material database JSON file
    """
    total_radius_cm: float = DEFAULT_TOTAL_RADIUS_CM
    ring_width_cm: float = DEFAULT_RING_WIDTH_CM
    num_events: int = 1000
    detector_half_thickness_cm: float = DEFAULT_DETECTOR_HALF_THICKNESS_CM
    absorber_half_thickness_cm: float = DEFAULT_ABSORBER_HALF_THICKNESS_CM
    absorber_radius_cm: float = DEFAULT_ABSORBER_RADIUS_CM
    detector_z_cm: Optional[float] = None
    world_half_length_cm: float = DEFAULT_WORLD_HALF_LENGTH_CM
    world_material: str = 'G4_Galactic'
    absorber_material: str = 'G4_Pb'
    detector_material: str = 'G4_lAr'
    particle: str = DEFAULT_PARTICLE
    initial_energy_MeV: float = DEFAULT_INITIAL_ENERGY_MEV
    energy_step_MeV: float = DEFAULT_ENERGY_STEP_MEV
    initial_field_T: float = DEFAULT_INITIAL_FIELD_T
    field_step_T: float = DEFAULT_FIELD_STEP_T
    nominal_field_T: Optional[float] = None
    minor_ramp_interval: int = DEFAULT_MINOR_RAMP_INTERVAL
    major_ramp_interval: int = DEFAULT_MAJOR_RAMP_INTERVAL
    gun_position_cm: Tuple[float, float, float] = DEFAULT_GUN_POSITION_CM
    gun_direction: Tuple[float, float, float] = DEFAULT_GUN_DIRECTION
    output_format: str = 'csv'
    output_path: Optional[str] = None
    output_filename: Optional[str] = None
    overlap_policy: str = 'error'
    device: str = 'cpu'
    material_database_path: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.material_database_path is None:
            if DEFAULT_MATERIAL_DATABASE is None:
                raise ValueError(
                    "No material database path provided and default database not found. "
                    "Please generate the material database or provide explicit path."
                )
            self.material_database_path = DEFAULT_MATERIAL_DATABASE

        if self.detector_z_cm is None:
            self.detector_z_cm = 2 * self.absorber_half_thickness_cm + self.detector_half_thickness_cm

        if self.nominal_field_T is None:
            self.nominal_field_T = self.initial_field_T

        if self.output_filename is None:
            self.output_filename = 'output.h5' if self.output_format == 'hdf5' else 'output.csv'

        self.gun_position_cm = tuple(float(v) for v in self.gun_position_cm)
        self.gun_direction = tuple(float(v) for v in self.gun_direction)

        self._validate()

    def _validate(self) -> None:
        """Validate configuration parameters."""
        import torch
        from .logging import get_logger
        from .validation import InvalidConfigurationError
        logger = get_logger()

        if self.total_radius_cm <= 0:
            raise InvalidConfigurationError(
                f"total_radius_cm must be positive, got {self.total_radius_cm}"
            )
        if self.ring_width_cm <= 0:
            raise InvalidConfigurationError(
                f"ring_width_cm must be positive, got {self.ring_width_cm}"
            )
        if self.ring_width_cm > self.total_radius_cm:
            raise InvalidConfigurationError(
                f"ring_width_cm ({self.ring_width_cm}) exceeds total_radius_cm "
                f"({self.total_radius_cm}); no detector layer would fit"
            )

        if self.num_events < 0:
            raise InvalidConfigurationError(f"num_events must be non-negative, got {self.num_events}")

        for name in ('detector_half_thickness_cm', 'absorber_half_thickness_cm',
                     'absorber_radius_cm', 'world_half_length_cm'):
            if getattr(self, name) <= 0:
                raise InvalidConfigurationError(f"{name} must be positive, got {getattr(self, name)}")

        if self.world_half_length_cm <= self.total_radius_cm:
            raise InvalidConfigurationError(
                f"world_half_length_cm ({self.world_half_length_cm}) must exceed "
                f"total_radius_cm ({self.total_radius_cm})"
            )

        if self.initial_energy_MeV <= 0:
            raise InvalidConfigurationError(
                f"initial_energy_MeV must be positive, got {self.initial_energy_MeV}"
            )
        # Beam energy never decreases over a run
        if self.energy_step_MeV < 0:
            raise InvalidConfigurationError(
                f"energy_step_MeV must be non-negative, got {self.energy_step_MeV}"
            )

        if self.minor_ramp_interval <= 0 or self.major_ramp_interval <= 0:
            raise InvalidConfigurationError(
                f"Ramp intervals must be positive, got minor={self.minor_ramp_interval}, "
                f"major={self.major_ramp_interval}"
            )
        if self.major_ramp_interval % self.minor_ramp_interval != 0:
            raise InvalidConfigurationError(
                f"major_ramp_interval ({self.major_ramp_interval}) must be a multiple of "
                f"minor_ramp_interval ({self.minor_ramp_interval})"
            )

        if len(self.gun_position_cm) != 3 or len(self.gun_direction) != 3:
            raise InvalidConfigurationError("gun_position_cm and gun_direction must have 3 components")
        if not any(self.gun_direction):
            raise InvalidConfigurationError("gun_direction must be non-zero")

        if self.output_format not in OUTPUT_FORMATS:
            raise InvalidConfigurationError(
                f"output_format must be one of {OUTPUT_FORMATS}, got {self.output_format}"
            )
        if self.output_format != 'object' and not self.output_path:
            raise InvalidConfigurationError(
                f"output_path is required when output_format='{self.output_format}'"
            )

        if self.overlap_policy not in OVERLAP_POLICIES:
            raise InvalidConfigurationError(
                f"overlap_policy must be one of {OVERLAP_POLICIES}, got {self.overlap_policy}"
            )

        if self.device not in ['cuda', 'cpu']:
            raise InvalidConfigurationError(f"device must be 'cuda' or 'cpu', got {self.device}")

        if self.device == 'cuda' and not torch.cuda.is_available():
            logger.warning("CUDA requested but not available, falling back to CPU")
            self.device = 'cpu'

    @property
    def output_file(self) -> Optional[Path]:
        """Full path of the output table, or None for in-memory output."""
        if self.output_format == 'object':
            return None
        return Path(self.output_path) / self.output_filename

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'SimulationConfig':
        """Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            SimulationConfig instance
        """
        with open(yaml_path, 'r') as f:
            config_dict = yaml.safe_load(f) or {}

        for key in ('gun_position_cm', 'gun_direction'):
            if key in config_dict:
                config_dict[key] = tuple(config_dict[key])

        return cls(**config_dict)

    def to_yaml(self, yaml_path: str) -> None:
        """Save configuration to YAML file.

        Args:
            yaml_path: Path to save YAML configuration
        """
        config_dict = {
            'total_radius_cm': self.total_radius_cm,
            'ring_width_cm': self.ring_width_cm,
            'num_events': self.num_events,
            'detector_half_thickness_cm': self.detector_half_thickness_cm,
            'absorber_half_thickness_cm': self.absorber_half_thickness_cm,
            'absorber_radius_cm': self.absorber_radius_cm,
            'detector_z_cm': self.detector_z_cm,
            'world_half_length_cm': self.world_half_length_cm,
            'world_material': self.world_material,
            'absorber_material': self.absorber_material,
            'detector_material': self.detector_material,
            'particle': self.particle,
            'initial_energy_MeV': self.initial_energy_MeV,
            'energy_step_MeV': self.energy_step_MeV,
            'initial_field_T': self.initial_field_T,
            'field_step_T': self.field_step_T,
            'nominal_field_T': self.nominal_field_T,
            'minor_ramp_interval': self.minor_ramp_interval,
            'major_ramp_interval': self.major_ramp_interval,
            'gun_position_cm': list(self.gun_position_cm),
            'gun_direction': list(self.gun_direction),
            'output_format': self.output_format,
            'output_path': self.output_path,
            'output_filename': self.output_filename,
            'overlap_policy': self.overlap_policy,
            'device': self.device,
            'material_database_path': self.material_database_path,
        }

        Path(yaml_path).parent.mkdir(parents=True, exist_ok=True)
        with open(yaml_path, 'w') as f:
            yaml.dump(config_dict, f, default_flow_style=False)

    @staticmethod
    def get_default_config() -> 'SimulationConfig':
        """Get a default configuration for testing.

        Returns:
            SimulationConfig with default values
        """
        return SimulationConfig(
            total_radius_cm=DEFAULT_TOTAL_RADIUS_CM,
            ring_width_cm=DEFAULT_RING_WIDTH_CM,
            num_events=1000,
            output_format='csv',
            output_path='./results/'
        )
