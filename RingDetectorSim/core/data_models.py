"""Core data models for the ring detector simulation."""

from dataclasses import dataclass, field
from typing import Tuple, List, Optional
import numpy as np


@dataclass(frozen=True)
class MaterialProperties:
    """Bulk properties of a detector material.

    Attributes:
        name: NIST material name (e.g., 'G4_lAr')
        density_g_cm3: Density in g/cm³
        effective_z: Effective atomic number
        state: Physical state ('solid', 'liquid' or 'gas')
    """
    name: str
    density_g_cm3: float
    effective_z: float
    state: str = 'solid'


def detector_name(layer_id: int) -> str:
    """Volume and sensitive detector name of a layer id."""
    return f"Detector{layer_id}"


@dataclass(frozen=True)
class Layer:
    """One concentric detector shell around the beam axis.

    Attributes:
        layer_id: 1-based id, increasing with radius
        inner_radius_cm: Inner shell radius in cm
        outer_radius_cm: Outer shell radius in cm
        half_thickness_cm: Half-length along the beam axis in cm
        material: Shell material
        colour: RGBA visual tag, a function of the outer radius only
    """
    layer_id: int
    inner_radius_cm: float
    outer_radius_cm: float
    half_thickness_cm: float
    material: Optional[MaterialProperties]
    colour: Tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)

    @property
    def name(self) -> str:
        return detector_name(self.layer_id)

    @property
    def width_cm(self) -> float:
        return self.outer_radius_cm - self.inner_radius_cm


@dataclass(frozen=True)
class PlacedVolume:
    """A cylindrical volume placed in the world along the beam axis.

    Attributes:
        name: Volume name
        inner_radius_cm: Inner radius in cm (0 for a solid cylinder)
        outer_radius_cm: Outer radius in cm
        half_length_cm: Half-length along z in cm
        z_position_cm: Centre position along z in cm
        material: Volume material
        colour: RGBA visual tag
        copy_number: Placement copy number
    """
    name: str
    inner_radius_cm: float
    outer_radius_cm: float
    half_length_cm: float
    z_position_cm: float
    material: MaterialProperties
    colour: Tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)
    copy_number: int = 0

    @property
    def z_min_cm(self) -> float:
        return self.z_position_cm - self.half_length_cm

    @property
    def z_max_cm(self) -> float:
        return self.z_position_cm + self.half_length_cm


@dataclass(frozen=True)
class WorldVolume:
    """Cubic world box centred on the origin.

    Attributes:
        half_length_cm: Half-length of each side in cm
        material: World material
    """
    half_length_cm: float
    material: MaterialProperties
    name: str = 'World'

    def contains(self, volume: PlacedVolume, tolerance: float = 0.0) -> bool:
        """Check that a placed volume lies fully inside the world box."""
        return (
            volume.outer_radius_cm <= self.half_length_cm + tolerance
            and volume.z_min_cm >= -self.half_length_cm - tolerance
            and volume.z_max_cm <= self.half_length_cm + tolerance
        )


@dataclass
class DetectorGeometry:
    """Complete placed geometry handed to the transport engine.

    Attributes:
        world: World bounding volume
        absorber: Upstream absorber placement
        layers: Detector layers in increasing radial order
        placements: One placement per layer, index-aligned with layers
        total_radius_cm: Radius the layers were partitioned from
        ring_width_cm: Ring width the layers were partitioned with
    """
    world: WorldVolume
    absorber: PlacedVolume
    layers: List[Layer]
    placements: List[PlacedVolume]
    total_radius_cm: float
    ring_width_cm: float

    @property
    def num_layers(self) -> int:
        return len(self.layers)

    @property
    def layer_ids(self) -> List[int]:
        return [layer.layer_id for layer in self.layers]

    def all_placements(self) -> List[PlacedVolume]:
        """All placed daughter volumes of the world, upstream first."""
        return [self.absorber] + list(self.placements)


@dataclass(frozen=True)
class BeamState:
    """Emission parameters of the particle source.

    Attributes:
        energy_MeV: Beam energy in MeV, non-decreasing over the run
        field_T: Transverse (x) magnetic field strength in tesla
        event_counter: Number of particles fired so far
    """
    energy_MeV: float
    field_T: float
    event_counter: int = 0


@dataclass(frozen=True)
class ParticleSpec:
    """Everything the transport engine needs to fire one primary.

    Attributes:
        particle: Particle name (e.g., 'e-')
        energy_MeV: Kinetic energy in MeV
        position_cm: Gun position (x, y, z) in cm
        direction: Unit momentum direction (x, y, z)
        field_T: Uniform magnetic field vector in tesla
        event_id: 0-based id of the event being fired
    """
    particle: str
    energy_MeV: float
    position_cm: Tuple[float, float, float]
    direction: Tuple[float, float, float]
    field_T: Tuple[float, float, float]
    event_id: int = 0


@dataclass
class OutputRow:
    """One recorded observation of the output table.

    Attributes:
        generated_energy_MeV: Beam energy the particle was fired with
        field_T: Field strength the particle was fired with
        deposits_MeV: Deposited energy per layer, index i holds layer i + 1
    """
    generated_energy_MeV: float
    field_T: float
    deposits_MeV: np.ndarray = field(default_factory=lambda: np.zeros(0))

    @property
    def num_columns(self) -> int:
        return 2 + len(self.deposits_MeV)

    def as_array(self) -> np.ndarray:
        """Row values in column order."""
        return np.concatenate((
            np.array([self.generated_energy_MeV, self.field_T], dtype=np.float64),
            np.asarray(self.deposits_MeV, dtype=np.float64)
        ))


@dataclass
class TableHandle:
    """Open output table owned by a RunRecorder.

    Attributes:
        columns: Column names in order
        path: Output file path (None for in-memory tables)
        rows_written: Number of data rows written so far
        is_open: False once the table has been finalized or aborted
    """
    columns: List[str]
    path: Optional[str] = None
    rows_written: int = 0
    is_open: bool = True

    @property
    def num_columns(self) -> int:
        return len(self.columns)

    @property
    def detector_columns(self) -> List[str]:
        return self.columns[2:]
