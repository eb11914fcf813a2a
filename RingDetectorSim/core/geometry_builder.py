"""Geometry builder for the layered cylindrical detector."""

import math
from typing import List, Optional, Tuple
import numpy as np

from .data_models import (
    DetectorGeometry,
    Layer,
    MaterialProperties,
    PlacedVolume,
    WorldVolume
)
from ..physics.constants import DEFAULT_DETECTOR_HALF_THICKNESS_CM, EDGE_RTOL, TOLERANCE
from ..physics.material_database import MaterialDatabase
from ..utils.config import SimulationConfig
from ..utils.logging import get_logger
from ..utils.validation import GeometryOverlapError, InvalidConfigurationError


logger = get_logger()

ABSORBER_COLOUR = (131.0 / 255.0, 136.0 / 255.0, 145.0 / 255.0, 1.0)


def layer_count(total_radius_cm: float, ring_width_cm: float) -> int:
    """Number of whole rings of ``ring_width_cm`` that fit in ``total_radius_cm``.

    Ring ``k`` is kept while its outer edge ``k * ring_width_cm`` does not
    exceed ``total_radius_cm`` by more than a relative ``EDGE_RTOL``, so
    an edge that lands on the radius up to rounding still counts while a
    radius genuinely short of a whole ring does not. A trailing partial
    ring is dropped. Both the geometry and the output schema size
    themselves with this function.

    Raises:
        InvalidConfigurationError: If either length is not positive
    """
    if total_radius_cm <= 0 or ring_width_cm <= 0:
        raise InvalidConfigurationError(
            f"total_radius_cm and ring_width_cm must be positive, "
            f"got {total_radius_cm} and {ring_width_cm}"
        )

    limit = total_radius_cm * (1.0 + EDGE_RTOL)
    count = int(math.floor(total_radius_cm / ring_width_cm))
    while (count + 1) * ring_width_cm <= limit:
        count += 1
    while count > 0 and count * ring_width_cm > limit:
        count -= 1
    return count


def layer_colour(outer_radius_cm: float, total_radius_cm: float) -> Tuple[float, float, float, float]:
    """RGBA tag shading layers from purple at the axis to pale cyan at the rim."""
    fraction = min(max(outer_radius_cm / total_radius_cm, 0.0), 1.0)
    inner = np.array([152.0, 80.0, 204.0]) / 255.0
    outer = np.array([223.0, 240.0, 240.0]) / 255.0
    red, green, blue = inner + fraction * (outer - inner)
    return (float(red), float(green), float(blue), 0.6)


def build_layers(
    total_radius_cm: float,
    ring_width_cm: float,
    half_thickness_cm: float = DEFAULT_DETECTOR_HALF_THICKNESS_CM,
    material: Optional[MaterialProperties] = None
) -> List[Layer]:
    """Partition ``[0, total_radius_cm]`` into concentric shells.

    Layer ``k`` spans ``[ring_width * (k - 1), ring_width * k]`` and gets
    id ``k``. Layers are emitted while their outer edge stays within
    ``total_radius_cm``; the result is a pure function of the arguments.

    Args:
        total_radius_cm: Outer radius of the detector
        ring_width_cm: Radial width of each ring
        half_thickness_cm: Half-length of every shell along the beam axis
        material: Shell material

    Returns:
        Layers in increasing radial order
    """
    if half_thickness_cm <= 0:
        raise InvalidConfigurationError(
            f"half_thickness_cm must be positive, got {half_thickness_cm}"
        )

    num_layers = layer_count(total_radius_cm, ring_width_cm)
    if num_layers == 0:
        raise InvalidConfigurationError(
            f"ring_width_cm ({ring_width_cm}) exceeds total_radius_cm ({total_radius_cm}); "
            f"no detector layer fits"
        )

    edges = ring_width_cm * np.arange(num_layers + 1, dtype=np.float64)
    # Rounding may push the last edge a hair past the radius
    edges[-1] = min(edges[-1], total_radius_cm)

    return [
        Layer(
            layer_id=k,
            inner_radius_cm=float(edges[k - 1]),
            outer_radius_cm=float(edges[k]),
            half_thickness_cm=half_thickness_cm,
            material=material,
            colour=layer_colour(float(edges[k]), total_radius_cm)
        )
        for k in range(1, num_layers + 1)
    ]


def volumes_overlap(a: PlacedVolume, b: PlacedVolume, tolerance: float = TOLERANCE) -> bool:
    """Check whether two coaxial cylinders share a finite volume.

    Touching surfaces are not an overlap.
    """
    z_overlap = a.z_min_cm < b.z_max_cm - tolerance and b.z_min_cm < a.z_max_cm - tolerance
    r_overlap = (
        a.inner_radius_cm < b.outer_radius_cm - tolerance
        and b.inner_radius_cm < a.outer_radius_cm - tolerance
    )
    return z_overlap and r_overlap


def find_overlaps(
    world: WorldVolume,
    volumes: List[PlacedVolume],
    tolerance: float = TOLERANCE
) -> List[Tuple[str, str]]:
    """Find every pair of placed volumes that intersect.

    Volumes reaching outside the world are reported as overlapping the
    world itself.

    Returns:
        List of (name, name) pairs, one per overlap
    """
    overlaps = []
    for volume in volumes:
        if not world.contains(volume, tolerance):
            overlaps.append((world.name, volume.name))

    for i, first in enumerate(volumes):
        for second in volumes[i + 1:]:
            if volumes_overlap(first, second, tolerance):
                overlaps.append((first.name, second.name))

    return overlaps


class GeometryBuilder:
    """Builds and places the absorber and detector layers.

    The world is a vacuum box centred on the origin. A solid absorber
    cylinder sits at the upstream end of the detector and the concentric
    detector layers are placed downstream of it along the beam (z) axis.

    Attributes:
        material_database: Material lookup used for every volume
        overlap_policy: 'error' to raise on overlaps, 'warn' to log them
    """

    def __init__(self, material_database: MaterialDatabase, overlap_policy: str = 'error'):
        """Initialize GeometryBuilder.

        Args:
            material_database: Material lookup used for every volume
            overlap_policy: 'error' or 'warn'
        """
        if overlap_policy not in ('error', 'warn'):
            raise InvalidConfigurationError(
                f"overlap_policy must be 'error' or 'warn', got {overlap_policy}"
            )
        self.material_database = material_database
        self.overlap_policy = overlap_policy

    def build(self, config: SimulationConfig) -> DetectorGeometry:
        """Construct the placed detector geometry from a configuration.

        Args:
            config: Simulation configuration

        Returns:
            DetectorGeometry with world, absorber and layers

        Raises:
            GeometryOverlapError: If volumes overlap under the 'error' policy
        """
        world = WorldVolume(
            half_length_cm=config.world_half_length_cm,
            material=self.material_database.find_or_build(config.world_material)
        )

        absorber = PlacedVolume(
            name='Absorber',
            inner_radius_cm=0.0,
            outer_radius_cm=config.absorber_radius_cm,
            half_length_cm=config.absorber_half_thickness_cm,
            z_position_cm=config.absorber_half_thickness_cm,
            material=self.material_database.find_or_build(config.absorber_material),
            colour=ABSORBER_COLOUR
        )

        layers = build_layers(
            config.total_radius_cm,
            config.ring_width_cm,
            half_thickness_cm=config.detector_half_thickness_cm,
            material=self.material_database.find_or_build(config.detector_material)
        )

        placements = [
            PlacedVolume(
                name=layer.name,
                inner_radius_cm=layer.inner_radius_cm,
                outer_radius_cm=layer.outer_radius_cm,
                half_length_cm=layer.half_thickness_cm,
                z_position_cm=config.detector_z_cm,
                material=layer.material,
                colour=layer.colour,
                copy_number=layer.layer_id
            )
            for layer in layers
        ]

        geometry = DetectorGeometry(
            world=world,
            absorber=absorber,
            layers=layers,
            placements=placements,
            total_radius_cm=config.total_radius_cm,
            ring_width_cm=config.ring_width_cm
        )

        self.check_overlaps(geometry)

        logger.info(
            f"Geometry built: {geometry.num_layers} layers of {config.ring_width_cm} cm "
            f"up to r={layers[-1].outer_radius_cm} cm, absorber {absorber.material.name} "
            f"at z={absorber.z_position_cm} cm, detector {config.detector_material} "
            f"at z={config.detector_z_cm} cm"
        )
        return geometry

    def check_overlaps(self, geometry: DetectorGeometry) -> List[Tuple[str, str]]:
        """Check all placements and apply the overlap policy.

        Returns:
            The overlapping pairs (only reachable under the 'warn' policy
            when overlaps exist)
        """
        overlaps = find_overlaps(geometry.world, geometry.all_placements())

        for first, second in overlaps:
            logger.warning(f"Placed volumes overlap: '{first}' and '{second}'")

        if overlaps and self.overlap_policy == 'error':
            raise GeometryOverlapError(
                f"{len(overlaps)} geometric overlap(s) detected, first: "
                f"'{overlaps[0][0]}' and '{overlaps[0][1]}'"
            )
        return overlaps
