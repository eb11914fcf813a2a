"""Tests for layer partitioning, placement and overlap checks."""

import logging
import math

import pytest
from numpy.testing import assert_allclose

from RingDetectorSim.core.data_models import PlacedVolume, WorldVolume
from RingDetectorSim.core.geometry_builder import (
    GeometryBuilder,
    build_layers,
    find_overlaps,
    layer_colour,
    layer_count,
    volumes_overlap,
)
from RingDetectorSim.utils.config import SimulationConfig
from RingDetectorSim.utils.validation import GeometryOverlapError, InvalidConfigurationError


class TestBuildLayers:
    """Tests for the radial partitioning."""

    @pytest.mark.parametrize("total_radius, ring_width", [
        (75.0, 2.0),
        (100.0, 1.0),
        (10.0, 3.0),
        (5.0, 5.0),
        (1.0, 0.25),
        (12.5, 0.5),
        (7.0, 6.9),
    ])
    def test_layer_count_is_floor_of_ratio(self, total_radius, ring_width):
        layers = build_layers(total_radius, ring_width)
        assert len(layers) == math.floor(total_radius / ring_width)

    @pytest.mark.parametrize("total_radius, ring_width", [
        (75.0, 2.0),
        (10.0, 3.0),
        (0.9, 0.3),
        (0.7, 0.1),
    ])
    def test_layers_tile_radius(self, total_radius, ring_width):
        layers = build_layers(total_radius, ring_width)

        assert layers[0].inner_radius_cm == 0.0
        for previous, current in zip(layers, layers[1:]):
            assert current.inner_radius_cm == previous.outer_radius_cm
        for layer in layers:
            assert layer.outer_radius_cm > layer.inner_radius_cm
            assert layer.outer_radius_cm <= total_radius
        assert layers[-1].outer_radius_cm > total_radius - ring_width

    def test_radius_just_short_of_whole_ring_drops_it(self):
        layers = build_layers(2.9999999999, 1.0)

        assert len(layers) == 2
        assert layer_count(2.9999999999, 1.0) == 2
        for layer in layers:
            assert layer.width_cm == pytest.approx(1.0)

    @pytest.mark.parametrize("total_radius, ring_width, expected", [
        (0.7, 0.1, 7),
        (0.9, 0.3, 3),
        (3.0, 1.0, 3),
    ])
    def test_edge_on_radius_up_to_rounding_is_kept(self, total_radius, ring_width, expected):
        layers = build_layers(total_radius, ring_width)

        assert len(layers) == expected
        assert layers[-1].width_cm == pytest.approx(ring_width)

    def test_ids_are_one_based_and_increasing(self, layers):
        assert [layer.layer_id for layer in layers] == list(range(1, 38))
        assert layers[0].name == 'Detector1'
        assert layers[-1].name == 'Detector37'

    def test_partial_ring_is_truncated(self):
        layers = build_layers(75.0, 2.0)
        assert len(layers) == 37
        assert layers[-1].inner_radius_cm == 72.0
        assert layers[-1].outer_radius_cm == 74.0

    def test_same_inputs_give_same_layers(self):
        assert build_layers(75.0, 2.0) == build_layers(75.0, 2.0)

    def test_half_thickness_is_shared(self):
        layers = build_layers(20.0, 4.0, half_thickness_cm=3.5)
        assert {layer.half_thickness_cm for layer in layers} == {3.5}

    @pytest.mark.parametrize("total_radius, ring_width", [
        (0.0, 1.0),
        (-5.0, 1.0),
        (10.0, 0.0),
        (10.0, -2.0),
    ])
    def test_non_positive_lengths_rejected(self, total_radius, ring_width):
        with pytest.raises(InvalidConfigurationError):
            build_layers(total_radius, ring_width)

    def test_ring_wider_than_radius_rejected(self):
        with pytest.raises(InvalidConfigurationError, match="no detector layer fits"):
            build_layers(1.0, 2.0)

    def test_layer_count_matches_build(self):
        assert layer_count(75.0, 2.0) == len(build_layers(75.0, 2.0))


class TestLayerColour:
    """Tests for the visual tag."""

    def test_depends_only_on_radii(self):
        assert layer_colour(10.0, 75.0) == layer_colour(10.0, 75.0)

    def test_shades_with_radius(self):
        inner = layer_colour(2.0, 75.0)
        outer = layer_colour(74.0, 75.0)
        assert inner != outer
        assert inner[3] == outer[3] == 0.6

    def test_components_in_unit_range(self, layers):
        for layer in layers:
            assert all(0.0 <= c <= 1.0 for c in layer.colour)


def _cylinder(name, r_in, r_out, half, z, material):
    return PlacedVolume(
        name=name, inner_radius_cm=r_in, outer_radius_cm=r_out,
        half_length_cm=half, z_position_cm=z, material=material
    )


class TestOverlaps:
    """Tests for placement overlap detection."""

    def test_touching_volumes_do_not_overlap(self, material_database):
        lead = material_database.find_or_build('G4_Pb')
        a = _cylinder('a', 0.0, 50.0, 5.0, 5.0, lead)
        b = _cylinder('b', 0.0, 50.0, 10.0, 20.0, lead)
        assert not volumes_overlap(a, b)

    def test_adjacent_rings_do_not_overlap(self, material_database):
        argon = material_database.find_or_build('G4_lAr')
        a = _cylinder('a', 0.0, 2.0, 10.0, 20.0, argon)
        b = _cylinder('b', 2.0, 4.0, 10.0, 20.0, argon)
        assert not volumes_overlap(a, b)

    def test_intersecting_volumes_overlap(self, material_database):
        lead = material_database.find_or_build('G4_Pb')
        a = _cylinder('a', 0.0, 50.0, 5.0, 5.0, lead)
        b = _cylinder('b', 10.0, 12.0, 10.0, 12.0, lead)
        assert volumes_overlap(a, b)

    def test_volume_outside_world_reported(self, material_database):
        vacuum = material_database.find_or_build('G4_Galactic')
        world = WorldVolume(half_length_cm=100.0, material=vacuum)
        volume = _cylinder('big', 0.0, 150.0, 10.0, 0.0, vacuum)
        assert find_overlaps(world, [volume]) == [('World', 'big')]


class TestGeometryBuilder:
    """Tests for the placed detector geometry."""

    def test_builds_world_absorber_and_layers(self, material_database, object_config):
        geometry = GeometryBuilder(material_database).build(object_config)

        assert geometry.num_layers == 37
        assert geometry.world.half_length_cm == 250.0
        assert geometry.world.material.name == 'G4_Galactic'
        assert geometry.absorber.material.name == 'G4_Pb'
        assert geometry.absorber.z_position_cm == 5.0
        assert len(geometry.placements) == geometry.num_layers
        for layer, placement in zip(geometry.layers, geometry.placements):
            assert placement.name == layer.name
            assert placement.copy_number == layer.layer_id
            assert placement.z_position_cm == 20.0
            assert placement.material.name == 'G4_lAr'

    def test_default_placement_has_no_overlaps(self, material_database, object_config):
        builder = GeometryBuilder(material_database)
        geometry = builder.build(object_config)
        assert builder.check_overlaps(geometry) == []

    def test_absorber_overlap_is_fatal_by_default(self, material_database):
        config = SimulationConfig(
            total_radius_cm=75.0, ring_width_cm=2.0, detector_z_cm=12.0,
            output_format='object'
        )
        with pytest.raises(GeometryOverlapError):
            GeometryBuilder(material_database).build(config)

    def test_every_overlap_logged_under_warn_policy(self, material_database, caplog):
        config = SimulationConfig(
            total_radius_cm=75.0, ring_width_cm=2.0, detector_z_cm=12.0,
            output_format='object', overlap_policy='warn'
        )
        builder = GeometryBuilder(material_database, overlap_policy='warn')

        with caplog.at_level(logging.WARNING, logger='ring_detector_sim'):
            geometry = builder.build(config)

        # Absorber (r < 50 cm) overlaps the 25 rings with inner radius below 50 cm
        overlap_lines = [r for r in caplog.records if 'overlap' in r.getMessage()]
        assert len(overlap_lines) == 25
        assert geometry.num_layers == 37

    def test_unknown_policy_rejected(self, material_database):
        with pytest.raises(InvalidConfigurationError):
            GeometryBuilder(material_database, overlap_policy='ignore')

    def test_layer_radii_follow_config(self, material_database):
        config = SimulationConfig(total_radius_cm=10.0, ring_width_cm=2.5, output_format='object')
        geometry = GeometryBuilder(material_database).build(config)
        assert_allclose(
            [layer.outer_radius_cm for layer in geometry.layers],
            [2.5, 5.0, 7.5, 10.0]
        )
