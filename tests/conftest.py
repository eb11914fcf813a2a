"""Pytest configuration and shared fixtures for RingDetectorSim tests."""

import pytest

from RingDetectorSim.core.geometry_builder import build_layers
from RingDetectorSim.physics.material_database import MaterialDatabase
from RingDetectorSim.physics.transport_engine import FixedDepositEngine
from RingDetectorSim.physics_data import DEFAULT_MATERIAL_DATABASE
from RingDetectorSim.utils.config import SimulationConfig


@pytest.fixture
def material_database():
    """Bundled NIST material database."""
    return MaterialDatabase(DEFAULT_MATERIAL_DATABASE)


@pytest.fixture
def csv_config(tmp_path):
    """75 cm detector with 2 cm rings writing CSV to a temporary directory."""
    return SimulationConfig(
        total_radius_cm=75.0,
        ring_width_cm=2.0,
        num_events=100,
        output_format='csv',
        output_path=str(tmp_path)
    )


@pytest.fixture
def object_config():
    """75 cm detector with 2 cm rings keeping the table in memory."""
    return SimulationConfig(
        total_radius_cm=75.0,
        ring_width_cm=2.0,
        num_events=100,
        output_format='object'
    )


@pytest.fixture
def layers():
    """Layers of the 75 cm / 2 cm detector."""
    return build_layers(75.0, 2.0)


@pytest.fixture
def first_layer_engine():
    """Engine depositing 1 MeV into layer 1 on every event."""
    return FixedDepositEngine({1: 1.0})
