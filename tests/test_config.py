"""Tests for configuration, validation and the material database."""

import json

import pytest

from RingDetectorSim.physics.material_database import MaterialDatabase
from RingDetectorSim.utils.config import SimulationConfig
from RingDetectorSim.utils.validation import InvalidConfigurationError, validate_config


class TestSimulationConfig:
    """Tests for SimulationConfig."""

    def test_defaults(self):
        config = SimulationConfig(output_format='object')

        assert config.total_radius_cm == 100.0
        assert config.ring_width_cm == 1.0
        assert config.nominal_field_T == config.initial_field_T
        assert config.detector_z_cm == 20.0
        assert config.output_file is None

    def test_default_config(self):
        config = SimulationConfig.get_default_config()
        assert config.output_format == 'csv'
        assert config.output_file.name == 'output.csv'

    @pytest.mark.parametrize("overrides", [
        {'total_radius_cm': 0.0},
        {'ring_width_cm': -1.0},
        {'ring_width_cm': 200.0},
        {'num_events': -1},
        {'energy_step_MeV': -5.0},
        {'minor_ramp_interval': 0},
        {'major_ramp_interval': 25},
        {'world_half_length_cm': 50.0},
        {'overlap_policy': 'ignore'},
        {'output_format': 'root'},
        {'device': 'tpu'},
        {'gun_direction': (0.0, 0.0, 0.0)},
    ])
    def test_invalid_values_rejected(self, overrides):
        params = {'output_format': 'object'}
        params.update(overrides)
        with pytest.raises(InvalidConfigurationError):
            SimulationConfig(**params)

    def test_configuration_fault_is_value_error(self):
        with pytest.raises(ValueError):
            SimulationConfig(ring_width_cm=0.0, output_format='object')

    def test_file_output_requires_path(self):
        with pytest.raises(InvalidConfigurationError, match="output_path"):
            SimulationConfig(output_format='csv')

    def test_yaml_round_trip(self, tmp_path):
        config = SimulationConfig(
            total_radius_cm=75.0, ring_width_cm=2.0, num_events=50,
            output_format='hdf5', output_path=str(tmp_path / 'run'),
            gun_position_cm=(1.0, 0.0, -200.0)
        )
        yaml_path = tmp_path / 'config.yaml'
        config.to_yaml(str(yaml_path))

        loaded = SimulationConfig.from_yaml(str(yaml_path))

        assert loaded == config
        assert loaded.gun_position_cm == (1.0, 0.0, -200.0)

    def test_partial_yaml_uses_defaults(self, tmp_path):
        yaml_path = tmp_path / 'config.yaml'
        yaml_path.write_text("total_radius_cm: 75.0\nring_width_cm: 2.0\noutput_format: object\n")

        config = SimulationConfig.from_yaml(str(yaml_path))

        assert config.total_radius_cm == 75.0
        assert config.minor_ramp_interval == 10


class TestValidateConfig:
    """Tests for validate_config."""

    def test_valid_config_passes(self, object_config):
        validate_config(object_config)

    def test_unknown_material_rejected(self):
        config = SimulationConfig(detector_material='G4_UNOBTAINIUM', output_format='object')
        with pytest.raises(InvalidConfigurationError, match="G4_UNOBTAINIUM"):
            validate_config(config)

    def test_missing_database_rejected(self, tmp_path):
        config = SimulationConfig(
            output_format='object', material_database_path=str(tmp_path / 'missing.json')
        )
        with pytest.raises(InvalidConfigurationError):
            validate_config(config)


class TestMaterialDatabase:
    """Tests for MaterialDatabase."""

    def test_bundled_materials(self, material_database):
        for name in ('G4_Galactic', 'G4_Pb', 'G4_lAr', 'G4_Si'):
            assert name in material_database

        lead = material_database.find_or_build('G4_Pb')
        assert lead.density_g_cm3 == pytest.approx(11.35)
        assert lead.effective_z == 82.0

    def test_lookup_returns_same_instance(self, material_database):
        assert material_database.find_or_build('G4_lAr') is material_database.find_or_build('G4_lAr')

    def test_unknown_material(self, material_database):
        with pytest.raises(InvalidConfigurationError):
            material_database.find_or_build('G4_NOPE')

    def test_custom_database(self, tmp_path):
        db_path = tmp_path / 'materials.json'
        db_path.write_text(json.dumps({'G4_Xe': {'density_g_cm3': 0.0054, 'effective_z': 54}}))

        database = MaterialDatabase(str(db_path))

        assert len(database) == 1
        assert database.find_or_build('G4_Xe').state == 'solid'

    def test_non_positive_density_rejected(self, tmp_path):
        db_path = tmp_path / 'materials.json'
        db_path.write_text(json.dumps({'bad': {'density_g_cm3': 0.0, 'effective_z': 1}}))

        with pytest.raises(ValueError):
            MaterialDatabase(str(db_path))

    def test_malformed_json_rejected(self, tmp_path):
        db_path = tmp_path / 'materials.json'
        db_path.write_text('{not json')

        with pytest.raises(ValueError):
            MaterialDatabase(str(db_path))
