"""End-to-end tests for the run loop."""

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from RingDetectorSim import RunSimulator, SimulationConfig
from RingDetectorSim.physics.transport_engine import FixedDepositEngine, TransportEngine
from RingDetectorSim.utils.validation import (
    DepositRoutingError,
    GeometryOverlapError,
    RecorderClosedError,
)


class RecordingEngine(TransportEngine):
    """Engine depositing a per-event amount and checking the accumulators start clean."""

    def __init__(self, registry_source=None):
        self.geometry = None
        self.names = {}
        self.events = 0
        self.registry_source = registry_source

    def construct(self, geometry):
        self.geometry = geometry

    def add_sensitive_detector(self, name, layer_id):
        self.names[layer_id] = name

    def process_event(self, particle, deposit):
        if self.registry_source is not None:
            assert np.all(self.registry_source().totals() == 0.0)
        self.events += 1
        deposit(2, float(self.events))


class TestEndToEnd:
    """Full runs with deterministic engines."""

    def test_first_layer_deposits(self, csv_config, first_layer_engine):
        results = RunSimulator(csv_config, first_layer_engine).run()

        assert results['events'] == 100
        assert results['layers'] == 37
        assert len(results['columns']) == 39

        lines = csv_config.output_file.read_text().splitlines()
        assert len(lines) == 101
        header = lines[0].split(',')
        assert header[0] == 'Generated'
        assert header[1] == 'Magnetic field'
        assert header[2:] == [f'Detector{i}' for i in range(1, 38)]

        data = np.loadtxt(csv_config.output_file, delimiter=',', skiprows=1)
        assert data.shape == (100, 39)
        assert_array_equal(data[:, 2], 1.0)
        assert_array_equal(data[:, 3:], 0.0)

    def test_rows_record_fired_beam(self, object_config, first_layer_engine):
        results = RunSimulator(object_config, first_layer_engine).run(num_events=250)
        table = results['output']

        assert table.shape == (250, 39)
        assert_array_equal(table[:100, 0], 200.0)
        assert_array_equal(table[100:200, 0], 210.0)
        assert_array_equal(table[200:, 0], 220.0)
        assert_allclose(table[:10, 1], 0.1)
        assert_allclose(table[10:20, 1], 0.15)
        assert_allclose(table[90:100, 1], 0.55)
        assert_allclose(table[100:110, 1], 0.1)

        final = results['final_state']
        assert final.event_counter == 250
        assert final.energy_MeV == 220.0

    def test_engine_receives_geometry_and_detectors(self, object_config, first_layer_engine):
        simulator = RunSimulator(object_config, first_layer_engine)
        simulator.run(num_events=3)

        assert first_layer_engine.geometry is simulator.geometry
        assert len(first_layer_engine.sensitive_detectors) == 37
        assert [p.event_id for p in first_layer_engine.fired] == [0, 1, 2]
        assert first_layer_engine.fired[0].field_T == (0.1, 0.0, 0.0)

    def test_accumulators_reset_between_events(self, object_config):
        engine = RecordingEngine()
        simulator = RunSimulator(object_config, engine)
        engine.registry_source = lambda: simulator.registry

        table = simulator.run(num_events=5)['output']

        assert_array_equal(table[:, 3], [1.0, 2.0, 3.0, 4.0, 5.0])

    def test_split_deposits_are_summed(self, object_config):
        engine = FixedDepositEngine({1: 1.0, 10: 3.0}, steps_per_deposit=4)
        table = RunSimulator(object_config, engine).run(num_events=2)['output']

        assert_allclose(table[:, 2], 1.0)
        assert_allclose(table[:, 11], 3.0)

    def test_zero_events_writes_header_only(self, csv_config, first_layer_engine):
        RunSimulator(csv_config, first_layer_engine).run(num_events=0)
        assert len(csv_config.output_file.read_text().splitlines()) == 1

    def test_log_file_written(self, csv_config, first_layer_engine):
        RunSimulator(csv_config, first_layer_engine).run(num_events=1)
        assert (csv_config.output_file.parent / 'simulation.log').exists()


class TestFailures:
    """Faults abort the run."""

    def test_unknown_layer_aborts_run(self, object_config):
        engine = FixedDepositEngine({38: 1.0})
        simulator = RunSimulator(object_config, engine)

        with pytest.raises(DepositRoutingError):
            simulator.run(num_events=10)

        assert not simulator.recorder.handle.is_open
        assert simulator.recorder.handle.rows_written == 0

    def test_second_run_keeps_first_table(self, csv_config, first_layer_engine):
        simulator = RunSimulator(csv_config, first_layer_engine)
        simulator.run(num_events=5)
        first_table = csv_config.output_file.read_text()

        with pytest.raises(RecorderClosedError):
            simulator.run(num_events=2)

        assert csv_config.output_file.read_text() == first_table
        assert len(first_table.splitlines()) == 6
        assert len(first_layer_engine.fired) == 5

    def test_overlap_fails_before_first_event(self):
        config = SimulationConfig(
            total_radius_cm=75.0, ring_width_cm=2.0, detector_z_cm=12.0,
            output_format='object'
        )
        engine = FixedDepositEngine({1: 1.0})

        with pytest.raises(GeometryOverlapError):
            RunSimulator(config, engine)
        assert engine.fired == []

    def test_overlap_warn_policy_still_runs(self):
        config = SimulationConfig(
            total_radius_cm=75.0, ring_width_cm=2.0, detector_z_cm=12.0,
            output_format='object', overlap_policy='warn'
        )
        results = RunSimulator(config, FixedDepositEngine({1: 1.0})).run(num_events=2)
        assert results['events'] == 2
