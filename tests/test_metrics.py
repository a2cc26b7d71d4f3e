"""Tests for the metrics registry and batch runs."""

from __future__ import annotations

import math

import pytest

from collection_dynamics.scenario.batch import (
    final_rows, make_parameters, mean_by, run_batch, run_scenario,
)
from collection_dynamics.scenario.config import ScenarioConfig
from collection_dynamics.simulation.metrics import (
    METRICS, MetricsRecorder, aggregate, register_metric,
)


class TestRegistry:
    def test_tracked_quantities(self):
        for name in ("diam", "diamdev", "coll_simple", "coll_filtered",
                     "coll_max_simple", "coll_max_filtered", "coll_ideal"):
            assert name in METRICS

    def test_aggregate_takes_maximum(self):
        results = {
            0: {"coll_simple": 3.0, "coll_filtered": 1.0},
            1: {"coll_simple": 5.0, "coll_filtered": 2.0},
        }
        row = aggregate(results, ["coll_simple", "coll_filtered"])
        assert row == {"coll_simple": 5.0, "coll_filtered": 2.0}

    def test_missing_values_are_nan(self):
        row = aggregate({0: {}}, ["diam"])
        assert math.isnan(row["diam"])

    def test_unknown_metric(self):
        with pytest.raises(KeyError):
            aggregate({0: {"x": 1.0}}, ["not_a_metric"])

    def test_register_metric(self):
        register_metric("dist_total", lambda values: sum(values))
        try:
            row = aggregate({0: {"dist_total": 2}, 1: {"dist_total": 3}}, ["dist_total"])
            assert row["dist_total"] == 5.0
        finally:
            del METRICS["dist_total"]


class TestRecorder:
    def test_frame_has_one_row_per_round(self):
        recorder = MetricsRecorder(["coll_simple"], speed=1.0)
        recorder(0.0, {0: {"coll_simple": 1.0}})
        recorder(1.0, {0: {"coll_simple": 2.0}})
        frame = recorder.frame()
        assert list(frame.columns) == ["speed", "time", "coll_simple"]
        assert frame["coll_simple"].tolist() == [1.0, 2.0]


class TestBatch:
    def test_make_parameters(self):
        params = make_parameters(seeds=range(2), devices=(10, 20), speeds=(0.0, 1.0))
        assert len(params) == 8
        assert {(p.devices, p.speed) for p in params} == {
            (10, 0.0), (10, 1.0), (20, 0.0), (20, 1.0),
        }

    def test_run_scenario(self):
        frame = run_scenario(ScenarioConfig(devices=20, seed=1, end_time=10))
        assert frame["time"].tolist() == [float(t) for t in range(11)]
        assert (frame["coll_ideal"] == 20.0).all()
        assert (frame["coll_simple"] >= 1.0).all()
        assert (frame["devices"] == 20).all()

    def test_run_batch_and_final_rows(self):
        params = make_parameters(seeds=range(2), devices=(15,), speeds=(0.0, 1.0),
                                 end_time=5)
        frame = run_batch(params)
        assert len(frame) == 4 * 6
        final = final_rows(frame, end_time=5)
        assert len(final) == 4
        means = mean_by(final, "speed")
        assert means["speed"].tolist() == [0.0, 1.0]

    def test_empty_batch(self):
        assert run_batch([]).empty

    def test_run_scenario_keeps_no_history(self, monkeypatch):
        import collection_dynamics.scenario.batch as batch
        from collection_dynamics.simulation.engine import SimulationEngine

        engines = []

        class RecordingEngine(SimulationEngine):
            def __init__(self, *args, **kwargs):
                super().__init__(*args, **kwargs)
                engines.append(self)

        monkeypatch.setattr(batch, "SimulationEngine", RecordingEngine)
        frame = run_scenario(ScenarioConfig(devices=10, seed=0, end_time=4))
        assert len(frame) == 5
        assert len(engines) == 1
        assert engines[0].history == []
        assert engines[0].round_count == 5
        assert len(engines[0].results) == 10
