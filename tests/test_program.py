"""Tests for the device program, policies, colors and scenario config."""

from __future__ import annotations

import math

import numpy as np
import pytest

from collection_dynamics.blocks.abf import HOP_INF
from collection_dynamics.core.context import Context
from collection_dynamics.core.device import Device
from collection_dynamics.scenario.colors import BLACK, collection_color, distance_color
from collection_dynamics.scenario.config import ScenarioConfig, hop_radius_for, side_for
from collection_dynamics.scenario.policies import (
    elapsed_time_source, fixed_source, hop_radius, stored_source,
)
from collection_dynamics.scenario.program import CollectionProgram
from collection_dynamics.simulation.engine import SimulationEngine
from collection_dynamics.simulation.network import Network


def _ctx(did: int, round_count: int, storage: dict) -> Context:
    dev = Device(id=did, position=np.zeros(2), storage=storage)
    return Context(dev, {}, round_count=round_count)


# ── Configuration ────────────────────────────────────────────────────

class TestScenarioConfig:
    def test_side_defaults_to_constant_density(self):
        config = ScenarioConfig(devices=100)
        assert config.side == pytest.approx(math.sqrt(300000))
        assert config.side == side_for(100)

    def test_hop_radius(self):
        assert ScenarioConfig(devices=100).hop_radius == 13
        assert ScenarioConfig(devices=1, side=10.0).hop_radius == 1
        assert hop_radius_for(250.0, 100.0) == 6
        assert hop_radius_for(0.0, 100.0) == 1

    @pytest.mark.parametrize("kwargs", [
        {"devices": 0},
        {"speed": -1.0},
        {"comm": 0.0},
        {"side": -5.0},
        {"end_time": -1},
    ])
    def test_rejects_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            ScenarioConfig(**kwargs)

    def test_build_network(self):
        config = ScenarioConfig(devices=40, speed=1.0, seed=7)
        net = config.build_network()
        assert len(net.devices) == 40
        for dev in net.devices.values():
            assert 0 <= dev.position[0] <= config.side
            assert 0 <= dev.position[1] <= config.side
            assert dev.storage["devices"] == 40
            assert dev.storage["speed"] == 1.0

    def test_same_seed_same_deployment(self):
        a = ScenarioConfig(devices=10, seed=3).build_network()
        b = ScenarioConfig(devices=10, seed=3).build_network()
        for did in a.devices:
            assert np.allclose(a.devices[did].position, b.devices[did].position)


# ── Policies ─────────────────────────────────────────────────────────

class TestPolicies:
    def test_hop_radius_from_storage(self):
        assert hop_radius(_ctx(0, 0, {"side": 400.0, "comm": 100.0})) == 10
        assert hop_radius(_ctx(0, 0, {"side": 1.0, "comm": 100.0})) == 1

    def test_hop_radius_agrees_with_config(self):
        for devices in (1, 100, 400, 1000):
            config = ScenarioConfig(devices=devices)
            ctx = _ctx(0, 0, config.storage())
            assert hop_radius(ctx) == config.hop_radius
            assert config.hop_radius == hop_radius_for(config.side, config.comm)

    def test_elapsed_time_source_migrates(self):
        storage = {"side": 400.0, "comm": 100.0}
        assert elapsed_time_source(_ctx(0, 0, storage))
        assert elapsed_time_source(_ctx(0, 19, storage))
        assert not elapsed_time_source(_ctx(0, 20, storage))
        assert elapsed_time_source(_ctx(1, 20, storage))
        assert elapsed_time_source(_ctx(2, 45, storage))

    def test_fixed_and_stored_source(self):
        assert fixed_source(3)(_ctx(3, 99, {}))
        assert not fixed_source(3)(_ctx(2, 0, {}))
        assert stored_source(_ctx(0, 0, {"is_source": True}))
        assert not stored_source(_ctx(0, 0, {}))


# ── Colors ───────────────────────────────────────────────────────────

class TestColors:
    def test_unreachable_is_black(self):
        assert distance_color(HOP_INF, 10) == BLACK

    def test_source_is_red(self):
        assert distance_color(0, 10) == pytest.approx((1.0, 0.0, 0.0))

    def test_undercount_hue(self):
        assert collection_color(100, 1.0) == pytest.approx((1.0, 0.0, 0.0))

    def test_exact_count_is_magenta(self):
        assert collection_color(100, 100.0) == pytest.approx((1.0, 0.0, 1.0))

    def test_overcount_darkens(self):
        assert collection_color(100, 200.0) == pytest.approx((0.5, 0.0, 0.5))


# ── Device program ───────────────────────────────────────────────────

def _single_device(**storage) -> Network:
    net = Network(comm_range=100.0)
    net.add_device((5, 5), {"devices": 1, "side": 10.0, "speed": 0.0, **storage},
                   device_id=0)
    net.update_neighbors()
    return net


class TestCollectionProgram:
    def test_isolated_non_source(self):
        engine = SimulationEngine(_single_device(), CollectionProgram(fixed_source(5)))
        engine.run(4)
        out = engine.results[0]
        assert out["dist"] == HOP_INF
        assert out["dist_c"] == BLACK
        assert out["diam"] == 0.0
        assert out["coll_simple"] == 1.0
        assert out["coll_filtered"] == 1.0
        assert out["node_size"] == 12
        assert out["node_shape"] == "sphere"

    def test_isolated_source(self):
        engine = SimulationEngine(_single_device(), CollectionProgram(fixed_source(0)))
        engine.run(4)
        out = engine.results[0]
        assert out["dist"] == 0
        assert out["parent"] == 0
        assert out["source"] is True
        assert out["node_size"] == 20
        assert out["node_shape"] == "cube"

    def test_outputs_are_stored(self):
        net = _single_device()
        engine = SimulationEngine(net, CollectionProgram())
        engine.step()
        storage = net.devices[0].storage
        for key in ("dist", "dist_c", "diam", "diamdev", "coll_simple",
                    "coll_filtered", "coll_max_simple", "coll_max_filtered",
                    "coll_c_simple", "coll_c_filtered", "coll_ideal"):
            assert key in storage

    def test_static_network_counts_every_device(self):
        config = ScenarioConfig(devices=30, seed=2, side=200.0)
        net = config.build_network()
        reachable = net.connected_component(0)
        engine = SimulationEngine(net, CollectionProgram(fixed_source(0)))
        engine.run(2 * len(reachable) + 5)
        out = engine.results[0]
        assert out["coll_simple"] == float(len(reachable))
        assert out["coll_filtered"] == float(len(reachable))
        assert out["coll_max_filtered"] >= float(len(reachable))
        assert out["coll_ideal"] == 30.0

    def test_diameter_estimate(self):
        net = Network.line(5, storage_fn=lambda did: {"devices": 5, "side": 100.0})
        engine = SimulationEngine(net, CollectionProgram(fixed_source(0)))
        engine.run(12)
        for out in engine.results.values():
            assert out["diam"] == 4.0
            assert out["diamdev"] == 20.0

    def test_single_elected_source(self):
        config = ScenarioConfig(devices=100, seed=0)
        engine = SimulationEngine(config.build_network(), CollectionProgram(),
                                  seed=config.seed)
        engine.run(30)
        for t, results in enumerate(engine.history):
            sources = [did for did, out in results.items() if out["source"]]
            assert sources == [t // (2 * config.hop_radius)]

    def test_custom_edge_policy(self):
        net = Network.line(4, storage_fn=lambda did: {"devices": 4, "side": 100.0})
        program = CollectionProgram(fixed_source(0), edge=lambda nbr_hops, hops: False)
        engine = SimulationEngine(net, program)
        engine.run(10)
        assert engine.results[0]["coll_filtered"] == 1.0
        assert engine.results[0]["coll_simple"] == 4.0

    def test_moving_devices_stay_in_area(self):
        config = ScenarioConfig(devices=30, speed=2.0, seed=5)
        net = config.build_network()
        start = {did: dev.position.copy() for did, dev in net.devices.items()}
        engine = SimulationEngine(net, CollectionProgram(), seed=config.seed)
        engine.run(20)
        moved = 0
        for did, dev in net.devices.items():
            assert np.all(dev.position >= 0) and np.all(dev.position <= config.side)
            moved += not np.allclose(dev.position, start[did])
        assert moved == 30
