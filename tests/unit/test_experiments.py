"""Unit tests for the experiment harness."""

import numpy as np
import pytest

from meshsim.core import create_protocol
from meshsim.experiments import (
    RandomWalkNetwork,
    ScenarioConfig,
    Tick,
    generate_ticks,
    random_social_graph,
    run_scenario,
    run_ticks,
)


class TestSocialGraph:
    """Tests for random_social_graph."""

    def test_symmetric_without_self_loops(self, rng):
        graph = random_social_graph(30, 0.3, rng)

        assert set(graph) == set(range(30))
        for user, contacts in graph.items():
            assert user not in contacts
            for other in contacts:
                assert user in graph[other]

    def test_extremes(self, rng):
        assert all(c == [] for c in random_social_graph(5, 0.0, rng).values())
        full = random_social_graph(5, 1.0, rng)
        assert full[0] == [1, 2, 3, 4]


class TestRandomWalkNetwork:
    """Tests for RandomWalkNetwork."""

    def test_positions_stay_on_grid(self, rng):
        net = RandomWalkNetwork(size=10, n_users=50, rng=rng)
        for _ in range(20):
            net.step(p_move=1.0, d_move=3)
        assert net.positions.shape == (50, 2)
        assert net.positions.min() >= 0
        assert net.positions.max() < 10

    def test_no_move(self, rng):
        net = RandomWalkNetwork(size=10, n_users=5, rng=rng)
        before = net.positions.copy()
        net.step(p_move=0.0)
        assert np.array_equal(net.positions, before)

    def test_links_wrap_around(self, rng):
        net = RandomWalkNetwork(size=20, n_users=3, rng=rng)
        net.positions = np.array([[0, 0], [0, 19], [5, 5]])

        assert net.links(d_link=1) == [(0, 1)]

    def test_links_distance(self, rng):
        net = RandomWalkNetwork(size=20, n_users=3, rng=rng)
        net.positions = np.array([[0, 0], [2, 2], [4, 4]])

        assert net.links(d_link=1) == []
        assert net.links(d_link=2) == [(0, 1), (1, 2)]


class TestScenarioConfig:
    """Tests for ScenarioConfig."""

    def test_defaults(self):
        cfg = ScenarioConfig()
        assert cfg.size == 20
        assert cfg.n_users == 250
        assert cfg.n_ticks == 100
        assert cfg.p_send == 5.0

    @pytest.mark.parametrize("kwargs", [
        dict(size=0),
        dict(n_users=1),
        dict(p_move=1.5),
        dict(p_deg=-0.1),
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            ScenarioConfig(**kwargs)


class TestRunner:
    """Tests for tick generation and the runner."""

    def test_generate_ticks(self, rng):
        cfg = ScenarioConfig(size=5, n_users=10, n_ticks=12, p_send=3.0)
        ticks = list(generate_ticks(cfg, rng))

        assert [t.time for t in ticks] == list(range(12))
        ids = [mid for t in ticks for _, _, mid in t.sends]
        assert ids == list(range(len(ids)))
        for tick in ticks:
            for source, target, _ in tick.sends:
                assert source != target

    def test_run_ticks_returns_sent_ids(self):
        prot = create_protocol(contacts_only=False)
        ticks = [
            Tick(time=0, sends=[("A", "B", "m1")], contacts=[("A", "B")]),
            Tick(time=1, sends=[("B", "A", "m2")]),
        ]

        sent = run_ticks(prot, ticks, graph={})

        assert sent == ["m1", "m2"]
        assert prot.log.recv == {"m1"}

    def test_deferred_relays_move_one_hop_per_tick(self):
        prot = create_protocol(contacts_only=False)
        ticks = [Tick(time=0, sends=[("A", "C", "m")], contacts=[("A", "B"), ("B", "C")])]

        run_ticks(prot, ticks, graph={})

        assert prot.log.recv == set()
        assert "m" in prot.users.get("B").pending

    def test_run_scenario_is_reproducible(self):
        cfg = ScenarioConfig(size=8, n_users=30, n_ticks=30, p_send=2.0, seed=3)
        results = []
        for _ in range(2):
            prot = create_protocol(n_hop=4, n_rep=4, policy="global")
            sent_ids, summary = run_scenario(cfg, prot)
            results.append((sent_ids, prot.log.recv, len(prot.log.encs), summary.sent))

        assert results[0] == results[1]
