"""Force and collision behaviour, driven through single ticks."""

import numpy as np
import pytest
import taichi as ti

from config import COLLIDE_TOLERANCE, GOLDEN_ANGLE
from dynamics import apply_cluster_attraction
from nodes import GameRecord, NodeRegistry
from simulation import Simulation

ANCHOR = {"Action": (400.0, 350.0)}


def _pair(**kwargs):
    sim = Simulation(ANCHOR, size_range=(10.0, 10.0), **kwargs)
    return sim


def test_collision_pass_is_symmetric():
    sim = _pair(alpha=0.0)
    sim.load([GameRecord("a", "Action", 1, 50), GameRecord("b", "Action", 1, 50)],
             positions={"a": (390.0, 350.0), "b": (400.0, 350.0)})
    sim.tick()
    pos = sim.registry.positions()
    # collision radii 12 + 12, distance 10 → overlap 14, each moves 0.5 · 0.7 · 14
    assert pos[0, 0] == pytest.approx(390.0 - 4.9, abs=1e-3)
    assert pos[1, 0] == pytest.approx(400.0 + 4.9, abs=1e-3)
    assert pos[0, 1] == pytest.approx(350.0)
    assert pos[1, 1] == pytest.approx(350.0)


def test_coincident_nodes_separate_deterministically():
    sim = _pair(alpha=0.0)
    sim.load([GameRecord("a", "Action", 1, 50), GameRecord("b", "Action", 1, 50)],
             positions={"a": (400.0, 350.0), "b": (400.0, 350.0)})
    sim.tick()
    pos = sim.registry.positions()
    assert np.all(np.isfinite(pos))
    # collision radii 12 + 12 fully overlapping → each moves 0.5 · 0.7 · 24 = 8.4
    sep = pos[1] - pos[0]
    assert np.hypot(*sep) == pytest.approx(16.8, abs=1e-3)
    assert pos.mean(axis=0) == pytest.approx([400.0, 350.0], abs=1e-3)
    # pair (0, 1) separates along the golden angle, off the x axis
    assert sep / 16.8 == pytest.approx([np.cos(GOLDEN_ANGLE), np.sin(GOLDEN_ANGLE)], abs=1e-4)


def test_coincident_nodes_under_repulsion_stay_finite():
    sim = _pair(attraction_strength=0.0, collide_strength=0.0)
    sim.load([GameRecord("a", "Action", 1, 50), GameRecord("b", "Action", 1, 50)],
             positions={"a": (400.0, 350.0), "b": (400.0, 350.0)})
    sim.run(5)
    assert np.all(np.isfinite(sim.registry.positions()))
    assert np.all(np.isfinite(sim.registry.velocities()))


def test_repulsion_pushes_pair_apart_symmetrically():
    sim = _pair(attraction_strength=0.0, collide_strength=0.0, alpha_decay=0.0)
    sim.load([GameRecord("a", "Action", 1, 50), GameRecord("b", "Action", 1, 50)],
             positions={"a": (300.0, 350.0), "b": (400.0, 350.0)})
    sim.tick()
    pos = sim.registry.positions()
    # v = 100 · (-10) / 100² = -0.1, damped by 0.6
    assert pos[0, 0] == pytest.approx(300.0 - 0.06, abs=1e-4)
    assert pos[1, 0] == pytest.approx(400.0 + 0.06, abs=1e-4)


def test_attraction_shrinks_as_node_approaches_anchor():
    distances = [240.0, 120.0, 60.0, 15.0, 1.0, 0.0]
    records = [GameRecord(f"n{i}", "Action", 1, 50) for i in range(len(distances))]
    positions = {f"n{i}": (400.0 + d, 350.0 - d / 2) for i, d in enumerate(distances)}
    reg = NodeRegistry(records, ANCHOR, positions=positions)

    apply_cluster_attraction(reg.pos, reg.vel, reg.cluster, reg.anchors, reg.n, 0.5, 1.0)
    pull = np.linalg.norm(reg.velocities(), axis=1)
    assert np.all(np.diff(pull) <= 0)
    assert pull[-1] == 0.0
    # spring, not capped: proportional to distance
    assert pull[0] == pytest.approx(2.0 * pull[1], rel=1e-4)


def test_attraction_points_at_anchor_per_axis():
    reg = NodeRegistry([GameRecord("a", "Action", 1, 50)], ANCHOR, positions={"a": (500.0, 300.0)})
    apply_cluster_attraction(reg.pos, reg.vel, reg.cluster, reg.anchors, reg.n, 0.5, 1.0)
    v = reg.velocities()[0]
    assert v[0] == pytest.approx(-50.0)
    assert v[1] == pytest.approx(25.0)


def _overlaps(sim):
    pos = sim.registry.positions().astype(np.float64)
    rad = sim.registry.radii.astype(np.float64)
    d = np.hypot(pos[:, None, 0] - pos[None, :, 0], pos[:, None, 1] - pos[None, :, 1])
    gap = d - (rad[:, None] + rad[None, :])
    np.fill_diagonal(gap, np.inf)
    return gap


def test_collisions_converge_after_many_ticks():
    rng = np.random.default_rng(3)
    anchors = {"Action": (300.0, 350.0), "RPG": (500.0, 350.0)}
    records = [
        GameRecord(f"g{i}", "Action" if i % 2 else "RPG", float(w), 70.0)
        for i, w in enumerate(rng.integers(20, 50000, size=30))
    ]
    sim = Simulation(anchors, size_range=(4.0, 24.0))
    sim.load(records)
    sim.run(500)

    assert _overlaps(sim).min() >= -COLLIDE_TOLERANCE
    assert sim.max_overlap() < 2.0 * sim.collide_padding + COLLIDE_TOLERANCE


def test_collisions_converge_from_a_single_point():
    records = [GameRecord(f"g{i}", "Action", 100.0 * (i + 1), 70.0) for i in range(12)]
    positions = {r.id: (400.0, 350.0) for r in records}
    sim = Simulation(ANCHOR, size_range=(5.0, 15.0))
    sim.load(records, positions=positions)
    sim.run(500)
    assert _overlaps(sim).min() >= -COLLIDE_TOLERANCE


def test_large_stack_on_one_point_spreads_into_the_plane():
    records = [GameRecord(f"g{i}", "Action", 50.0 * (i + 1), 70.0) for i in range(60)]
    positions = {r.id: (400.0, 350.0) for r in records}
    sim = Simulation(ANCHOR, size_range=(5.0, 15.0))
    sim.load(records, positions=positions)

    sim.tick()
    assert len(np.unique(np.round(sim.registry.positions()[:, 1], 3))) > 1

    sim.run(499)
    assert _overlaps(sim).min() >= -COLLIDE_TOLERANCE
