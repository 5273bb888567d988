import numpy as np
import pytest

from nodes import GameRecord, NodeRegistry, spiral_positions

ANCHORS = {"Action": (400.0, 300.0), "RPG": (180.0, 250.0)}


def test_unknown_cluster_is_dropped():
    records = [
        GameRecord("Doom", "Action", 5000, 91.0),
        GameRecord("Skyrim", "RPG", 20000, 94.0),
        GameRecord("Mystery", "Unknown", 300, 70.0),
    ]
    reg = NodeRegistry(records, ANCHORS)
    assert len(reg) == 2
    assert reg.dropped == 1
    assert reg.ids == ["Doom", "Skyrim"]


def test_invalid_weights_and_duplicates_are_dropped():
    records = [
        GameRecord("a", "Action", float("nan"), 80.0),
        GameRecord("b", "Action", -5, 80.0),
        GameRecord("c", "Action", float("inf"), 80.0),
        GameRecord("d", "Action", "many", 80.0),
        GameRecord("e", "Action", 10, 80.0),
        GameRecord("e", "RPG", 50, 60.0),
    ]
    reg = NodeRegistry(records, ANCHORS)
    assert reg.ids == ["e"]
    assert reg.dropped == 5


def test_missing_quality_is_kept_and_passed_through():
    records = [
        GameRecord("no-reviews", "Action", 5000, float("nan")),
        GameRecord("unscored", "RPG", 10, None),
        GameRecord("scored", "RPG", 20, 91.0),
    ]
    reg = NodeRegistry(records, ANCHORS)
    assert reg.ids == ["no-reviews", "unscored", "scored"]
    assert reg.dropped == 0
    assert np.isnan(reg.record("no-reviews").quality)
    assert reg.record("unscored").quality is None


def test_empty_anchor_mapping_fails_fast():
    with pytest.raises(ValueError):
        NodeRegistry([GameRecord("a", "Action", 1, 1)], {})


def test_zero_records():
    reg = NodeRegistry([], ANCHORS)
    assert len(reg) == 0
    assert reg.positions().shape == (0, 2)
    assert reg.radii.shape == (0,)


def test_radii_follow_weight():
    records = [GameRecord(str(w), "Action", w, 50.0) for w in (20, 400, 10000)]
    reg = NodeRegistry(records, ANCHORS, size_range=(2.0, 40.0))
    assert reg.radii[0] == pytest.approx(2.0)
    assert reg.radii[-1] == pytest.approx(40.0)
    assert np.all(np.diff(reg.radii) > 0)


def test_explicit_positions_override_seed():
    records = [GameRecord("a", "Action", 1, 1), GameRecord("b", "RPG", 2, 1)]
    reg = NodeRegistry(records, ANCHORS, positions={"b": (12.0, 34.0), "ghost": (0.0, 0.0)})
    pos = reg.positions()
    assert tuple(pos[1]) == (12.0, 34.0)
    assert tuple(pos[0]) != (12.0, 34.0)


def test_spiral_seed_is_distinct_and_near_anchor():
    anchors = np.array([[100.0, 100.0], [500.0, 500.0]], dtype=np.float32)
    idx = np.array([0, 0, 1, 0, 1, 0], dtype=np.int32)
    pos = spiral_positions(idx, anchors)
    assert len({tuple(p) for p in pos}) == len(pos)
    for p, c in zip(pos, idx):
        assert np.hypot(*(p - anchors[c])) < 40.0


def test_record_lookup_and_members():
    records = [
        GameRecord("a", "Action", 1, 1, ("Action", "Indie")),
        GameRecord("b", "RPG", 2, 1),
        GameRecord("c", "Action", 3, 1),
    ]
    reg = NodeRegistry(records, ANCHORS)
    assert reg.record("a").tags == ("Action", "Indie")
    assert reg.members("Action") == ["a", "c"]
    assert reg.anchor("RPG") == (180.0, 250.0)
