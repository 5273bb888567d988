import pytest

from nodes import GameRecord, NodeRegistry
from probe import Probe, KEY_TO_DIRECTION

ANCHORS = {"Action": (150.0, 100.0)}


def _two_nodes():
    records = [GameRecord("first", "Action", 100, 80), GameRecord("second", "Action", 100, 80)]
    positions = {"first": (100.0, 100.0), "second": (200.0, 100.0)}
    # equal weights → every radius is the range minimum (5)
    return NodeRegistry(records, ANCHORS, positions=positions, size_range=(5.0, 50.0))


def test_probe_scenario():
    reg = _two_nodes()
    assert list(reg.radii) == [5.0, 5.0]
    probe = Probe(reg, position=(103.0, 100.0), half_size=5.0, step=100.0)
    assert probe.query_nearest() == "first"
    assert probe.move("right") == (203.0, 100.0)
    assert probe.query_nearest() == "second"


def test_no_hit_returns_none():
    probe = Probe(_two_nodes(), position=(150.0, 100.0), half_size=5.0)
    assert probe.query_nearest() is None


def test_threshold_is_strict():
    probe = Probe(_two_nodes(), half_size=5.0)
    assert probe.query_nearest((110.0, 100.0)) is None
    assert probe.query_nearest((109.9, 100.0)) == "first"


def test_closest_of_several_hits_wins():
    probe = Probe(_two_nodes(), half_size=60.0)
    assert probe.query_nearest((140.0, 100.0)) == "first"
    assert probe.query_nearest((160.0, 100.0)) == "second"
    # exact tie: first in registry order
    assert probe.query_nearest((150.0, 100.0)) == "first"


def test_moves_are_fixed_steps_in_screen_coordinates():
    probe = Probe(_two_nodes(), position=(0.0, 0.0), step=10.0)
    assert probe.move("up") == (0.0, -10.0)
    assert probe.move("down") == (0.0, 0.0)
    assert probe.move("left") == (-10.0, 0.0)
    assert probe.move("right") == (0.0, 0.0)


def test_unknown_direction_rejected():
    probe = Probe(_two_nodes())
    with pytest.raises(ValueError):
        probe.move("forward")
    assert probe.position == (400.0, 350.0)


def test_empty_registry_never_hits():
    probe = Probe(NodeRegistry([], ANCHORS), position=(100.0, 100.0))
    assert probe.query_nearest() is None


def test_arrow_keys_map_to_commands():
    assert KEY_TO_DIRECTION == {"Up": "up", "Down": "down", "Left": "left", "Right": "right"}


def test_query_without_registry():
    probe = Probe(None, position=(100.0, 100.0), half_size=50.0)
    assert probe.query_nearest() is None
    assert probe.move("down") == (100.0, 110.0)
