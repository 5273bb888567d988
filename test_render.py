import numpy as np

from nodes import GameRecord
from config import DEFAULT_BRIGHTNESS
from render import hsl_to_hex, node_color, node_brightness, genre_color, format_tooltip, to_screen, darken


def test_hsl_to_hex():
    assert hsl_to_hex(0, 1.0, 0.5) == 0xFF0000
    assert hsl_to_hex(45, 1.0, 0.5) == 0xFFBF00
    assert hsl_to_hex(275, 1.0, 0.0) == 0x000000


def test_node_color_by_indie_tag():
    indie = GameRecord("Hades", "Action", 10, 98, ("Action", "Indie"))
    big = GameRecord("Halo", "Action", 10, 80, ("Action",))
    assert node_color(indie, 0.5) == hsl_to_hex(45, 1.0, 0.5)
    assert node_color(big, 0.5) == hsl_to_hex(275, 1.0, 0.5)


def test_genre_palette():
    assert genre_color("Action") == 0xE6194B
    assert genre_color("Racing") == 0x135021
    assert genre_color("Puzzle") == 0x135021


def test_tooltip():
    assert format_tooltip(None) == "Hover a node..."
    record = GameRecord("Hades", "Action", 4500.0, 98, ("Action", "Indie"))
    assert format_tooltip(record) == "Hades | Players: 4500 | Indie: Yes"
    record = GameRecord("Halo", "Action", 12, 80)
    assert format_tooltip(record) == "Halo | Players: 12 | Indie: No"


def test_to_screen_flips_y():
    out = to_screen([(0.0, 0.0), (800.0, 700.0), (400.0, 175.0)], 800, 700)
    assert np.allclose(out, [[0.0, 1.0], [1.0, 0.0], [0.5, 0.75]])


def test_darken():
    assert darken(0xFF8000, 0.5) == 0x7F4000


def test_tooltip_shows_name_not_appid():
    record = GameRecord("379720", "Action", 9000, 95, ("Action",), name="Doom")
    assert format_tooltip(record) == "Doom | Players: 9000 | Indie: No"


def test_brightness_falls_back_without_review_score():
    records = [
        GameRecord("a", "Action", 1, 25.0),
        GameRecord("b", "Action", 1, float("nan")),
        GameRecord("c", "Action", 1, 100.0),
        GameRecord("d", "Action", 1, None),
    ]
    brightness = node_brightness(records)
    assert brightness[0] == 0.0
    assert brightness[2] == 0.8
    assert brightness[1] == DEFAULT_BRIGHTNESS
    assert brightness[3] == DEFAULT_BRIGHTNESS
    assert node_brightness([]).shape == (0,)
