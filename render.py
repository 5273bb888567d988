"""
Rendering for the space chart on a ti.GUI canvas.

The engine hands over tick events; everything about colour, draw order and
text lives here. Layout coordinates are pixels with y down; ti.GUI wants
[0, 1]² with y up, so every draw call goes through to_screen().
"""

import colorsys

import numpy as np
import taichi as ti

from config import (
    SPACE_WIDTH, SPACE_HEIGHT, TOP_GENRES, GENRE_COLORS,
    INDIE_HUE, AAA_HUE, PROBE_WIDTH, PROBE_HEIGHT, FPS_TARGET, DEFAULT_BRIGHTNESS,
)
from nodes import is_finite_number
from scales import background_size_scale, intensity_scale

BACKGROUND = 0x222222
TEXT_COLOR = 0xFFFFFF
PROBE_COLOR = 0xFFFFFF
IDLE_TOOLTIP = "Hover a node..."
HELP_TEXT = "Use arrow keys to control"


def hex_to_int(color):
    return int(color.lstrip("#"), 16)


def hsl_to_hex(hue, saturation, lightness):
    """HSL (hue in degrees, s/l in [0, 1]) → 0xRRGGBB."""
    r, g, b = colorsys.hls_to_rgb((hue % 360) / 360.0, lightness, saturation)
    return (int(round(r * 255)) << 16) | (int(round(g * 255)) << 8) | int(round(b * 255))


def darken(color, factor):
    r = int(((color >> 16) & 0xFF) * factor)
    g = int(((color >> 8) & 0xFF) * factor)
    b = int((color & 0xFF) * factor)
    return (r << 16) | (g << 8) | b


def genre_color(label):
    """Ordinal genre palette; unknown labels get the last colour."""
    if label in TOP_GENRES:
        return hex_to_int(GENRE_COLORS[TOP_GENRES.index(label)])
    return hex_to_int(GENRE_COLORS[-1])


def is_indie(record):
    return "Indie" in record.tags


def node_color(record, brightness):
    """Gold for indie games, purple otherwise; lightness from review score."""
    hue = INDIE_HUE if is_indie(record) else AAA_HUE
    return hsl_to_hex(hue, 1.0, float(brightness))


def node_brightness(records):
    """
    Lightness per record from the intensity scale of its review score.

    Records without a usable score get DEFAULT_BRIGHTNESS and do not widen
    the scale domain.
    """
    scores = np.array([float(r.quality) if is_finite_number(r.quality) else np.nan for r in records],
                      dtype=np.float64)
    brightness = np.asarray(intensity_scale(scores)(scores), dtype=np.float64).reshape(-1)
    return np.where(np.isfinite(scores), brightness, DEFAULT_BRIGHTNESS)


def format_tooltip(record):
    if record is None:
        return IDLE_TOOLTIP
    return f"{record.display_name} | Players: {int(record.weight)} | Indie: {'Yes' if is_indie(record) else 'No'}"


def to_screen(xy, width=SPACE_WIDTH, height=SPACE_HEIGHT):
    """Pixel coordinates (y down) → normalized GUI coordinates (y up)."""
    xy = np.asarray(xy, dtype=np.float32).reshape(-1, 2)
    out = np.empty_like(xy)
    out[:, 0] = xy[:, 0] / width
    out[:, 1] = 1.0 - xy[:, 1] / height
    return out


class SpaceRenderer:
    """
    Draws one frame per tick event: halos, genre squares, nodes, labels,
    probe and tooltip.
    """

    def __init__(self, gui, registry, width=SPACE_WIDTH, height=SPACE_HEIGHT):
        self.gui = gui
        self.registry = registry
        self.width = width
        self.height = height

        weights = np.array([r.weight for r in registry.records], dtype=np.float64)
        self.background_size = np.asarray(background_size_scale(weights)(weights)).reshape(-1)
        brightness = node_brightness(registry.records)
        self.node_colors = np.array(
            [node_color(r, b) for r, b in zip(registry.records, brightness)], dtype=np.uint32)
        self.square_colors = np.array(
            [genre_color(r.cluster) for r in registry.records], dtype=np.uint32)
        self.tooltip = IDLE_TOOLTIP

    def _screen(self, xy):
        return to_screen(xy, self.width, self.height)

    def draw_halos(self, event):
        for cluster in event["clusters"]:
            anchor = self.registry.anchor(cluster["label"])
            self.gui.circle(self._screen(anchor)[0], color=darken(genre_color(cluster["label"]), 0.35),
                            radius=cluster["halo_radius"])

    def draw_squares(self, xy):
        if len(xy) == 0:
            return
        half = self.background_size[:, None]
        # Squares are centred on the node; two triangles each
        tl = self._screen(xy + np.hstack([-half, -half]))
        tr = self._screen(xy + np.hstack([half, -half]))
        bl = self._screen(xy + np.hstack([-half, half]))
        br = self._screen(xy + np.hstack([half, half]))
        self.gui.triangles(tl, tr, bl, color=self.square_colors)
        self.gui.triangles(tr, br, bl, color=self.square_colors)

    def draw_nodes(self, xy):
        if len(xy) == 0:
            return
        self.gui.circles(self._screen(xy), radius=self.registry.radii, color=self.node_colors)

    def draw_labels(self):
        for label in self.registry.labels:
            pos = self._screen(self.registry.anchor(label))[0]
            self.gui.text(label, pos=(pos[0] - 0.04, pos[1] + 0.02), font_size=32, color=TEXT_COLOR)

    def draw_probe(self, probe):
        x, y = probe.position
        self.gui.rect(self._screen((x - PROBE_WIDTH / 2, y - PROBE_HEIGHT / 2))[0],
                      self._screen((x + PROBE_WIDTH / 2, y + PROBE_HEIGHT / 2))[0],
                      radius=2, color=PROBE_COLOR)

    def update_tooltip(self, node_id):
        record = None if node_id is None else self.registry.record(node_id)
        self.tooltip = format_tooltip(record)
        return self.tooltip

    def draw(self, event, probe):
        gui = self.gui
        gui.clear(BACKGROUND)
        xy = np.array([[n["x"], n["y"]] for n in event["nodes"]], dtype=np.float32).reshape(-1, 2)
        self.draw_halos(event)
        self.draw_squares(xy)
        self.draw_nodes(xy)
        self.draw_labels()
        self.draw_probe(probe)
        gui.text(HELP_TEXT, pos=(0.62, 0.1), font_size=20, color=TEXT_COLOR)
        gui.text(self.tooltip, pos=(0.02, 0.05), font_size=20, color=TEXT_COLOR)


def open_window(title="Galaxy of Games", width=SPACE_WIDTH, height=SPACE_HEIGHT):
    return ti.GUI(title, res=(width, height), background_color=BACKGROUND, fps_limit=FPS_TARGET)
