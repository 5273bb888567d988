"""
The probe ("spaceship"): a point the user steers with the arrow keys to ask
which game sits under it.
"""

import numpy as np

from config import PROBE_START, PROBE_SIZE, PROBE_STEP

# Screen coordinates: y grows downwards, so "up" decreases y.
DIRECTIONS = {
    "up": (0.0, -1.0),
    "down": (0.0, 1.0),
    "left": (-1.0, 0.0),
    "right": (1.0, 0.0),
}

# Input adapter: ti.GUI key names → probe commands
KEY_TO_DIRECTION = {
    "Up": "up",
    "Down": "down",
    "Left": "left",
    "Right": "right",
}


class Probe:
    """
    Args:
        registry: NodeRegistry to query (read-only); None until nodes are loaded
        position: starting (x, y)
        half_size: half the probe's footprint
        step: pixels moved per command
    """

    def __init__(self, registry, position=PROBE_START, half_size=PROBE_SIZE / 2.0, step=PROBE_STEP):
        self.registry = registry
        self.position = (float(position[0]), float(position[1]))
        self.half_size = float(half_size)
        self.step = float(step)

    def move(self, direction):
        """Apply one fixed step; returns the new position."""
        try:
            ux, uy = DIRECTIONS[direction]
        except KeyError:
            raise ValueError(f"unknown probe direction {direction!r}") from None
        x, y = self.position
        self.position = (x + ux * self.step, y + uy * self.step)
        return self.position

    def query_nearest(self, position=None):
        """
        Id of the closest node touching the probe, or None.

        A node qualifies when its centre is closer than half_size + radius.
        Among qualifying nodes the closest wins; on an exact tie the first in
        registry order. No hit is the common case, not an error.
        """
        reg = self.registry
        if reg is None or reg.n == 0:
            return None
        x, y = self.position if position is None else position
        pos = reg.positions().astype(np.float64)
        dist = np.hypot(pos[:, 0] - x, pos[:, 1] - y)
        hits = np.flatnonzero(dist < self.half_size + reg.radii)
        if hits.size == 0:
            return None
        return reg.ids[hits[np.argmin(dist[hits])]]
