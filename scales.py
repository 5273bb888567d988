"""
Scale functions for the space chart.

Square-root scales compress magnitude differences so a handful of very
popular games do not dwarf the rest of the catalog. Used by the node
registry (radius per node) and by the renderer (background squares,
brightness).
"""

import numpy as np

from config import SIZE_RANGE, BACKGROUND_SIZE_RANGE, BRIGHTNESS_RANGE


class SqrtScale:
    """
    Map a numeric domain onto a target range through sqrt.

        y = r0 + (sqrt(x) - sqrt(d0)) / (sqrt(d1) - sqrt(d0)) * (r1 - r0)

    Output is clamped to [r0, r1] so any finite non-negative input lands in
    the target range. With a degenerate domain (d0 == d1) every input maps
    to r0.

    Accepts scalars or numpy arrays; scalars come back as float.
    """

    def __init__(self, domain, target_range):
        d0, d1 = (float(v) for v in domain)
        r0, r1 = (float(v) for v in target_range)
        self.domain = (max(0.0, min(d0, d1)), max(0.0, max(d0, d1)))
        self.range = (r0, r1)
        self._s0 = np.sqrt(self.domain[0])
        self._span = np.sqrt(self.domain[1]) - self._s0

    def __call__(self, x):
        r0, r1 = self.range
        values = np.asarray(x, dtype=np.float64)
        if self._span <= 0.0:
            out = np.full(values.shape, r0, dtype=np.float64)
        else:
            t = (np.sqrt(np.maximum(values, 0.0)) - self._s0) / self._span
            out = r0 + np.clip(t, 0.0, 1.0) * (r1 - r0)
        if out.ndim == 0:
            return float(out)
        return out

    def __repr__(self):
        return f"SqrtScale(domain={self.domain}, range={self.range})"


def _observed_domain(values):
    values = np.asarray(values, dtype=np.float64)
    values = values[np.isfinite(values)]
    if values.size == 0:
        return (0.0, 0.0)
    return (float(values.min()), float(values.max()))


def size_scale(weights, target_range=SIZE_RANGE):
    """sizeOf: weight (player count) → node radius."""
    return SqrtScale(_observed_domain(weights), target_range)


def background_size_scale(weights, target_range=BACKGROUND_SIZE_RANGE):
    """Half-size of the genre-coloured square drawn behind each node."""
    return SqrtScale(_observed_domain(weights), target_range)


def intensity_scale(scores, target_range=BRIGHTNESS_RANGE):
    """intensityOf: quality score (positive review %) → lightness in [0, 1]."""
    return SqrtScale(_observed_domain(scores), target_range)
