"""
Cluster halos: the circle drawn around each genre's members.

Recomputed every tick after positions commit. Reads node state, never
writes it.
"""

import taichi as ti

from config import HALO_PADDING, HALO_MAX, HALO_FALLBACK


@ti.kernel
def compute_halos(pos: ti.template(), rad: ti.template(), cluster: ti.template(),
                  anchors: ti.template(), halo: ti.template(), members: ti.template(),
                  n: ti.i32, n_clusters: ti.i32,
                  padding: ti.f32, cap: ti.f32, fallback: ti.f32):
    """
    halo[c] = min(cap, max over members of |p - anchor_c| + r · padding)

    Clusters without members get the fallback radius so the renderer always
    has something drawable.
    """
    for c in range(n_clusters):
        halo[c] = 0.0
        members[c] = 0

    for i in range(n):
        c = cluster[i]
        reach = (pos[i] - anchors[c]).norm() + rad[i] * padding
        ti.atomic_max(halo[c], reach)
        ti.atomic_add(members[c], 1)

    for c in range(n_clusters):
        if members[c] == 0:
            halo[c] = fallback
        else:
            halo[c] = ti.min(halo[c], cap)


class HaloCalculator:
    """haloRadius(cluster) for every cluster of a registry."""

    def __init__(self, registry, padding=HALO_PADDING, cap=HALO_MAX, fallback=HALO_FALLBACK):
        self.registry = registry
        self.padding = padding
        self.cap = cap
        self.fallback = fallback
        n_clusters = len(registry.labels)
        self.halo = ti.field(dtype=ti.f32, shape=n_clusters)
        self.members = ti.field(dtype=ti.i32, shape=n_clusters)

    def compute(self):
        """Recompute from current positions; returns {label: halo radius}."""
        reg = self.registry
        compute_halos(reg.pos, reg.rad, reg.cluster, reg.anchors,
                      self.halo, self.members, reg.n, len(reg.labels),
                      self.padding, self.cap, self.fallback)
        return self.radii()

    def radii(self):
        """Values of the last compute() without recomputing."""
        values = self.halo.to_numpy()
        return {label: float(values[c]) for c, label in enumerate(self.registry.labels)}

    def halo_radius(self, label):
        return self.compute()[label]
