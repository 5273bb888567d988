"""
Dynamics kernels for Galaxy of Games - Space Chart.

This module provides, in tick order:
1. Cluster attraction (per-axis spring towards the genre anchor)
2. Mutual repulsion (all-pairs many-body charge)
3. Damped velocity integration into tentative positions
4. Collision separation (Jacobi pass over the spatial grid)
5. Position commit (velocity rewritten from the committed displacement)
6. Max overlap detection (diagnostics)

Forces 1-2 write velocities only. Collision reads the tentative positions
and writes a per-node correction buffer, so every node sees the same
tentative state regardless of thread order. Each kernel launch is a barrier:
collision never starts before integration has finished for all nodes.
"""

import taichi as ti

from config import EPS, GOLDEN_ANGLE
from grid import cell_coord, cell_id


@ti.func
def coincident_direction(i: ti.i32, j: ti.i32) -> ti.math.vec2:
    """
    Unit vector from node i towards node j for a pair with equal centres.

    The angle is GOLDEN_ANGLE · (i + j), so every pair gets its own direction
    and a stack of nodes on one point spreads into the plane instead of a
    line. Swapping i and j flips the sign: the pair stays symmetric.
    """
    a = GOLDEN_ANGLE * ti.cast(i + j, ti.f32)
    return ti.math.vec2(ti.cos(a), ti.sin(a)) * ti.select(j > i, 1.0, -1.0)


# ==============================================================================
# Kernel 1: Cluster attraction
# ==============================================================================

@ti.kernel
def apply_cluster_attraction(pos: ti.template(), vel: ti.template(),
                             cluster: ti.template(), anchors: ti.template(),
                             n: ti.i32, strength: ti.f32, alpha: ti.f32):
    """
    Pull each node towards its cluster anchor.

    Per axis: v += (anchor - p) * strength * alpha

    Linear in the signed distance, so the pull shrinks as the node closes in
    and is not capped far away.
    """
    for i in range(n):
        a = anchors[cluster[i]]
        vel[i] += (a - pos[i]) * (strength * alpha)


# ==============================================================================
# Kernel 2: Mutual repulsion (O(n²))
# ==============================================================================

@ti.kernel
def apply_repulsion(pos: ti.template(), vel: ti.template(), n: ti.i32,
                    strength: ti.f32, alpha: ti.f32,
                    distance_min2: ti.f32, jiggle: ti.f32):
    """
    Every node repels every other node.

    For the pair (i, j) with delta = p_j - p_i and l = max(|delta|², distance_min2):
      v_i += delta * strength * alpha / l

    strength is negative, so v_i points away from j. Exactly coincident
    centres get delta = jiggle · coincident_direction(i, j), a fixed
    per-pair direction in the plane, so runs stay reproducible.

    Each thread only writes its own velocity (no atomics).
    """
    for i in range(n):
        acc = ti.math.vec2(0.0, 0.0)
        pi = pos[i]
        for j in range(n):
            if i != j:
                delta = pos[j] - pi
                if delta[0] == 0.0 and delta[1] == 0.0:
                    delta = coincident_direction(i, j) * jiggle
                l = ti.max(delta.dot(delta), distance_min2)
                acc += delta * (strength * alpha / l)
        vel[i] += acc


# ==============================================================================
# Kernel 3: Damped integration
# ==============================================================================

@ti.kernel
def integrate_velocities(pos: ti.template(), vel: ti.template(),
                         pos_next: ti.template(), n: ti.i32, decay: ti.f32):
    """
    Damp, then move: v *= (1 - decay); p_next = p + v

    pos is left untouched until commit_positions.
    """
    for i in range(n):
        vel[i] *= (1.0 - decay)
        pos_next[i] = pos[i] + vel[i]


# ==============================================================================
# Kernel 4: Collision separation (PBD-style, Jacobi)
# ==============================================================================

@ti.kernel
def resolve_collisions(pos_next: ti.template(), rad: ti.template(), corr: ti.template(),
                       cell_start: ti.template(), cell_count: ti.template(),
                       cell_indices: ti.template(), n: ti.i32,
                       origin_x: ti.f32, origin_y: ti.f32, inv_cell: ti.f32,
                       res_x: ti.i32, res_y: ti.i32,
                       padding: ti.f32, strength: ti.f32):
    """
    Push overlapping nodes apart.

    For each pair whose collision circles (radius + padding) overlap:
      1. overlap = (r_i + r_j + 2·padding) - dist
      2. Each node moves 0.5 · strength · overlap along the centre line
      3. Coincident centres separate along coincident_direction(j, i)

    Corrections are accumulated into corr[i] and applied by
    commit_positions, so the pass does not depend on iteration order. One
    pass does not remove every overlap in a dense cluster; it relaxes
    towards separation over many ticks.
    """
    for i in range(n):
        origin = ti.math.vec2(origin_x, origin_y)
        pi = pos_next[i]
        ri = rad[i] + padding
        c = cell_coord(pi, origin, inv_cell, res_x, res_y)
        correction = ti.math.vec2(0.0, 0.0)

        # 3×3 stencil around my cell
        for dx in ti.static([-1, 0, 1]):
            for dy in ti.static([-1, 0, 1]):
                nc = c + ti.math.ivec2(dx, dy)
                if nc[0] >= 0 and nc[0] < res_x and nc[1] >= 0 and nc[1] < res_y:
                    nc_id = cell_id(nc, res_y)
                    start = cell_start[nc_id]
                    count = cell_count[nc_id]
                    for k in range(start, start + count):
                        j = cell_indices[k]
                        if j != i:
                            delta = pi - pos_next[j]
                            target = ri + rad[j] + padding
                            d2 = delta.dot(delta)
                            if d2 < target * target:
                                dist = ti.sqrt(d2)
                                direction = -coincident_direction(i, j)
                                if dist > EPS:
                                    direction = delta / dist
                                correction += direction * ((target - dist) * 0.5 * strength)

        corr[i] = correction


# ==============================================================================
# Kernel 5: Commit
# ==============================================================================

@ti.kernel
def commit_positions(pos: ti.template(), vel: ti.template(),
                     pos_next: ti.template(), corr: ti.template(), n: ti.i32):
    """
    p_new = p_next + correction; v = p_new - p_old
    """
    for i in range(n):
        p_new = pos_next[i] + corr[i]
        vel[i] = p_new - pos[i]
        pos[i] = p_new


# ==============================================================================
# Diagnostics
# ==============================================================================

@ti.kernel
def compute_max_overlap(pos: ti.template(), rad: ti.template(), n: ti.i32,
                        padding: ti.f32, out: ti.template()):
    """
    Deepest remaining overlap between any two collision circles (0 if none).

    All pairs, i < j. Only used for telemetry, not part of a tick.
    """
    out[None] = 0.0
    for i in range(n):
        for j in range(i + 1, n):
            dist = (pos[i] - pos[j]).norm()
            depth = rad[i] + rad[j] + 2.0 * padding - dist
            if depth > 0.0:
                ti.atomic_max(out[None], depth)
