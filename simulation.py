"""
Simulation loop for the space chart.

One Simulation object owns the whole layout state: registry, grid, halos,
probe, tick counter, alpha and run state. There is no module-level state,
so several charts (or tests) can live side by side.

States:
  idle     constructed, no nodes yet
  running  load() done; every tick() advances the layout
  paused   host asked to hold; tick() is a no-op until resume()
  stopped  terminal; tick() is a no-op forever

The loop never stops by itself. Ticks are driven by the host clock (one per
rendered frame); cooling is counted in ticks, not wall-clock time.
"""

import taichi as ti

from config import (
    CLUSTER_CENTERS, SIZE_RANGE,
    ATTRACTION_STRENGTH, REPULSION_STRENGTH, DISTANCE_MIN2, JIGGLE,
    ALPHA_START, ALPHA_DECAY, ALPHA_TARGET, VELOCITY_DECAY,
    COLLIDE_PADDING, COLLIDE_STRENGTH,
    HALO_PADDING, HALO_MAX, HALO_FALLBACK,
    PROBE_START, PROBE_SIZE, PROBE_STEP,
    SPACE_WIDTH, SPACE_HEIGHT,
)
from nodes import NodeRegistry
from grid import SpatialGrid
from dynamics import (
    apply_cluster_attraction, apply_repulsion, integrate_velocities,
    resolve_collisions, commit_positions, compute_max_overlap,
)
from halos import HaloCalculator
from probe import Probe

IDLE = "idle"
RUNNING = "running"
PAUSED = "paused"
STOPPED = "stopped"


class Simulation:
    """
    Clustered force-directed layout with collision separation.

    Every tunable defaults to its config constant. An empty anchor mapping
    is a construction error and raises ValueError before any tick.
    """

    def __init__(self, anchors=CLUSTER_CENTERS,
                 attraction_strength=ATTRACTION_STRENGTH,
                 repulsion_strength=REPULSION_STRENGTH,
                 distance_min2=DISTANCE_MIN2,
                 jiggle=JIGGLE,
                 velocity_decay=VELOCITY_DECAY,
                 alpha=ALPHA_START,
                 alpha_decay=ALPHA_DECAY,
                 alpha_target=ALPHA_TARGET,
                 collide_padding=COLLIDE_PADDING,
                 collide_strength=COLLIDE_STRENGTH,
                 size_range=SIZE_RANGE,
                 halo_padding=HALO_PADDING,
                 halo_max=HALO_MAX,
                 halo_fallback=HALO_FALLBACK,
                 probe_start=PROBE_START,
                 probe_half_size=PROBE_SIZE / 2.0,
                 probe_step=PROBE_STEP,
                 width=SPACE_WIDTH,
                 height=SPACE_HEIGHT):
        if not anchors:
            raise ValueError("Simulation needs at least one cluster anchor")
        self.anchors = dict(anchors)
        self.attraction_strength = attraction_strength
        self.repulsion_strength = repulsion_strength
        self.distance_min2 = distance_min2
        self.jiggle = jiggle
        self.velocity_decay = velocity_decay
        self.alpha = alpha
        self.alpha_decay = alpha_decay
        self.alpha_target = alpha_target
        self.collide_padding = collide_padding
        self.collide_strength = collide_strength
        self.size_range = size_range
        self.halo_padding = halo_padding
        self.halo_max = halo_max
        self.halo_fallback = halo_fallback
        self.width = width
        self.height = height

        self.state = IDLE
        self.tick_count = 0
        self.registry = None
        self.grid = None
        self.halos = None
        self.probe = Probe(None, probe_start, probe_half_size, probe_step)
        self._listeners = []

    # --------------------------------------------------------------------------
    # Lifecycle
    # --------------------------------------------------------------------------

    def load(self, records, positions=None):
        """
        Build the node registry from loader records and start running.

        Zero valid records is fine: the chart runs with fallback halos.
        """
        if self.state != IDLE:
            raise RuntimeError(f"cannot load nodes in state {self.state!r}")

        reg = NodeRegistry(records, self.anchors, positions=positions, size_range=self.size_range)
        self.registry = reg

        max_distance = 2.0 * (float(reg.radii.max()) if reg.n else 0.0) + 2.0 * self.collide_padding
        self.grid = SpatialGrid(reg.capacity, max_distance, self.width, self.height)
        self._pos_next = ti.Vector.field(2, dtype=ti.f32, shape=reg.capacity)
        self._corr = ti.Vector.field(2, dtype=ti.f32, shape=reg.capacity)
        self._overlap = ti.field(dtype=ti.f32, shape=())

        self.halos = HaloCalculator(reg, self.halo_padding, self.halo_max, self.halo_fallback)
        self.halos.compute()
        self.probe.registry = reg

        self.state = RUNNING
        print(f"[Simulation] Loaded {reg.n} nodes in {len(reg.labels)} clusters "
              f"(grid {self.grid.res_x}×{self.grid.res_y}, cell={self.grid.cell_size:.1f}px)")
        return reg

    def pause(self):
        if self.state == RUNNING:
            self.state = PAUSED

    def resume(self):
        if self.state == PAUSED:
            self.state = RUNNING

    def stop(self):
        """Explicit shutdown; no tick runs afterwards."""
        self.state = STOPPED

    def reheat(self, alpha=ALPHA_START):
        """Restore force strength, e.g. after the host swaps in new positions."""
        self.alpha = alpha

    # --------------------------------------------------------------------------
    # Ticks
    # --------------------------------------------------------------------------

    def on_tick(self, callback):
        """Register callback(event), called after every committed tick."""
        self._listeners.append(callback)
        return callback

    def tick(self):
        """
        Advance one step and return the tick event (None if not running).

        forces → integrate → grid → collisions → commit → halos → cool
        """
        if self.state != RUNNING:
            return None

        reg = self.registry
        n = reg.n
        if n > 0:
            apply_cluster_attraction(reg.pos, reg.vel, reg.cluster, reg.anchors,
                                     n, self.attraction_strength, self.alpha)
            apply_repulsion(reg.pos, reg.vel, n, self.repulsion_strength, self.alpha,
                            self.distance_min2, self.jiggle)
            integrate_velocities(reg.pos, reg.vel, self._pos_next, n, self.velocity_decay)

            self.grid.rebuild(self._pos_next, n)
            resolve_collisions(self._pos_next, reg.rad, self._corr,
                               self.grid.cell_start, self.grid.cell_count, self.grid.cell_indices,
                               n, *self.grid.params(),
                               self.collide_padding, self.collide_strength)
            commit_positions(reg.pos, reg.vel, self._pos_next, self._corr, n)

        self.halos.compute()
        self.alpha += (self.alpha_target - self.alpha) * self.alpha_decay
        self.tick_count += 1

        event = self.snapshot()
        for callback in self._listeners:
            callback(event)
        return event

    def run(self, ticks):
        """Run up to `ticks` ticks back to back; returns the last event."""
        event = None
        for _ in range(ticks):
            if self.state != RUNNING:
                break
            event = self.tick()
        return event

    def snapshot(self):
        """
        The renderer payload:
          {"tick", "nodes": [{"id", "x", "y", "radius"}], "clusters": [{"label", "halo_radius"}]}
        """
        reg = self.registry
        if reg is None:
            return {"tick": self.tick_count, "nodes": [], "clusters": []}
        pos = reg.positions()
        nodes = [
            {"id": node_id, "x": float(pos[i, 0]), "y": float(pos[i, 1]), "radius": float(reg.radii[i])}
            for i, node_id in enumerate(reg.ids)
        ]
        clusters = [
            {"label": label, "halo_radius": radius}
            for label, radius in self.halos.radii().items()
        ]
        return {"tick": self.tick_count, "nodes": nodes, "clusters": clusters}

    def max_overlap(self):
        """Deepest overlap between collision circles right now (telemetry)."""
        reg = self.registry
        if reg is None or reg.n < 2:
            return 0.0
        compute_max_overlap(reg.pos, reg.rad, reg.n, self.collide_padding, self._overlap)
        return float(self._overlap[None])

    # --------------------------------------------------------------------------
    # Probe commands (applied between ticks)
    # --------------------------------------------------------------------------

    def move_probe(self, direction):
        """Valid in every state; the probe exists from construction."""
        return self.probe.move(direction)

    def probe_query(self):
        """Id of the node under the probe, or None."""
        return self.probe.query_nearest()
