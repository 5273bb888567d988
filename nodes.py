"""
Node registry for the space chart.

Holds the closed set of simulated games and their kinematic state in Taichi
fields. Nodes are created once from loader records; nothing is added or
removed afterwards.

Fields (capacity max(n, 1) because Taichi fields cannot be empty, active n):
  pos      vec2 f32   position (px), mutated only by the simulation tick
  vel      vec2 f32   velocity (px / tick)
  rad      f32        display radius from sizeOf(weight), fixed per session
  cluster  i32        index into the anchor field
  anchors  vec2 f32   one fixed anchor per cluster label
"""

import math
from typing import NamedTuple, Tuple

import numpy as np
import taichi as ti

from config import SIZE_RANGE, GOLDEN_ANGLE
from scales import size_scale

# d3-style initial placement: sunflower spiral with 10 px spacing
INITIAL_RADIUS = 10.0
INITIAL_ANGLE = GOLDEN_ANGLE


class GameRecord(NamedTuple):
    """
    One catalog entry as handed over by the data loader.

    id is the stable unique key (the Steam appid); name is only displayed.
    """
    id: str
    cluster: str
    weight: float
    quality: float
    tags: Tuple[str, ...] = ()
    name: str = ""

    @property
    def display_name(self):
        return self.name or self.id


def is_finite_number(value):
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def is_valid_record(record, anchors):
    """
    A record is simulated only if its label has an anchor and its weight is a
    finite, non-negative number. Quality is passed through untouched.
    """
    if record.cluster not in anchors:
        return False
    return is_finite_number(record.weight) and float(record.weight) >= 0.0


def spiral_positions(cluster_idx, anchors_np):
    """
    Deterministic starting positions: a sunflower spiral around each anchor.

    The k-th member of a cluster sits at radius 10·sqrt(0.5 + k) and angle
    k·π(3 - √5) from its anchor, so no two nodes start on top of each other.
    """
    n = len(cluster_idx)
    out = np.zeros((n, 2), dtype=np.float32)
    seen = {}
    for i, c in enumerate(cluster_idx):
        k = seen.get(c, 0)
        seen[c] = k + 1
        r = INITIAL_RADIUS * math.sqrt(0.5 + k)
        a = k * INITIAL_ANGLE
        out[i, 0] = anchors_np[c, 0] + r * math.cos(a)
        out[i, 1] = anchors_np[c, 1] + r * math.sin(a)
    return out


def _padded(arr, capacity):
    if arr.shape[0] == capacity:
        return arr
    pad = np.zeros((capacity - arr.shape[0],) + arr.shape[1:], dtype=arr.dtype)
    return np.concatenate([arr, pad])


class NodeRegistry:
    """
    createNodes(records): the set of nodes the engine simulates.

    Args:
        records: iterable of GameRecord
        anchors: mapping cluster label → (x, y); must not be empty
        positions: optional mapping id → (x, y) overriding the spiral seed
        size_range: target range of the radius scale

    Invalid records (unknown label, non-finite or negative weight,
    repeated id) are dropped and counted, never raised.
    """

    def __init__(self, records, anchors, positions=None, size_range=SIZE_RANGE):
        if not anchors:
            raise ValueError("cluster anchor mapping is empty")

        self.labels = list(anchors.keys())
        label_index = {label: c for c, label in enumerate(self.labels)}
        anchors_np = np.array([anchors[label] for label in self.labels], dtype=np.float32)

        kept = []
        seen_ids = set()
        total = 0
        for record in records:
            total += 1
            if not is_valid_record(record, anchors) or record.id in seen_ids:
                continue
            seen_ids.add(record.id)
            kept.append(record)

        self.records = kept
        self.dropped = total - len(kept)
        self.n = len(kept)
        self.ids = [r.id for r in kept]
        self._index = {node_id: i for i, node_id in enumerate(self.ids)}
        if self.dropped:
            print(f"[Registry] Dropped {self.dropped} of {total} records (unknown cluster, invalid weight or repeated id)")

        weights = np.array([float(r.weight) for r in kept], dtype=np.float64)
        self.size_of = size_scale(weights, size_range)
        self.radii = np.asarray(self.size_of(weights), dtype=np.float32).reshape(-1)
        self.cluster_idx = np.array([label_index[r.cluster] for r in kept], dtype=np.int32)

        pos_np = spiral_positions(self.cluster_idx, anchors_np)
        if positions:
            for node_id, xy in positions.items():
                i = self._index.get(node_id)
                if i is not None:
                    pos_np[i] = xy

        capacity = max(self.n, 1)
        self.capacity = capacity
        self.pos = ti.Vector.field(2, dtype=ti.f32, shape=capacity)
        self.vel = ti.Vector.field(2, dtype=ti.f32, shape=capacity)
        self.rad = ti.field(dtype=ti.f32, shape=capacity)
        self.cluster = ti.field(dtype=ti.i32, shape=capacity)
        self.anchors = ti.Vector.field(2, dtype=ti.f32, shape=len(self.labels))

        self.pos.from_numpy(_padded(pos_np, capacity))
        self.vel.from_numpy(np.zeros((capacity, 2), dtype=np.float32))
        self.rad.from_numpy(_padded(self.radii, capacity))
        self.cluster.from_numpy(_padded(self.cluster_idx, capacity))
        self.anchors.from_numpy(anchors_np)
        self.anchors_np = anchors_np

    def __len__(self):
        return self.n

    def positions(self):
        """Current positions as an (n, 2) float32 array."""
        return self.pos.to_numpy()[:self.n]

    def velocities(self):
        return self.vel.to_numpy()[:self.n]

    def anchor(self, label):
        return tuple(float(v) for v in self.anchors_np[self.labels.index(label)])

    def record(self, node_id):
        return self.records[self._index[node_id]]

    def members(self, label):
        """Ids of the nodes clustered under label (registry order)."""
        return [r.id for r in self.records if r.cluster == label]
