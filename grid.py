"""
Spatial grid for collision neighbour search in the space chart.

This module provides neighbour detection using a uniform 2D hash grid:
- Cell size ≥ largest collision distance (conservative for the 9-stencil)
- Bounded canvas: cells outside the grid are clamped onto the border cells
- Rebuilt every tick from the tentative (post-integration) positions

Grid pipeline:
1. clear_grid: Zero counts
2. count_nodes_per_cell: Histogram nodes → cells (atomic)
3. prefix_sum: Exclusive scan for cell offsets (serialized)
4. copy_cell_pointers: Duplicate offsets for scatter
5. scatter_nodes: Write node IDs to sorted array (atomic)

Clamping is 1-Lipschitz in cell coordinates: two nodes whose true cells are
adjacent stay adjacent after clamping, so the 3×3 stencil never misses a pair
even for nodes pushed off the canvas.
"""

import math

import taichi as ti

from config import SPACE_WIDTH, SPACE_HEIGHT


@ti.func
def cell_coord(p: ti.math.vec2, origin: ti.math.vec2, inv_cell: ti.f32,
               res_x: ti.i32, res_y: ti.i32) -> ti.math.ivec2:
    """
    Cell indices of position p, clamped into [0, res_x) × [0, res_y).
    """
    c = ti.cast(ti.floor((p - origin) * inv_cell), ti.i32)
    return ti.math.ivec2([
        ti.max(0, ti.min(res_x - 1, c[0])),
        ti.max(0, ti.min(res_y - 1, c[1]))
    ])


@ti.func
def cell_id(c: ti.math.ivec2, res_y: ti.i32) -> ti.i32:
    """Linear index of cell c (row-major in x)."""
    return c[0] * res_y + c[1]


@ti.kernel
def clear_grid(cell_count: ti.template(), n_cells: ti.i32):
    """Reset all cell counts to zero. Called at the start of each rebuild."""
    for i in range(n_cells):
        cell_count[i] = 0


@ti.kernel
def count_nodes_per_cell(pos: ti.template(), cell_count: ti.template(), n: ti.i32,
                         origin_x: ti.f32, origin_y: ti.f32, inv_cell: ti.f32,
                         res_x: ti.i32, res_y: ti.i32):
    """Atomic histogram of nodes per cell."""
    for i in range(n):
        origin = ti.math.vec2(origin_x, origin_y)
        c = cell_coord(pos[i], origin, inv_cell, res_x, res_y)
        ti.atomic_add(cell_count[cell_id(c, res_y)], 1)


@ti.kernel
def prefix_sum(cell_count: ti.template(), cell_start: ti.template(), n_cells: ti.i32):
    """
    Exclusive prefix sum: cell_start[i] = sum(cell_count[0..i-1]).

    Serialized over a few dozen cells.
    """
    cell_start[0] = 0
    ti.loop_config(serialize=True)
    for i in range(1, n_cells):
        cell_start[i] = cell_start[i - 1] + cell_count[i - 1]


@ti.kernel
def copy_cell_pointers(cell_start: ti.template(), cell_write: ti.template(), n_cells: ti.i32):
    """cell_write is consumed by scatter; cell_start stays intact for iteration."""
    for i in range(n_cells):
        cell_write[i] = cell_start[i]


@ti.kernel
def scatter_nodes(pos: ti.template(), cell_write: ti.template(),
                  cell_indices: ti.template(), n: ti.i32,
                  origin_x: ti.f32, origin_y: ti.f32, inv_cell: ti.f32,
                  res_x: ti.i32, res_y: ti.i32):
    """
    Write node IDs to the cell-sorted array.

    After this, cell_indices[cell_start[c] : cell_start[c] + cell_count[c]]
    holds every node in cell c.
    """
    for i in range(n):
        origin = ti.math.vec2(origin_x, origin_y)
        c = cell_coord(pos[i], origin, inv_cell, res_x, res_y)
        write_pos = ti.atomic_add(cell_write[cell_id(c, res_y)], 1)
        cell_indices[write_pos] = i


class SpatialGrid:
    """
    Fields and parameters of one collision grid.

    Args:
        capacity: node capacity of the registry
        max_distance: largest centre distance at which two nodes can touch
        width, height: canvas covered by unclamped cells
    """

    def __init__(self, capacity, max_distance, width=SPACE_WIDTH, height=SPACE_HEIGHT):
        self.cell_size = max(float(max_distance), 1.0)
        self.inv_cell = 1.0 / self.cell_size
        self.origin = (0.0, 0.0)
        self.res_x = max(3, int(math.ceil(width / self.cell_size)))
        self.res_y = max(3, int(math.ceil(height / self.cell_size)))
        self.n_cells = self.res_x * self.res_y

        self.cell_count = ti.field(dtype=ti.i32, shape=self.n_cells)
        self.cell_start = ti.field(dtype=ti.i32, shape=self.n_cells)
        self.cell_write = ti.field(dtype=ti.i32, shape=self.n_cells)
        self.cell_indices = ti.field(dtype=ti.i32, shape=max(capacity, 1))

    def params(self):
        """Kernel arguments shared by every grid-aware kernel."""
        return (self.origin[0], self.origin[1], self.inv_cell, self.res_x, self.res_y)

    def rebuild(self, pos, n):
        """Rebuild the cell lists for the first n entries of pos."""
        clear_grid(self.cell_count, self.n_cells)
        count_nodes_per_cell(pos, self.cell_count, n, *self.params())
        prefix_sum(self.cell_count, self.cell_start, self.n_cells)
        copy_cell_pointers(self.cell_start, self.cell_write, self.n_cells)
        scatter_nodes(pos, self.cell_write, self.cell_indices, n, *self.params())

    def total_assigned(self):
        """CSR integrity check: must equal the active node count after rebuild."""
        return int(self.cell_count.to_numpy().sum())
