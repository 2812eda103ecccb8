#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Spatial Index (Uniform Cell Grid)
================================================================================

Project:        IMF Evaporation Simulator
Module:         spatial.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 22, 2026
Last Updated:   February 9, 2026

License:        MIT License
================================================================================

Uniform grid bucketing of particles for neighbor queries.

The container is closed (walls, not periodic), so cell coordinates are
clamped to the grid instead of wrapped. A particle slightly outside the box
lands in the nearest edge cell.

Buckets are stored in compressed form so the numba kernels can walk them:

    cell_start[c] .. cell_start[c + 1]   ->  slice of cell_items for cell c

A neighbor query returns every particle in the cells overlapping the square
of half-width `radius` around (x, y). That is a superset of the particles
within `radius`; callers re-check the exact distance.
"""

import numpy as np
from numba import jit
from typing import Callable, Tuple


@jit(nopython=True, cache=True)
def cell_coordinates(x: float, y: float, cell_size: float, cols: int, rows: int) -> Tuple[int, int]:
    """Clamped (no wraparound) cell coordinate of a point."""
    cx = int(np.floor(x / cell_size))
    cy = int(np.floor(y / cell_size))
    if cx < 0:
        cx = 0
    elif cx > cols - 1:
        cx = cols - 1
    if cy < 0:
        cy = 0
    elif cy > rows - 1:
        cy = rows - 1
    return cx, cy


@jit(nopython=True, cache=True)
def cell_range(
    x: float,
    y: float,
    radius: float,
    cell_size: float,
    cols: int,
    rows: int
) -> Tuple[int, int, int, int]:
    """
    Range of cells overlapping the square of half-width radius around (x, y).

    Cells outside the grid are dropped, so a query entirely outside the
    container yields an empty range (min > max).
    """
    min_cx = max(0, int(np.floor((x - radius) / cell_size)))
    max_cx = min(cols - 1, int(np.floor((x + radius) / cell_size)))
    min_cy = max(0, int(np.floor((y - radius) / cell_size)))
    max_cy = min(rows - 1, int(np.floor((y + radius) / cell_size)))
    return min_cx, max_cx, min_cy, max_cy


@jit(nopython=True, cache=True)
def assign_cells(positions: np.ndarray, cell_size: float, cols: int, rows: int) -> np.ndarray:
    """Flat cell index for every row of an Nx2 position array."""
    n_particles = positions.shape[0]
    cells = np.empty(n_particles, dtype=np.int64)
    for i in range(n_particles):
        cx, cy = cell_coordinates(positions[i, 0], positions[i, 1], cell_size, cols, rows)
        cells[i] = cy * cols + cx
    return cells


@jit(nopython=True, cache=True)
def pack_cells(cells: np.ndarray, items: np.ndarray, n_cells: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Counting sort of items by cell.

    Insertion order is preserved inside each cell, which keeps neighbor
    iteration order (and therefore the whole trajectory) deterministic.

    Returns:
        cell_start: (n_cells + 1) offsets into cell_items
        cell_items: item ids grouped by cell
    """
    n_items = cells.shape[0]
    cell_start = np.zeros(n_cells + 1, dtype=np.int64)
    for k in range(n_items):
        cell_start[cells[k] + 1] += 1
    for c in range(n_cells):
        cell_start[c + 1] += cell_start[c]

    fill = cell_start[:-1].copy()
    cell_items = np.empty(n_items, dtype=np.int64)
    for k in range(n_items):
        c = cells[k]
        cell_items[fill[c]] = items[k]
        fill[c] += 1

    return cell_start, cell_items


class SpatialIndex:
    """
    Uniform grid over a closed rectangular container.

    The cell size must be at least as large as the particle diameter; the
    query radius passed to `for_each_neighbor` (or to the kernels) must cover
    the largest interaction cutoff in use.
    """

    def __init__(self, width: float, height: float, cell_size: float = 12.0):
        self.width = width
        self.height = height
        self.cell_size = max(8.0, cell_size)
        self.cols = max(1, int(width // self.cell_size))
        self.rows = max(1, int(height // self.cell_size))

        self._cells = np.empty(0, dtype=np.int64)
        self._items = np.empty(0, dtype=np.int64)
        self._packed: Tuple[np.ndarray, np.ndarray] = (
            np.zeros(self.n_cells + 1, dtype=np.int64),
            np.empty(0, dtype=np.int64),
        )
        self._stale = False

    @property
    def n_cells(self) -> int:
        return self.cols * self.rows

    def __len__(self) -> int:
        return self._items.shape[0]

    def clear(self) -> None:
        """Empty all buckets."""
        self._cells = np.empty(0, dtype=np.int64)
        self._items = np.empty(0, dtype=np.int64)
        self._packed = (
            np.zeros(self.n_cells + 1, dtype=np.int64),
            np.empty(0, dtype=np.int64),
        )
        self._stale = False

    def cell_of(self, x: float, y: float) -> int:
        cx, cy = cell_coordinates(float(x), float(y), self.cell_size, self.cols, self.rows)
        return cy * self.cols + cx

    def insert(self, index: int, x: float, y: float) -> None:
        """Bucket one particle (by its index in the particle arrays)."""
        self._cells = np.append(self._cells, np.int64(self.cell_of(x, y)))
        self._items = np.append(self._items, np.int64(index))
        self._stale = True

    def build(self, positions: np.ndarray) -> None:
        """
        Rebuild from scratch with every row of `positions`.

        Row i is stored as item i. This is the per-sub-step path.
        """
        self._cells = assign_cells(positions, self.cell_size, self.cols, self.rows)
        self._items = np.arange(positions.shape[0], dtype=np.int64)
        self._packed = pack_cells(self._cells, self._items, self.n_cells)
        self._stale = False

    def packed(self) -> Tuple[np.ndarray, np.ndarray]:
        """(cell_start, cell_items) arrays consumed by the numba kernels."""
        if self._stale:
            self._packed = pack_cells(self._cells, self._items, self.n_cells)
            self._stale = False
        return self._packed

    def for_each_neighbor(self, x: float, y: float, radius: float, fn: Callable[[int], None]) -> None:
        """
        Call fn(index) for every item in cells overlapping the query square.

        This is a superset query: callers must check the exact distance.
        """
        cell_start, cell_items = self.packed()
        min_cx, max_cx, min_cy, max_cy = cell_range(
            float(x), float(y), float(radius), self.cell_size, self.cols, self.rows
        )
        for cy in range(min_cy, max_cy + 1):
            for cx in range(min_cx, max_cx + 1):
                c = cy * self.cols + cx
                for k in range(cell_start[c], cell_start[c + 1]):
                    fn(int(cell_items[k]))

    def neighbors(self, x: float, y: float, radius: float) -> list:
        """List form of `for_each_neighbor`."""
        found = []
        self.for_each_neighbor(x, y, radius, found.append)
        return found
