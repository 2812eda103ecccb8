#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Walls and Particle Collisions
================================================================================

Project:        IMF Evaporation Simulator
Module:         collisions.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 22, 2026
Last Updated:   February 9, 2026

License:        MIT License
================================================================================

Boundary handling and narrow-phase overlap resolution.

The side walls and the floor are inelastic (restitution 0.2, floor friction
0.98). The top of the container is open: a particle whose center gets
within one radius of y = 0 has escaped to the headspace and is removed.

Overlapping pairs are separated with a 5% overshoot, then exchange a normal
impulse, a Coulomb friction impulse, and finally a fraction of their kinetic
energy difference (a stand-in for heat conduction through contact).
"""

import numpy as np
from numba import jit

from .particles import ParticleSet
from .spatial import SpatialIndex, cell_range


RESTITUTION = 0.2
FLOOR_FRICTION = 0.98
CONTACT_FRICTION = 0.3
OVERLAP_OVERSHOOT = 1.05
SEPARATION_TOLERANCE = 0.99
MAX_RESOLUTION_PASSES = 16
GOLDEN_ANGLE = 2.399963229728653
GROUNDED_SLACK = 0.6
CONDUCTION_FRACTION = 0.15
CONDUCTION_MIN_DELTA = 0.1
CONDUCTION_MIN_TOTAL = 0.5
CONDUCTION_KE_FLOOR = 0.5


class WallHandler:
    """Reflecting side walls and floor; absorbing top boundary."""

    def __init__(self, width: float, height: float):
        self.width = width
        self.height = height

    def apply(self, particles: ParticleSet) -> np.ndarray:
        """
        Clamp and reflect particles at the walls.

        Particles crossing the top boundary are left untouched here; the
        caller records and removes them.

        Returns:
            boolean mask of escaped particles
        """
        pos = particles.positions
        vel = particles.velocities
        r = particles.radii

        left = pos[:, 0] < r
        pos[left, 0] = r[left]
        vel[left, 0] = -vel[left, 0] * RESTITUTION

        right = pos[:, 0] > self.width - r
        pos[right, 0] = self.width - r[right]
        vel[right, 0] = -vel[right, 0] * RESTITUTION

        escaped = pos[:, 1] < r

        floor = ~escaped & (pos[:, 1] > self.height - r)
        pos[floor, 1] = self.height - r[floor]
        vel[floor, 1] = -vel[floor, 1] * RESTITUTION
        vel[floor, 0] *= FLOOR_FRICTION

        return escaped


@jit(nopython=True, cache=True)
def resolve_collisions(
    positions: np.ndarray,
    velocities: np.ndarray,
    radii: np.ndarray,
    masses: np.ndarray,
    cell_start: np.ndarray,
    cell_items: np.ndarray,
    cols: int,
    rows: int,
    cell_size: float,
    query_radius: float,
    height: float,
    positions_only: bool
) -> int:
    """
    One sequential resolution pass over all overlapping pairs.

    Each unordered pair is handled at most once (from its lower index).
    Positions and velocities are updated in place and later pairs see the
    corrections of earlier ones.

    With positions_only set, only pairs closer than the separation
    tolerance are pushed apart and velocities are left alone. A pass of
    that kind which returns 0 has moved nothing.

    Returns:
        number of pairs resolved
    """
    n_particles = positions.shape[0]
    contacts = 0

    for i in range(n_particles):
        min_cx, max_cx, min_cy, max_cy = cell_range(
            positions[i, 0], positions[i, 1], query_radius, cell_size, cols, rows
        )
        for cy in range(min_cy, max_cy + 1):
            for cx in range(min_cx, max_cx + 1):
                c = cy * cols + cx
                for k in range(cell_start[c], cell_start[c + 1]):
                    j = cell_items[k]
                    if j <= i:
                        continue

                    dx = positions[j, 0] - positions[i, 0]
                    dy = positions[j, 1] - positions[i, 1]
                    dist_sq = dx * dx + dy * dy
                    min_dist = radii[i] + radii[j]
                    tolerance = min_dist * SEPARATION_TOLERANCE
                    limit = tolerance if positions_only else min_dist
                    if dist_sq >= limit * limit:
                        continue
                    contacts += 1

                    dist = np.sqrt(dist_sq)
                    if dist > 1e-9:
                        nx = dx / dist
                        ny = dy / dist
                    else:
                        # Coincident centers: fixed axis per pair
                        dist = 0.0
                        nx = np.cos(GOLDEN_ANGLE * (i + j))
                        ny = np.sin(GOLDEN_ANGLE * (i + j))

                    # Positional correction split by inverse mass, with overshoot
                    resolved = (min_dist - dist) * OVERLAP_OVERSHOOT
                    inv_a = 1.0 / masses[i]
                    inv_b = 1.0 / masses[j]
                    inv_sum = max(1e-9, inv_a + inv_b)
                    move_a = resolved * inv_a / inv_sum
                    move_b = resolved * inv_b / inv_sum

                    # A particle resting on the floor is not pushed into it
                    grounded_a = positions[i, 1] >= height - radii[i] - GROUNDED_SLACK
                    grounded_b = positions[j, 1] >= height - radii[j] - GROUNDED_SLACK
                    if not grounded_a and grounded_b and ny > 0:
                        move_a = resolved
                        move_b = 0.0
                    if grounded_a and not grounded_b and ny < 0:
                        move_a = 0.0
                        move_b = resolved

                    positions[i, 0] -= nx * move_a
                    positions[i, 1] -= ny * move_a
                    positions[j, 0] += nx * move_b
                    positions[j, 1] += ny * move_b

                    # Floating point leftovers: split the remaining overlap evenly
                    dx2 = positions[j, 0] - positions[i, 0]
                    dy2 = positions[j, 1] - positions[i, 1]
                    dist2_sq = dx2 * dx2 + dy2 * dy2
                    if dist2_sq < tolerance * tolerance:
                        dist2 = np.sqrt(dist2_sq)
                        if dist2 > 1e-9:
                            ax = dx2 / dist2
                            ay = dy2 / dist2
                        else:
                            dist2 = 0.0
                            ax = nx
                            ay = ny
                        half = (min_dist - dist2) * 0.5
                        positions[i, 0] -= ax * half
                        positions[i, 1] -= ay * half
                        positions[j, 0] += ax * half
                        positions[j, 1] += ay * half

                    if positions_only:
                        continue

                    # Normal impulse (only for approaching pairs)
                    rvx = velocities[j, 0] - velocities[i, 0]
                    rvy = velocities[j, 1] - velocities[i, 1]
                    vn = rvx * nx + rvy * ny
                    if vn >= 0.0:
                        continue

                    impulse = -(1.0 + RESTITUTION) * vn / (inv_a + inv_b)
                    velocities[i, 0] -= impulse * nx * inv_a
                    velocities[i, 1] -= impulse * ny * inv_a
                    velocities[j, 0] += impulse * nx * inv_b
                    velocities[j, 1] += impulse * ny * inv_b

                    # Coulomb friction along the tangent
                    rvx = velocities[j, 0] - velocities[i, 0]
                    rvy = velocities[j, 1] - velocities[i, 1]
                    rn = rvx * nx + rvy * ny
                    tx = rvx - rn * nx
                    ty = rvy - rn * ny
                    t_len_sq = tx * tx + ty * ty
                    if t_len_sq > 1e-12:
                        t_len = np.sqrt(t_len_sq)
                        jt = -CONTACT_FRICTION * abs(impulse)
                        velocities[i, 0] -= jt * tx / t_len * inv_a
                        velocities[i, 1] -= jt * ty / t_len * inv_a
                        velocities[j, 0] += jt * tx / t_len * inv_b
                        velocities[j, 1] += jt * ty / t_len * inv_b

                    # Conduction: move a fraction of the KE gap, keep directions
                    ke_a = 0.5 * masses[i] * (velocities[i, 0] ** 2 + velocities[i, 1] ** 2)
                    ke_b = 0.5 * masses[j] * (velocities[j, 0] ** 2 + velocities[j, 1] ** 2)
                    delta = CONDUCTION_FRACTION * (ke_a - ke_b)
                    if abs(delta) > CONDUCTION_MIN_DELTA and ke_a + ke_b > CONDUCTION_MIN_TOTAL:
                        v_a_sq = 2.0 * ke_a / masses[i]
                        v_b_sq = 2.0 * ke_b / masses[j]
                        if v_a_sq > 1e-12 and v_b_sq > 1e-12:
                            new_ke_a = max(CONDUCTION_KE_FLOOR, ke_a - delta)
                            new_ke_b = max(CONDUCTION_KE_FLOOR, ke_b + delta)
                            scale_a = np.sqrt(2.0 * new_ke_a / (masses[i] * v_a_sq))
                            scale_b = np.sqrt(2.0 * new_ke_b / (masses[j] * v_b_sq))
                            velocities[i, 0] *= scale_a
                            velocities[i, 1] *= scale_a
                            velocities[j, 0] *= scale_b
                            velocities[j, 1] *= scale_b

    return contacts


class CollisionResolver:
    """
    Narrow-phase overlap resolution on top of the spatial index.

    The first pass resolves every overlap and applies the contact impulses.
    Crowded clusters can be left with pairs that an earlier correction
    pushed back together, so position-only passes follow until no two
    centers are closer than the separation tolerance or the pass cap is
    reached.
    """

    def __init__(self, height: float, max_passes: int = MAX_RESOLUTION_PASSES):
        self.height = height
        self.max_passes = max(1, int(max_passes))
        self.last_contacts = 0
        self.last_passes = 0

    def _pass(self, particles: ParticleSet, index: SpatialIndex, positions_only: bool) -> int:
        index.build(particles.positions)
        cell_start, cell_items = index.packed()
        query_radius = 4.0 * float(np.max(particles.radii))
        return resolve_collisions(
            particles.positions, particles.velocities, particles.radii, particles.masses,
            cell_start, cell_items, index.cols, index.rows, index.cell_size,
            query_radius, self.height, positions_only
        )

    def resolve(self, particles: ParticleSet, index: SpatialIndex) -> int:
        """
        Resolve all overlaps among the active particles.

        Args:
            particles: Active particles
            index: Spatial index, rebuilt before every pass

        Returns:
            number of overlapping pairs found by the first pass
        """
        if len(particles) == 0:
            self.last_contacts = 0
            self.last_passes = 0
            return 0

        self.last_contacts = self._pass(particles, index, False)
        self.last_passes = 1
        if self.last_contacts > 0:
            while self.last_passes < self.max_passes:
                self.last_passes += 1
                if self._pass(particles, index, True) == 0:
                    break
        return self.last_contacts
