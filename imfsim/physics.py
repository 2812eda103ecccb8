#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Intermolecular Force Model
================================================================================

Project:        IMF Evaporation Simulator
Module:         physics.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 22, 2026
Last Updated:   February 9, 2026

License:        MIT License
================================================================================

Pairwise force laws for the three intermolecular forces, and the neighbor
pass that turns them into per-particle accelerations.

London dispersion uses the Lennard-Jones force:

    F(r) = 24ε/r [2(σ/r)¹² - (σ/r)⁶]

Positive values are repulsive. The magnitude is soft-clipped to [-60, 60]
and cut off at 2.5σ (2.0σ for very weak wells, ε < 0.1, which would
otherwise clump spuriously).

Hydrogen bonds and dipole-dipole attraction are proxies, not derived from a
potential:

    F_hb(r) = E_hb (1 - r/r_c)^0.7               r_c = 2.8σ
    F_dp(r) = D / r² · max(0.1, 1 - r/r_c)       r_c = 2.2σ

Both are attractive and act along the inter-particle axis.
"""

import numpy as np
from numba import jit
from dataclasses import dataclass
from typing import Optional, Tuple

from .particles import LIQUID, GAS
from .spatial import SpatialIndex, cell_range


# Cutoffs in units of sigma
LJ_CUTOFF = 2.5
LJ_CUTOFF_WEAK = 2.0
WEAK_EPSILON = 0.1
HB_CUTOFF = 2.8
DIPOLE_CUTOFF = 2.2
DENSITY_CUTOFF = 2.4

# Force guard
FORCE_CLAMP = 60.0
DISTANCE_EPS = 1e-9

# Pair scaling by phase
GAS_PAIR_SCALE = 0.2
LIQUID_PAIR_BOOST = 1.3


@jit(nopython=True, cache=True)
def clamp_force(f: float) -> float:
    if f > FORCE_CLAMP:
        return FORCE_CLAMP
    if f < -FORCE_CLAMP:
        return -FORCE_CLAMP
    return f


@jit(nopython=True, cache=True)
def dispersion_cutoff(epsilon: float, sigma: float) -> float:
    """Cutoff distance of the dispersion force in length units."""
    if epsilon < WEAK_EPSILON:
        return LJ_CUTOFF_WEAK * sigma
    return LJ_CUTOFF * sigma


@jit(nopython=True, cache=True)
def dispersion_force(r: float, epsilon: float, sigma: float) -> float:
    """
    Lennard-Jones force magnitude (positive = repulsive).

    Args:
        r: Distance between particles (already offset by DISTANCE_EPS)
        epsilon: Potential well depth
        sigma: Zero-crossing distance

    Returns:
        Clamped force magnitude, 0 beyond the cutoff
    """
    if r > dispersion_cutoff(epsilon, sigma):
        return 0.0
    sr = sigma / r
    sr2 = sr * sr
    sr6 = sr2 * sr2 * sr2
    sr12 = sr6 * sr6
    return clamp_force(24.0 * epsilon * (2.0 * sr12 - sr6) / r)


@jit(nopython=True, cache=True)
def hydrogen_bond_force(r: float, strength: float, sigma: float) -> float:
    """Hydrogen-bond proxy magnitude (positive = attractive)."""
    if strength <= 0.0:
        return 0.0
    r_cut = HB_CUTOFF * sigma
    if r > r_cut:
        return 0.0
    falloff = max(0.0, 1.0 - r / r_cut) ** 0.7
    return clamp_force(strength * falloff)


@jit(nopython=True, cache=True)
def dipole_force(r: float, strength: float, sigma: float) -> float:
    """Dipole-dipole proxy magnitude (positive = attractive)."""
    if strength <= 0.0:
        return 0.0
    r_cut = DIPOLE_CUTOFF * sigma
    if r > r_cut:
        return 0.0
    return clamp_force(strength / (r * r) * max(0.1, 1.0 - r / r_cut))


@jit(nopython=True, cache=True)
def pair_force(
    dist: float,
    state_a: int,
    state_b: int,
    epsilon: float,
    sigma: float,
    hb_strength: float,
    dipole_strength: float,
    coh_lj: float,
    coh_hb: float,
    coh_dp: float
) -> float:
    """
    Combined force on a from b along the a->b axis (positive = toward b).

    Liquid-liquid pairs get a 30% boost on dispersion and H-bonding; any pair
    involving a gas particle is scaled down to 20%.
    """
    r = dist + DISTANCE_EPS
    boost = LIQUID_PAIR_BOOST if (state_a == LIQUID and state_b == LIQUID) else 1.0
    gas_scale = GAS_PAIR_SCALE if (state_a == GAS or state_b == GAS) else 1.0

    f = -dispersion_force(r, epsilon, sigma) * coh_lj * boost
    f += hydrogen_bond_force(r, hb_strength, sigma) * coh_hb * boost
    f += dipole_force(r, dipole_strength, sigma) * coh_dp
    return f * gas_scale


@jit(nopython=True, cache=True)
def compute_pair_accelerations(
    positions: np.ndarray,
    states: np.ndarray,
    cell_start: np.ndarray,
    cell_items: np.ndarray,
    cols: int,
    rows: int,
    cell_size: float,
    query_radius: float,
    epsilon: float,
    sigma: float,
    hb_strength: float,
    dipole_strength: float,
    coh_lj: float,
    coh_hb: float,
    coh_dp: float
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Accumulated pair forces, plus local neighbor counts.

    Each ordered pair is visited once: the force on i from j is accumulated
    while visiting i. Any neighbor within DENSITY_CUTOFF·σ counts toward
    i's local density.

    Returns:
        accelerations: Nx2 force accumulator (divided by mass at integration)
        local_neighbors: neighbor count per particle
    """
    n_particles = positions.shape[0]
    accelerations = np.zeros((n_particles, 2))
    local_neighbors = np.zeros(n_particles, dtype=np.int64)
    density_cut_sq = (DENSITY_CUTOFF * sigma) ** 2

    for i in range(n_particles):
        ax = positions[i, 0]
        ay = positions[i, 1]
        min_cx, max_cx, min_cy, max_cy = cell_range(ax, ay, query_radius, cell_size, cols, rows)

        for cy in range(min_cy, max_cy + 1):
            for cx in range(min_cx, max_cx + 1):
                c = cy * cols + cx
                for k in range(cell_start[c], cell_start[c + 1]):
                    j = cell_items[k]
                    if j == i:
                        continue

                    dx = positions[j, 0] - ax
                    dy = positions[j, 1] - ay
                    dist_sq = dx * dx + dy * dy
                    if dist_sq < density_cut_sq:
                        local_neighbors[i] += 1

                    dist = np.sqrt(dist_sq)
                    if dist <= 1e-12:
                        continue

                    f = pair_force(
                        dist, states[i], states[j],
                        epsilon, sigma, hb_strength, dipole_strength,
                        coh_lj, coh_hb, coh_dp
                    )
                    accelerations[i, 0] += f * dx / dist
                    accelerations[i, 1] += f * dy / dist

    return accelerations, local_neighbors


def interaction_range(sigma: float) -> float:
    """Largest cutoff of any force law or the density estimate."""
    return max(LJ_CUTOFF, HB_CUTOFF, DIPOLE_CUTOFF, DENSITY_CUTOFF) * sigma


class ForceModel:
    """
    Pairwise IMF forces for one scenario.

    `compute` rebuilds nothing: the caller builds the spatial index for the
    current positions first.
    """

    def __init__(self, scenario):
        self.scenario = scenario

    @property
    def query_radius(self) -> float:
        return interaction_range(self.scenario.sigma)

    def compute(self, particles, index: SpatialIndex) -> None:
        """Overwrite accelerations and local neighbor counts in place."""
        s = self.scenario
        cell_start, cell_items = index.packed()
        accelerations, local_neighbors = compute_pair_accelerations(
            particles.positions, particles.states,
            cell_start, cell_items, index.cols, index.rows, index.cell_size,
            self.query_radius,
            s.epsilon, s.sigma, s.hb_strength, s.dipole_strength,
            s.coh_lj, s.coh_hb, s.coh_dp
        )
        particles.accelerations = accelerations
        particles.local_neighbors = local_neighbors

    def breakdown(self, particles, index: SpatialIndex, row: int) -> "ForceBreakdown":
        """
        Per-law force magnitudes summed over the neighbors of one particle.

        Uses the raw laws (no cohesion or phase scaling), which is what a
        learner inspecting a single particle wants to compare.
        """
        s = self.scenario
        ax, ay = particles.positions[row]
        dispersion = hydrogen_bond = dipole = 0.0
        nearest_distance = np.inf
        nearest_row = None

        for j in index.neighbors(ax, ay, self.query_radius):
            if j == row:
                continue
            dx = particles.positions[j, 0] - ax
            dy = particles.positions[j, 1] - ay
            dist = float(np.hypot(dx, dy))
            if dist < nearest_distance:
                nearest_distance = dist
                nearest_row = j
            r = dist + DISTANCE_EPS
            dispersion += abs(dispersion_force(r, s.epsilon, s.sigma))
            hydrogen_bond += abs(hydrogen_bond_force(r, s.hb_strength, s.sigma))
            dipole += abs(dipole_force(r, s.dipole_strength, s.sigma))

        return ForceBreakdown(
            dispersion=dispersion,
            hydrogen_bond=hydrogen_bond,
            dipole=dipole,
            nearest_distance=nearest_distance,
            nearest_row=nearest_row,
        )


@dataclass(frozen=True)
class ForceBreakdown:
    """Summed per-law force magnitudes acting on one particle."""
    dispersion: float
    hydrogen_bond: float
    dipole: float
    nearest_distance: float
    nearest_row: Optional[int]

    @property
    def total(self) -> float:
        return self.dispersion + self.hydrogen_bond + self.dipole


def calculate_kinetic_energy(velocities: np.ndarray, masses: Optional[np.ndarray] = None) -> float:
    """
    Calculate total kinetic energy.

    KE = Σ (1/2) m v²
    """
    if masses is None:
        masses = np.ones(velocities.shape[0])

    v_sq = np.sum(velocities ** 2, axis=1)
    return 0.5 * np.sum(masses * v_sq)


def calculate_temperature(velocities: np.ndarray) -> float:
    """
    Temperature from equipartition in 2D with k_B = m = 1.

    T = KE / N (two degrees of freedom per particle). The container has
    walls, so center-of-mass motion is not removed.
    """
    n_particles = velocities.shape[0]
    if n_particles == 0:
        return 0.0
    return calculate_kinetic_energy(velocities) / n_particles
