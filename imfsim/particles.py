#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Particle Storage
================================================================================

Project:        IMF Evaporation Simulator
Module:         particles.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 22, 2026
Last Updated:   February 9, 2026

License:        MIT License
================================================================================

Struct-of-arrays particle set.

Every particle carries a never-reused integer id, so external code can hold
on to an id across steps and find out whether the particle is still active.
Row indices are not stable: removals compact the arrays.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Optional


LIQUID = 0
GAS = 1


def _empty(columns: Optional[int] = None, dtype=np.float64) -> np.ndarray:
    shape = (0,) if columns is None else (0, columns)
    return np.empty(shape, dtype=dtype)


@dataclass
class ParticleSet:
    """
    Active particles of one simulation.

    Mass is fixed at 1 and the radius is fixed per particle; both are kept as
    arrays so the kernels need no special cases.
    """
    ids: np.ndarray = field(default_factory=lambda: _empty(dtype=np.int64))
    positions: np.ndarray = field(default_factory=lambda: _empty(2))
    velocities: np.ndarray = field(default_factory=lambda: _empty(2))
    accelerations: np.ndarray = field(default_factory=lambda: _empty(2))
    radii: np.ndarray = field(default_factory=_empty)
    masses: np.ndarray = field(default_factory=_empty)
    states: np.ndarray = field(default_factory=lambda: _empty(dtype=np.int8))
    thermal_energy: np.ndarray = field(default_factory=_empty)
    last_state_change: np.ndarray = field(default_factory=_empty)
    gas_until: np.ndarray = field(default_factory=_empty)
    local_neighbors: np.ndarray = field(default_factory=lambda: _empty(dtype=np.int64))
    next_id: int = 0

    _ARRAYS = (
        "ids", "positions", "velocities", "accelerations", "radii", "masses",
        "states", "thermal_energy", "last_state_change", "gas_until",
        "local_neighbors",
    )

    def __len__(self) -> int:
        return self.ids.shape[0]

    @property
    def n_particles(self) -> int:
        return len(self)

    def add(self, positions: np.ndarray, velocities: np.ndarray, radius: float) -> np.ndarray:
        """
        Append new Liquid particles with zero thermal energy.

        Returns:
            ids assigned to the new particles
        """
        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 2)
        velocities = np.asarray(velocities, dtype=np.float64).reshape(-1, 2)
        n_new = positions.shape[0]
        new_ids = np.arange(self.next_id, self.next_id + n_new, dtype=np.int64)
        self.next_id += n_new

        self.ids = np.concatenate([self.ids, new_ids])
        self.positions = np.concatenate([self.positions, positions])
        self.velocities = np.concatenate([self.velocities, velocities])
        self.accelerations = np.concatenate([self.accelerations, np.zeros((n_new, 2))])
        self.radii = np.concatenate([self.radii, np.full(n_new, radius)])
        self.masses = np.concatenate([self.masses, np.ones(n_new)])
        self.states = np.concatenate([self.states, np.full(n_new, LIQUID, dtype=np.int8)])
        self.thermal_energy = np.concatenate([self.thermal_energy, np.zeros(n_new)])
        # -inf: a fresh particle has no dwell time to wait out
        self.last_state_change = np.concatenate([self.last_state_change, np.full(n_new, -np.inf)])
        self.gas_until = np.concatenate([self.gas_until, np.zeros(n_new)])
        self.local_neighbors = np.concatenate([self.local_neighbors, np.zeros(n_new, dtype=np.int64)])
        return new_ids

    def keep(self, mask: np.ndarray) -> None:
        """Keep only the rows where mask is True (order preserved)."""
        for name in self._ARRAYS:
            setattr(self, name, getattr(self, name)[mask])

    def truncate(self, n: int) -> None:
        """Drop particles from the end until n remain."""
        for name in self._ARRAYS:
            setattr(self, name, getattr(self, name)[:n])

    def clear(self) -> None:
        self.truncate(0)

    def index_of(self, particle_id: int) -> Optional[int]:
        """Row of an active particle, or None if it is gone."""
        rows = np.flatnonzero(self.ids == particle_id)
        if rows.size == 0:
            return None
        return int(rows[0])

    def speeds_sq(self) -> np.ndarray:
        return np.sum(self.velocities ** 2, axis=1)

    def gas_mask(self) -> np.ndarray:
        return self.states == GAS
