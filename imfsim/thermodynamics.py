#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Liquid/Gas Phase State Machine
================================================================================

Project:        IMF Evaporation Simulator
Module:         thermodynamics.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 22, 2026
Last Updated:   February 9, 2026

License:        MIT License
================================================================================

Per-particle phase bookkeeping with hysteresis.

Evaporation and condensation use different thresholds, and every particle
has to stay in a phase for a minimum dwell time before it may leave it.
Together these keep particles near the boundary from flickering.

Liquid -> Gas
    Surface particles (fewer than 3 neighbors) need
        v² > vGas² · surface_multiplier   and   thermal > surface threshold
    Bulk particles need
        v² > vGas² · escape_multiplier · (1 - 0.5 thermal) · (1 - 0.2 [thermal > 0.7])
        and thermal > bulk threshold
    where vGas² = 120 kT + 10 (0.15 + 0.25 viscosity).

Gas -> Liquid
    Any of: slow, cool and not rising; near the top, cool and moderately
    slow; locally dense, not rising and cool.
"""

import numpy as np
from enum import IntEnum
from dataclasses import dataclass
from typing import List

from .particles import ParticleSet, LIQUID, GAS
from .scenarios import ScenarioParameters


class Phase(IntEnum):
    """Phase of a single particle."""
    LIQUID = LIQUID
    GAS = GAS


# Dwell times (seconds)
MIN_STATE_DURATION = 0.3
HOT_DWELL_FACTOR = 0.5
SURFACE_GAS_TIMER = 1.5
BULK_GAS_TIMER = 2.0

# Liquid -> Gas
SURFACE_DENSITY = 3
HOT_THERMAL = 0.7
THERMAL_BONUS = 0.5
VERY_HOT_BONUS = 0.2
SURFACE_BOOST = -60.0
BULK_BOOST = -80.0
BOOST_SPEED_LIMIT = 50.0

# Gas -> Liquid
RISING_SPEED = -10.0
NEAR_TOP_FRACTION = 0.2
RISING_CONDENSE = 0.3
RESTING_CONDENSE = 0.5
NEAR_TOP_CONDENSE = 0.8
COOL_THERMAL = 0.2
HEATED_REGION_FRACTION = 0.9


@dataclass(frozen=True)
class StateChange:
    """One particle changing phase."""
    particle_id: int
    old_phase: Phase
    new_phase: Phase
    time: float
    thermal_energy: float


class PhaseStateMachine:
    """Liquid/Gas transitions for one scenario inside a fixed container."""

    def __init__(self, scenario: ScenarioParameters, height: float):
        self.scenario = scenario
        self.height = height

    def update(self, particles: ParticleSet, now: float) -> List[StateChange]:
        """
        Apply all transitions that are due at clock value `now` (seconds).

        Every particle is judged on its state before this update, so the
        result does not depend on particle order.

        Returns:
            the transitions that happened, in particle order
        """
        if len(particles) == 0:
            return []

        s = self.scenario
        thresholds = s.evaporation_thresholds()
        vgas2 = s.gas_speed_sq
        up_mult = s.upward_multiplier

        vel = particles.velocities
        v2 = particles.speeds_sq()
        te = particles.thermal_energy
        since = now - particles.last_state_change
        liquid = particles.states == LIQUID
        gas = particles.states == GAS
        surface = particles.local_neighbors < SURFACE_DENSITY

        # Liquid -> Gas
        dwell = np.where(te > HOT_THERMAL, MIN_STATE_DURATION * HOT_DWELL_FACTOR, MIN_STATE_DURATION)
        may_evaporate = liquid & (since >= dwell)

        evaporate_surface = (
            may_evaporate & surface
            & (v2 > vgas2 * thresholds.surface_multiplier)
            & (te > thresholds.surface_thermal_threshold)
        )
        bulk_threshold = (
            vgas2 * thresholds.escape_multiplier
            * (1.0 - te * THERMAL_BONUS)
            * (1.0 - np.where(te > HOT_THERMAL, VERY_HOT_BONUS, 0.0))
        )
        evaporate_bulk = (
            may_evaporate & ~surface
            & (v2 > bulk_threshold)
            & (te > thresholds.bulk_thermal_threshold)
        )
        evaporate = evaporate_surface | evaporate_bulk

        # Gas -> Liquid
        may_condense = gas & (since >= MIN_STATE_DURATION)
        rising = vel[:, 1] < RISING_SPEED
        near_top = particles.positions[:, 1] < self.height * NEAR_TOP_FRACTION
        cool = te < COOL_THERMAL
        condense_limit = np.where(rising, RISING_CONDENSE, RESTING_CONDENSE) * vgas2
        condense = may_condense & (
            ((v2 < condense_limit) & cool & ~rising)
            | (near_top & cool & (v2 < NEAR_TOP_CONDENSE * vgas2))
            | (~surface & ~rising & cool)
        )

        changes = self._record(particles, evaporate, condense, now)

        particles.states[evaporate] = GAS
        particles.last_state_change[evaporate | condense] = now
        particles.gas_until[evaporate_surface] = now + SURFACE_GAS_TIMER
        particles.gas_until[evaporate_bulk] = now + BULK_GAS_TIMER

        boost = np.where(evaporate_surface, SURFACE_BOOST, BULK_BOOST) * up_mult
        boosted = evaporate & (vel[:, 1] < BOOST_SPEED_LIMIT)
        vel[boosted, 1] += boost[boosted]

        particles.states[condense] = LIQUID
        # Keep the heat of particles still sitting over the stovetop
        cooled = condense & (particles.positions[:, 1] + particles.radii < self.height * HEATED_REGION_FRACTION)
        particles.thermal_energy[cooled] *= 0.5

        return changes

    @staticmethod
    def _record(particles: ParticleSet, evaporate: np.ndarray, condense: np.ndarray, now: float) -> List[StateChange]:
        changes = []
        for row in np.flatnonzero(evaporate | condense):
            old = Phase(int(particles.states[row]))
            new = Phase.GAS if evaporate[row] else Phase.LIQUID
            changes.append(StateChange(
                particle_id=int(particles.ids[row]),
                old_phase=old,
                new_phase=new,
                time=now,
                thermal_energy=float(particles.thermal_energy[row]),
            ))
        return changes


def count_gas(particles: ParticleSet) -> int:
    return int(np.count_nonzero(particles.gas_mask()))
