#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Evaporation Trials
================================================================================

Project:        IMF Evaporation Simulator
Module:         trial.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 22, 2026
Last Updated:   February 9, 2026

License:        MIT License
================================================================================

Bookkeeping for a heated evaporation trial: which particles escaped, how the
gas and escape counts evolved, and how the trial ended.
"""

from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class EscapedParticle:
    """Snapshot of a particle taken when it left through the top."""
    particle_id: int
    position: Tuple[float, float]
    radius: float
    state: int
    thermal_energy: float
    scenario: str
    time: float


@dataclass(frozen=True)
class HistorySample:
    """One point of the gas/escape time series."""
    t: float
    gas_count: int
    escaped_count: int
    scenario: str


@dataclass(frozen=True)
class TrialResult:
    """Outcome of a finished trial."""
    scenario: str
    escaped_count: int
    total_particles: int
    duration: float

    @property
    def escaped_fraction(self) -> float:
        if self.total_particles == 0:
            return 0.0
        return self.escaped_count / self.total_particles

    @property
    def escaped_percent(self) -> int:
        return int(round(self.escaped_fraction * 100))


class TrialTracker:
    """
    Escape records and the (t, gas, escaped, scenario) history.

    The history buffer is bounded; the oldest samples are dropped first.
    """

    def __init__(self, duration: float = 30.0, history_limit: int = 10000):
        self.duration = duration
        self.history: Deque[HistorySample] = deque(maxlen=history_limit)
        self.escaped: List[EscapedParticle] = []
        self.escaped_count = 0
        self.elapsed = 0.0
        self.ended = False
        self.result: Optional[TrialResult] = None

    def start(self) -> None:
        """New trial: clock, escape counter and escape list back to zero."""
        self.escaped = []
        self.escaped_count = 0
        self.elapsed = 0.0
        self.ended = False
        self.result = None

    def clear_history(self, scenario: Optional[str] = None) -> None:
        """Drop all samples, or only those of one scenario."""
        if scenario is None:
            self.history.clear()
            return
        kept = [sample for sample in self.history if sample.scenario != scenario]
        self.history.clear()
        self.history.extend(kept)

    def record_escapes(self, particles, mask: np.ndarray, scenario: str, now: float) -> int:
        """Snapshot every masked particle into the escaped list."""
        rows = np.flatnonzero(mask)
        for row in rows:
            self.escaped.append(EscapedParticle(
                particle_id=int(particles.ids[row]),
                position=(float(particles.positions[row, 0]), float(particles.positions[row, 1])),
                radius=float(particles.radii[row]),
                state=int(particles.states[row]),
                thermal_energy=float(particles.thermal_energy[row]),
                scenario=scenario,
                time=now,
            ))
        self.escaped_count += rows.size
        return int(rows.size)

    def sample(self, gas_count: int, scenario: str) -> None:
        if self.elapsed <= self.duration:
            self.history.append(HistorySample(self.elapsed, gas_count, self.escaped_count, scenario))

    @property
    def expired(self) -> bool:
        return self.elapsed >= self.duration

    def finish(self, scenario: str, active_particles: int) -> TrialResult:
        self.ended = True
        self.result = TrialResult(
            scenario=scenario,
            escaped_count=self.escaped_count,
            total_particles=active_particles + len(self.escaped),
            duration=self.elapsed,
        )
        return self.result


@dataclass(frozen=True)
class EvaporationGoal:
    """Playground challenge: end a trial with a given escaped percentage."""
    text: str
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    target: Optional[float] = None

    def check(self, escaped_percent: float) -> bool:
        if self.target is not None:
            return abs(escaped_percent - self.target) < 2
        return self.minimum <= escaped_percent <= self.maximum


PLAYGROUND_GOALS = (
    EvaporationGoal("Achieve moderate evaporation: 20-35% evaporated", 20, 35),
    EvaporationGoal("Reach substantial evaporation: 45-60% evaporated", 45, 60),
    EvaporationGoal("Achieve high evaporation: 70-85% evaporated", 70, 85),
    EvaporationGoal("Keep evaporation low: 10-25% evaporated (strong IMFs)", 10, 25),
    EvaporationGoal("Reach significant evaporation: 55-75% evaporated", 55, 75),
    EvaporationGoal("Achieve balanced evaporation: 30-50% evaporated", 30, 50),
    EvaporationGoal("Minimize evaporation: 5-20% evaporated (very strong IMFs)", 5, 20),
    EvaporationGoal("Achieve high evaporation: 65-80% evaporated", 65, 80),
    EvaporationGoal("Reach moderate-to-high evaporation: 25-45% evaporated", 25, 45),
    EvaporationGoal("Achieve very high evaporation: 80-95% evaporated (weak IMFs)", 80, 95),
)


def random_goal(rng: Optional[np.random.Generator] = None) -> EvaporationGoal:
    rng = rng or np.random.default_rng()
    return PLAYGROUND_GOALS[int(rng.integers(len(PLAYGROUND_GOALS)))]
