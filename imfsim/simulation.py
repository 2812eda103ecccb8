#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Evaporation Simulation Engine
================================================================================

Project:        IMF Evaporation Simulator
Module:         simulation.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 22, 2026
Last Updated:   February 9, 2026

License:        MIT License
================================================================================

Sub-stepped semi-implicit Euler integration of a 2D liquid in an open-topped
container, and the engine facade that owns the particles, the scenario and
the trial bookkeeping.

Each sub-step runs, in order:

1. rebuild the spatial index, pair forces, thermostat
2. gravity, stovetop heating, gas buoyancy, floor attraction
3. v += a/m dt, x += v dt, thermal jitter
4. walls (particles leaving through the top escape)
5. one collision pass, then walls again
6. liquid/gas transitions and the gas count

The engine is single-threaded and synchronous. External readers take a
`snapshot()` between `step` calls.
"""

import logging
import math
import time
import numpy as np
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Tuple

from .collisions import CollisionResolver, WallHandler
from .exceptions import InvalidConfigurationError, ParticleNotFoundError
from .particles import ParticleSet, GAS, LIQUID
from .physics import ForceModel, calculate_kinetic_energy, calculate_temperature
from .scenarios import (
    MAX_PARTICLES,
    MIN_PARTICLES,
    PLAYGROUND_SLIDERS,
    ScenarioParameters,
    scenario_preset
)
from .spatial import SpatialIndex
from .thermal import HEATING_ZONE_FRACTION, ThermalModel
from .thermodynamics import Phase, PhaseStateMachine, StateChange, count_gas
from .trial import EscapedParticle, HistorySample, TrialResult, TrialTracker


logger = logging.getLogger(__name__)


# External accelerations (px/s^2, +y is down)
GAS_BUOYANCY = 300.0
FLOOR_ATTRACTION_RANGE = 50.0

# Integration
JITTER_THRESHOLD = 0.1
JITTER_SCALE = 8.0
MIN_SUBSTEPS_WITH_GRAVITY = 2
MIN_SAFE_DISPLACEMENT = 2.0

# Spawning
SPAWN_MARGIN = 0.05
SPAWN_SPEED = 20.0
ADDED_SPEED_FACTOR = 0.5


@dataclass
class SimulationConfig:
    """Container and integration settings."""
    # Container (pixels); the widget's default canvas
    box_size: Tuple[float, float] = (225.0, 420.0)
    particle_radius: float = 4.5

    # World flags and gravity
    gravity: float = 900.0
    gravity_on: bool = True
    heating_on: bool = False

    # Performance settings
    cell_size: float = 12.0
    max_substeps: int = 12

    # Trial
    trial_duration: float = 30.0
    history_limit: int = 10000

    # Randomness and clock
    seed: Optional[int] = None
    use_wall_clock: bool = False

    def validate(self) -> "SimulationConfig":
        width, height = self.box_size
        if not (math.isfinite(width) and math.isfinite(height)) or width <= 0 or height <= 0:
            raise InvalidConfigurationError(f"box_size must be positive, got {self.box_size}")
        if not self.particle_radius > 0:
            raise InvalidConfigurationError(f"particle_radius must be positive, got {self.particle_radius}")
        if 2 * self.particle_radius >= min(width, height):
            raise InvalidConfigurationError("particle diameter must fit inside the container")
        if not self.cell_size > 0:
            raise InvalidConfigurationError(f"cell_size must be positive, got {self.cell_size}")
        if self.max_substeps < MIN_SUBSTEPS_WITH_GRAVITY:
            raise InvalidConfigurationError(f"max_substeps must be >= {MIN_SUBSTEPS_WITH_GRAVITY}")
        if not self.trial_duration > 0:
            raise InvalidConfigurationError(f"trial_duration must be positive, got {self.trial_duration}")
        if self.history_limit < 1:
            raise InvalidConfigurationError(f"history_limit must be >= 1, got {self.history_limit}")
        return self


@dataclass(frozen=True)
class SimulationState:
    """Read-only copy of the simulation taken between steps."""
    ids: np.ndarray
    positions: np.ndarray
    velocities: np.ndarray
    states: np.ndarray
    thermal_energy: np.ndarray
    radii: np.ndarray
    time: float
    step: int
    gas_count: int
    escaped_count: int
    scenario: str
    contacts: int = 0             # Overlapping pairs in the last resolution pass
    thermostat_scale: float = 1.0 # Last velocity rescale factor of the thermostat

    @property
    def n_particles(self) -> int:
        return self.positions.shape[0]

    @property
    def kinetic_energy(self) -> float:
        return calculate_kinetic_energy(self.velocities)

    @property
    def temperature(self) -> float:
        return calculate_temperature(self.velocities)


@dataclass(frozen=True)
class ParticleDebugInfo:
    """Everything a debug panel shows about one particle."""
    particle_id: int
    position: Tuple[float, float]
    velocity: Tuple[float, float]
    speed: float
    kinetic_energy: float
    thermal_energy: float
    phase: Phase
    mass: float
    radius: float
    local_neighbors: int
    dispersion_force: float
    hydrogen_bond_force: float
    dipole_force: float
    nearest_distance: float
    nearest_phase: Optional[Phase]
    in_heating_zone: bool
    distance_from_floor: float
    gas_time_left: Optional[float]
    time_since_state_change: Optional[float]

    @property
    def total_force(self) -> float:
        return self.dispersion_force + self.hydrogen_bond_force + self.dipole_force


class SimulationObserver:
    """
    Subscriber interface for the UI layer.

    Override the hooks of interest; the defaults do nothing.
    """

    def on_state_change(self, change: StateChange) -> None:
        pass

    def on_trial_end(self, result: TrialResult) -> None:
        pass


class Integrator:
    """
    Adaptive sub-stepped semi-implicit Euler stepper.

    Owns the per-step collaborators; the engine owns the particles.
    """

    def __init__(self, config: SimulationConfig, scenario: ScenarioParameters, rng: np.random.Generator):
        width, height = config.box_size
        self.config = config
        self.width = width
        self.height = height
        self.rng = rng

        self.index = SpatialIndex(width, height, config.cell_size)
        self.forces = ForceModel(scenario)
        self.thermal = ThermalModel(scenario, width, height)
        self.walls = WallHandler(width, height)
        self.collisions = CollisionResolver(height)
        self.phases = PhaseStateMachine(scenario, height)
        self.scenario = scenario

    def set_scenario(self, scenario: ScenarioParameters) -> None:
        self.scenario = scenario
        self.forces.scenario = scenario
        self.thermal.scenario = scenario
        self.phases.scenario = scenario
        self.thermal.reset()

    def substep_count(self, particles: ParticleSet, dt: float, gravity_on: bool) -> int:
        """
        ceil(max_speed · dt / max(2, r/2)) clamped to [2, max_substeps] with
        gravity on; a single step without gravity.
        """
        if not gravity_on:
            return 1
        max_speed = float(np.sqrt(np.max(particles.speeds_sq()))) if len(particles) else 0.0
        radius = float(particles.radii[0]) if len(particles) else self.config.particle_radius
        safe_displacement = max(MIN_SAFE_DISPLACEMENT, 0.5 * radius)
        substeps = int(math.ceil(max_speed * dt / safe_displacement))
        return min(self.config.max_substeps, max(MIN_SUBSTEPS_WITH_GRAVITY, substeps))

    def substep(
        self,
        particles: ParticleSet,
        dt: float,
        now: float,
        gravity_on: bool,
        heating_on: bool,
        on_escape: Callable[[ParticleSet, np.ndarray], None]
    ) -> List[StateChange]:
        """
        Advance all particles by one sub-step of size dt.

        `on_escape(particles, mask)` sees escaping particles before they are
        removed.

        Returns:
            phase transitions of this sub-step
        """
        n = len(particles)
        if n == 0:
            return []

        # 1. Pair forces and thermostat
        self.index.build(particles.positions)
        self.forces.compute(particles, self.index)
        self.thermal.apply_thermostat(particles, now, self.rng.standard_normal((n, 2)))

        # 2. External accelerations
        if gravity_on:
            particles.accelerations[:, 1] += self.config.gravity
        if heating_on:
            self.thermal.apply_heating(particles, dt, self.rng.random((n, 2)), self.rng.random(n))
        else:
            self.thermal.dissipate(particles, dt)
        if gravity_on:
            self._apply_buoyancy(particles)

        # 3. Semi-implicit Euler
        particles.velocities += particles.accelerations / particles.masses[:, None] * dt
        particles.positions += particles.velocities * dt
        jitter = self.rng.random((n, 2))
        hot = particles.thermal_energy > JITTER_THRESHOLD
        particles.velocities += np.where(
            hot[:, None], (jitter - 0.5) * (particles.thermal_energy * JITTER_SCALE)[:, None], 0.0
        )

        # 4-5. Walls, collisions, walls again
        self._apply_walls(particles, on_escape)
        self.collisions.resolve(particles, self.index)
        self._apply_walls(particles, on_escape)

        # 6. Phase transitions
        return self.phases.update(particles, now)

    def _apply_buoyancy(self, particles: ParticleSet) -> None:
        """Gas rises; liquid near the floor is pulled down onto it."""
        gas = particles.gas_mask()
        particles.accelerations[gas, 1] -= GAS_BUOYANCY

        liquid = particles.states == LIQUID
        dist = self.height - (particles.positions[:, 1] + particles.radii)
        near = liquid & (dist > 0) & (dist < FLOOR_ATTRACTION_RANGE)
        pull = self.scenario.floor_attraction * (1.0 - dist / FLOOR_ATTRACTION_RANGE)
        particles.accelerations[near, 1] += pull[near]

    def _apply_walls(self, particles: ParticleSet, on_escape) -> None:
        escaped = self.walls.apply(particles)
        if np.any(escaped):
            on_escape(particles, escaped)
            particles.keep(~escaped)


class SimulationEngine:
    """
    Facade over the evaporation simulation.

    Owns the particle set, the scenario, the trial bookkeeping and the random
    source. Everything else reads snapshots or writes configuration through
    the methods below.
    """

    def __init__(
        self,
        scenario: Optional[ScenarioParameters] = None,
        config: Optional[SimulationConfig] = None
    ):
        self.config = (config or SimulationConfig()).validate()
        self.scenario = (scenario or scenario_preset("honey")).validate()
        self.width, self.height = self.config.box_size
        self.rng = np.random.default_rng(self.config.seed)

        self.particles = ParticleSet()
        self.integrator = Integrator(self.config, self.scenario, self.rng)
        self.trial = TrialTracker(self.config.trial_duration, self.config.history_limit)
        self.gravity_on = self.config.gravity_on
        self.heating_on = self.config.heating_on

        self.time = 0.0
        self.step_count = 0
        self.gas_count = 0
        self._observers: List[SimulationObserver] = []

        # Performance tracking
        self.steps_per_second = 0.0
        self._last_time = time.time()
        self._perf_count = 0

        self.spawn_particles()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def add_observer(self, observer: SimulationObserver) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: SimulationObserver) -> None:
        self._observers.remove(observer)

    def set_gravity(self, on: bool) -> None:
        self.gravity_on = bool(on)

    def set_heating(self, on: bool) -> None:
        """Turning the heat on starts a fresh trial."""
        on = bool(on)
        if on and not self.heating_on:
            self.trial.start()
            logger.info("Heating on: trial started for %s", self.scenario.name)
        self.heating_on = on

    def set_parameters(self, **changes) -> None:
        """
        Slider update of individual scenario fields.

        Plain fields are replaced without respawning. On a playground scenario
        the IMF sliders derive the cohesion coefficients again, which starts a
        new trial with freshly spawned particles.
        """
        n_particles = changes.pop("n_particles", None)
        sliders = {}
        if self.scenario.interpolated:
            sliders = {name: changes.pop(name) for name in PLAYGROUND_SLIDERS if name in changes}
        scenario = self.scenario.with_changes(**changes)
        if sliders:
            self.change_scenario(scenario.with_sliders(**sliders))
        else:
            self.scenario = scenario
            self.integrator.set_scenario(scenario)
        if n_particles is not None:
            self.adjust_particle_count(n_particles)

    def change_scenario(self, params: ScenarioParameters) -> None:
        """
        Replace the scenario wholesale, reset the trial and respawn.

        Raises:
            InvalidConfigurationError: if params are out of range
        """
        params.validate()
        previous = self.scenario.name
        self.scenario = params
        self.integrator.set_scenario(params)
        self.trial.start()
        self.spawn_particles()
        logger.info("Scenario changed: %s -> %s (%d particles)", previous, params.name, len(self.particles))

    def reset(self, clear_history: bool = False) -> None:
        """Respawn the particles and reset the trial counters."""
        self.trial.start()
        if clear_history:
            self.trial.clear_history()
        self.integrator.thermal.reset()
        self.spawn_particles()
        logger.info("Simulation reset (%s)", self.scenario.name)

    # ------------------------------------------------------------------
    # Particles
    # ------------------------------------------------------------------

    def _random_layout(self, n: int) -> Tuple[np.ndarray, np.ndarray]:
        """Uniform positions in the middle 90% of the box, speeds up to 20 px/s."""
        low = np.array([self.width * SPAWN_MARGIN, self.height * SPAWN_MARGIN])
        high = np.array([self.width * (1 - SPAWN_MARGIN), self.height * (1 - SPAWN_MARGIN)])
        positions = low + self.rng.random((n, 2)) * (high - low)
        velocities = self.rng.uniform(-SPAWN_SPEED, SPAWN_SPEED, (n, 2))
        return positions, velocities

    def spawn_particles(self) -> None:
        """Replace all particles with a fresh random layout."""
        self.particles.clear()
        positions, velocities = self._random_layout(self.scenario.n_particles)
        self.particles.add(positions, velocities, self.config.particle_radius)
        self.gas_count = 0

    def adjust_particle_count(self, n: int) -> int:
        """
        Grow or shrink the active set in place.

        n is clamped to [1, 500]. Extra particles are dropped from the end;
        new ones start at half the usual spawn speed.

        Returns:
            the clamped target count
        """
        n = int(max(MIN_PARTICLES, min(MAX_PARTICLES, math.floor(n))))
        self.scenario = replace(self.scenario, n_particles=n)
        self.integrator.set_scenario(self.scenario)

        current = len(self.particles)
        if current > n:
            self.particles.truncate(n)
        elif current < n:
            positions, velocities = self._random_layout(n - current)
            self.particles.add(positions, velocities * ADDED_SPEED_FACTOR, self.config.particle_radius)
        self.gas_count = count_gas(self.particles)
        logger.debug("Particle count adjusted %d -> %d", current, n)
        return n

    def find_particle(self, particle_id: int) -> Optional[int]:
        """Row of an active particle, None if it escaped or never existed."""
        return self.particles.index_of(particle_id)

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def _now(self) -> float:
        if self.config.use_wall_clock:
            return time.monotonic()
        return self.time

    def _record_escapes(self, particles: ParticleSet, mask: np.ndarray) -> None:
        count = self.trial.record_escapes(particles, mask, self.scenario.name, self.time)
        logger.debug("%d particle(s) escaped at t=%.3f", count, self.time)

    @property
    def trial_ended(self) -> bool:
        return self.trial.ended

    def step(self, dt: float) -> None:
        """
        Advance the simulation by dt seconds.

        The caller clamps dt (typically to 33 ms). Does nothing once the
        trial has ended.
        """
        if self.trial.ended or not dt > 0:
            return
        if self.heating_on and self.trial.expired:
            self._end_trial()
            return

        substeps = self.integrator.substep_count(self.particles, dt, self.gravity_on)
        dt_step = dt / substeps
        logger.debug("Step %d: %d sub-step(s) of %.4f s", self.step_count, substeps, dt_step)
        for _ in range(substeps):
            self.time += dt_step
            changes = self.integrator.substep(
                self.particles, dt_step, self._now(),
                self.gravity_on, self.heating_on, self._record_escapes
            )
            self.gas_count = count_gas(self.particles)
            for change in changes:
                for observer in self._observers:
                    observer.on_state_change(change)
        logger.debug(
            "Step %d: %d contact(s) over %d pass(es), thermostat scale %.3f",
            self.step_count, self.integrator.collisions.last_contacts,
            self.integrator.collisions.last_passes, self.integrator.thermal.last_rescale_factor
        )

        self.step_count += 1
        self.trial.elapsed += dt
        if self.heating_on:
            self.trial.sample(self.gas_count, self.scenario.name)

        # Track performance
        self._perf_count += 1
        if self._perf_count % 100 == 0:
            current_time = time.time()
            elapsed = current_time - self._last_time
            if elapsed > 0:
                self.steps_per_second = 100.0 / elapsed
            self._last_time = current_time

    def run(self, duration: float, dt: float = 1.0 / 60.0) -> None:
        """Step with a fixed dt until duration has passed or the trial ends."""
        n_steps = int(round(duration / dt))
        for _ in range(n_steps):
            if self.trial.ended:
                break
            self.step(dt)

    def _end_trial(self) -> None:
        result = self.trial.finish(self.scenario.name, len(self.particles))
        logger.info(
            "Trial ended for %s: %d/%d escaped (%d%%)",
            result.scenario, result.escaped_count, result.total_particles, result.escaped_percent
        )
        for observer in self._observers:
            observer.on_trial_end(result)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def escaped_count(self) -> int:
        return self.trial.escaped_count

    @property
    def escaped_particles(self) -> Tuple[EscapedParticle, ...]:
        return tuple(self.trial.escaped)

    @property
    def history(self) -> Tuple[HistorySample, ...]:
        return tuple(self.trial.history)

    @property
    def n_particles(self) -> int:
        return len(self.particles)

    def snapshot(self) -> SimulationState:
        p = self.particles
        return SimulationState(
            ids=p.ids.copy(),
            positions=p.positions.copy(),
            velocities=p.velocities.copy(),
            states=p.states.copy(),
            thermal_energy=p.thermal_energy.copy(),
            radii=p.radii.copy(),
            time=self.time,
            step=self.step_count,
            gas_count=self.gas_count,
            escaped_count=self.trial.escaped_count,
            scenario=self.scenario.name,
            contacts=self.integrator.collisions.last_contacts,
            thermostat_scale=self.integrator.thermal.last_rescale_factor,
        )

    def particle_debug_info(self, particle_id: int) -> ParticleDebugInfo:
        """
        Detailed readout for one active particle.

        Raises:
            ParticleNotFoundError: if the particle is not active
        """
        row = self.find_particle(particle_id)
        if row is None:
            raise ParticleNotFoundError(f"Particle {particle_id} is not active")

        p = self.particles
        index = SpatialIndex(self.width, self.height, self.config.cell_size)
        index.build(p.positions)
        forces = self.integrator.forces.breakdown(p, index, row)

        vx, vy = (float(v) for v in p.velocities[row])
        speed_sq = vx * vx + vy * vy
        bottom = float(p.positions[row, 1] + p.radii[row])
        now = self._now()
        gas_time_left = None
        if p.states[row] == GAS and p.gas_until[row] > 0:
            gas_time_left = max(0.0, float(p.gas_until[row] - now))
        nearest_phase = None
        if forces.nearest_row is not None:
            nearest_phase = Phase(int(p.states[forces.nearest_row]))

        return ParticleDebugInfo(
            particle_id=int(particle_id),
            position=(float(p.positions[row, 0]), float(p.positions[row, 1])),
            velocity=(vx, vy),
            speed=math.sqrt(speed_sq),
            kinetic_energy=0.5 * float(p.masses[row]) * speed_sq,
            thermal_energy=float(p.thermal_energy[row]),
            phase=Phase(int(p.states[row])),
            mass=float(p.masses[row]),
            radius=float(p.radii[row]),
            local_neighbors=int(p.local_neighbors[row]),
            dispersion_force=forces.dispersion,
            hydrogen_bond_force=forces.hydrogen_bond,
            dipole_force=forces.dipole,
            nearest_distance=forces.nearest_distance,
            nearest_phase=nearest_phase,
            in_heating_zone=bottom >= self.height * (1.0 - HEATING_ZONE_FRACTION),
            distance_from_floor=self.height - bottom,
            gas_time_left=gas_time_left,
            time_since_state_change=(
                float(now - p.last_state_change[row]) if np.isfinite(p.last_state_change[row]) else None
            ),
        )
