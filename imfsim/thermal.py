#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Thermostat and Stovetop Heating
================================================================================

Project:        IMF Evaporation Simulator
Module:         thermal.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 22, 2026
Last Updated:   February 9, 2026

License:        MIT License
================================================================================

Two heat paths act on the particles:

1. A Langevin thermostat couples every particle to a bath at kT:

       a += -γ v + sqrt(2γ kT) ξ,    ξ ~ N(0, 1) per axis

   with a gentle velocity rescale toward 40 (kT + 0.05) every ~0.5 s that
   skips dense liquid, so blobs keep their own dynamics.

2. A stovetop strip along the floor (bottom 5% of the container) feeds a
   per-particle thermal energy in [0, 1]. Heated particles get buoyancy,
   jitter and a push along their direction of motion, which is what lets
   them break free of the liquid and boil.

Coordinates are screen-like: y grows downward, the floor is at y = height.
"""

import logging
import numpy as np
from typing import Optional

from .particles import ParticleSet
from .scenarios import ScenarioParameters


logger = logging.getLogger(__name__)


# Thermostat
DRAG_GAMMA = 0.3
RESCALE_INTERVAL = 0.5          # seconds between velocity rescales
RESCALE_DENSITY_THRESHOLD = 3   # particles with fewer neighbors count as non-dense
RESCALE_KE_SCALE = 40.0
RESCALE_KT_OFFSET = 0.05
RESCALE_MIN, RESCALE_MAX = 0.9, 1.1
RESCALE_TOLERANCE = 0.02

# Heating strip geometry
HEATING_ZONE_FRACTION = 0.05
MIN_VERTICAL_INTENSITY = 0.2
HOTSPOT_STRENGTHS = (1.0, 0.85, 0.7)
HOTSPOT_RADIUS_FRACTION = 0.15
BASE_HORIZONTAL_INTENSITY = 0.3
DEFAULT_HOTSPOT_STRENGTH = 0.7

# Thermal energy rates (per second)
BASE_THERMAL_GAIN = 0.03
ZONE_DISSIPATION = 0.015
IDLE_DISSIPATION = 0.02

# Heated particle response (in the strip / carrying heat out of it)
ZONE_BUOYANCY = -2000.0
CARRIED_BUOYANCY = -1800.0
ZONE_VELOCITY_BOOST = -40.0
CARRIED_VELOCITY_BOOST = -35.0
ZONE_VIBRATION = 120.0
CARRIED_VIBRATION = 80.0
BOOST_THRESHOLD = 0.2
CARRIED_HEAT_THRESHOLD = 0.1
STATIONARY_SPEED = 1e-3


def heating_intensity(
    x: np.ndarray,
    particle_bottom: np.ndarray,
    width: float,
    height: float
) -> np.ndarray:
    """
    Local stovetop intensity for particles whose bottom edge is in the strip.

    Vertical: 100% at the floor, falling linearly to 20% at the top of the
    strip. Horizontal: three hotspots at width/4, width/2 and 3·width/4 with
    relative strengths 1.0/0.85/0.7 and a squared falloff; overlapping
    hotspots are blended by their strength-weighted average.

    Returns:
        intensity per particle (0 outside the strip)
    """
    zone_height = height * HEATING_ZONE_FRACTION
    zone_top = height - zone_height
    in_zone = particle_bottom >= zone_top

    normalized = np.clip((height - particle_bottom) / zone_height, 0.0, 1.0)
    vertical = 1.0 - normalized * (1.0 - MIN_VERTICAL_INTENSITY)

    spacing = width / (len(HOTSPOT_STRENGTHS) + 1)
    hotspot_radius = width * HOTSPOT_RADIUS_FRACTION
    total = np.zeros_like(x, dtype=np.float64)
    weighted = np.zeros_like(x, dtype=np.float64)
    for h, strength in enumerate(HOTSPOT_STRENGTHS):
        dist = np.abs(x - spacing * (h + 1)) / hotspot_radius
        contribution = (1.0 - np.minimum(1.0, dist)) ** 2
        total += contribution
        weighted += contribution * strength

    average = np.where(total > 0, weighted / np.where(total > 0, total, 1.0), DEFAULT_HOTSPOT_STRENGTH)
    horizontal = BASE_HORIZONTAL_INTENSITY + total * (1.0 - BASE_HORIZONTAL_INTENSITY) * average

    return np.where(in_zone, vertical * horizontal, 0.0)


class ThermalModel:
    """
    Thermostat and heating for one scenario inside a fixed container.

    The periodic rescale is driven by the caller's clock (`now`, seconds).
    """

    def __init__(self, scenario: ScenarioParameters, width: float, height: float):
        self.scenario = scenario
        self.width = width
        self.height = height
        self.last_rescale: Optional[float] = None
        self.last_rescale_factor = 1.0

    def reset(self) -> None:
        self.last_rescale = None
        self.last_rescale_factor = 1.0

    def apply_thermostat(self, particles: ParticleSet, now: float, kicks: np.ndarray) -> None:
        """
        Add drag and Gaussian kicks to the accumulators; rescale if due.

        Args:
            particles: Active particles (accelerations already hold pair forces)
            now: Current clock value in seconds
            kicks: Nx2 standard normal samples
        """
        kt = max(0.0, self.scenario.kt)
        kick_sigma = np.sqrt(2.0 * DRAG_GAMMA * kt)
        particles.accelerations += -DRAG_GAMMA * particles.velocities + kicks * kick_sigma

        if self.last_rescale is None:
            self.last_rescale = now
        if now - self.last_rescale > RESCALE_INTERVAL:
            self._rescale(particles, kt)
            self.last_rescale = now

    def _rescale(self, particles: ParticleSet, kt: float) -> None:
        """Berendsen-like nudge of the non-dense particles toward the target KE."""
        loose = (particles.local_neighbors < RESCALE_DENSITY_THRESHOLD) | particles.gas_mask()
        if not np.any(loose):
            return

        ke = 0.5 * particles.masses[loose] * particles.speeds_sq()[loose]
        ke_avg = float(np.mean(ke))
        ke_target = RESCALE_KE_SCALE * (kt + RESCALE_KT_OFFSET)
        scale = np.sqrt(max(1e-6, ke_target / max(1e-6, ke_avg)))
        scale = float(np.clip(scale, RESCALE_MIN, RESCALE_MAX))

        self.last_rescale_factor = scale
        if abs(scale - 1.0) > RESCALE_TOLERANCE:
            particles.velocities[loose] *= scale
            logger.debug("Thermostat rescaled %d particles by %.3f", int(np.sum(loose)), scale)

    def apply_heating(
        self,
        particles: ParticleSet,
        dt: float,
        vibration: np.ndarray,
        angles: np.ndarray
    ) -> None:
        """
        Stovetop strip: heat, buoyancy, vibration and drive for one sub-step.

        Args:
            particles: Active particles
            dt: Sub-step size in seconds
            vibration: Nx2 uniform samples in [0, 1)
            angles: N uniform samples in [0, 1) (random push direction)
        """
        s = self.scenario
        thresholds = s.evaporation_thresholds()
        gain_rate = BASE_THERMAL_GAIN * thresholds.thermal_gain_multiplier * s.heat_intensity
        up_mult = s.upward_multiplier

        pos = particles.positions
        vel = particles.velocities
        acc = particles.accelerations
        intensity = heating_intensity(pos[:, 0], pos[:, 1] + particles.radii, self.width, self.height)
        in_zone = (pos[:, 1] + particles.radii) >= self.height * (1.0 - HEATING_ZONE_FRACTION)

        te = particles.thermal_energy
        te = np.where(
            in_zone,
            np.minimum(1.0, te + gain_rate * intensity * dt),
            np.maximum(0.0, te - ZONE_DISSIPATION * dt),
        )
        particles.thermal_energy = te

        carrying = ~in_zone & (te > CARRIED_HEAT_THRESHOLD)
        active = in_zone | carrying
        buoyancy = np.where(in_zone, ZONE_BUOYANCY, CARRIED_BUOYANCY)
        boost = np.where(in_zone, ZONE_VELOCITY_BOOST, CARRIED_VELOCITY_BOOST)
        vib_strength = np.where(in_zone, ZONE_VIBRATION, CARRIED_VIBRATION) * te

        acc[:, 1] += np.where(active, te * buoyancy * up_mult, 0.0)
        boosted = active & (te > BOOST_THRESHOLD)
        vel[:, 1] += np.where(boosted, te * boost * up_mult * dt, 0.0)
        acc += np.where(active[:, None], (vibration - 0.5) * vib_strength[:, None], 0.0)

        # Push along the direction of motion, scaled by local heat
        drive = s.heat_accel * intensity
        speed = np.hypot(vel[:, 0], vel[:, 1])
        moving = speed > STATIONARY_SPEED
        safe_speed = np.where(moving, speed, 1.0)
        theta = angles * 2.0 * np.pi
        dir_x = np.where(moving, vel[:, 0] / safe_speed, np.cos(theta))
        dir_y = np.where(moving, vel[:, 1] / safe_speed, np.sin(theta))
        acc[:, 0] += np.where(in_zone, dir_x * drive, 0.0)
        acc[:, 1] += np.where(in_zone, dir_y * drive, 0.0)

    def dissipate(self, particles: ParticleSet, dt: float) -> None:
        """Heating off: thermal energy decays everywhere."""
        particles.thermal_energy = np.maximum(0.0, particles.thermal_energy - IDLE_DISSIPATION * dt)
