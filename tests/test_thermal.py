#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Thermal Module Tests
================================================================================

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 22, 2026
License:        MIT License
================================================================================
"""

import numpy as np
import pytest
from imfsim.particles import ParticleSet
from imfsim.scenarios import scenario_preset
from imfsim.thermal import ThermalModel, heating_intensity, DRAG_GAMMA


WIDTH, HEIGHT = 225.0, 420.0


def make_particles(positions, velocities=None):
    positions = np.asarray(positions, dtype=float)
    if velocities is None:
        velocities = np.zeros_like(positions)
    particles = ParticleSet()
    particles.add(positions, velocities, 4.5)
    return particles


class TestHeatingIntensity:
    """Tests for the stovetop intensity profile."""

    def test_zero_above_strip(self):
        """Particles above the bottom 5% get no heat."""
        intensity = heating_intensity(np.array([112.5]), np.array([300.0]), WIDTH, HEIGHT)
        assert intensity[0] == 0.0

    def test_center_hotspot_at_floor(self):
        """Middle hotspot at the floor: 1.0 * (0.3 + 0.7 * 0.85)."""
        intensity = heating_intensity(np.array([WIDTH / 2]), np.array([HEIGHT]), WIDTH, HEIGHT)
        assert np.isclose(intensity[0], 0.3 + 0.7 * 0.85)

    def test_left_hotspot_strongest(self):
        """The left hotspot has the highest relative strength."""
        x = np.array([WIDTH / 4, WIDTH / 2, 3 * WIDTH / 4])
        intensity = heating_intensity(x, np.full(3, HEIGHT), WIDTH, HEIGHT)
        assert intensity[0] > intensity[1] > intensity[2]

    def test_fades_toward_top_of_strip(self):
        """Intensity falls off with height inside the strip."""
        bottoms = np.array([HEIGHT, HEIGHT - 10.0, HEIGHT - 20.0])
        intensity = heating_intensity(np.full(3, WIDTH / 2), bottoms, WIDTH, HEIGHT)
        assert intensity[0] > intensity[1] > intensity[2] > 0


class TestThermostat:
    """Tests for the Langevin thermostat."""

    def test_drag_without_noise(self):
        """With kT = 0 the thermostat is pure drag."""
        scenario = scenario_preset("honey", kt=0.0)
        particles = make_particles([[100.0, 100.0]], [[10.0, -20.0]])
        particles.accelerations[:] = 0.0
        ThermalModel(scenario, WIDTH, HEIGHT).apply_thermostat(particles, 0.0, np.ones((1, 2)))
        assert np.allclose(particles.accelerations, -DRAG_GAMMA * np.array([[10.0, -20.0]]))

    def test_rescale_is_bounded(self):
        """The periodic rescale never changes speeds by more than 10%."""
        scenario = scenario_preset("honey")
        particles = make_particles([[50.0, 50.0], [150.0, 50.0]], [[100.0, 0.0], [0.0, 100.0]])
        model = ThermalModel(scenario, WIDTH, HEIGHT)
        kicks = np.zeros((2, 2))

        model.apply_thermostat(particles, 0.0, kicks)
        assert np.allclose(particles.velocities, [[100.0, 0.0], [0.0, 100.0]])

        model.apply_thermostat(particles, 0.6, kicks)
        assert model.last_rescale_factor == 0.9
        assert np.allclose(particles.velocities, [[90.0, 0.0], [0.0, 90.0]])

    def test_dense_liquid_not_rescaled(self):
        """Particles with 3+ neighbors keep their velocity."""
        particles = make_particles([[50.0, 50.0]], [[100.0, 0.0]])
        particles.local_neighbors[:] = 5
        model = ThermalModel(scenario_preset("honey"), WIDTH, HEIGHT)
        model.apply_thermostat(particles, 0.0, np.zeros((1, 2)))
        model.apply_thermostat(particles, 1.0, np.zeros((1, 2)))
        assert np.allclose(particles.velocities, [[100.0, 0.0]])


class TestHeating:
    """Tests for stovetop heating and dissipation."""

    def test_floor_particle_gains_heat(self):
        """Only the particle in the strip heats up."""
        particles = make_particles([[WIDTH / 2, HEIGHT - 4.5], [WIDTH / 2, 100.0]])
        model = ThermalModel(scenario_preset("honey"), WIDTH, HEIGHT)
        model.apply_heating(particles, 0.1, np.full((2, 2), 0.5), np.zeros(2))

        expected = 0.03 * 5.0 * (0.3 + 0.7 * 0.85) * 0.1
        assert np.isclose(particles.thermal_energy[0], expected)
        assert particles.thermal_energy[1] == 0.0

    def test_thermal_energy_capped(self):
        """Thermal energy never exceeds 1."""
        particles = make_particles([[WIDTH / 2, HEIGHT - 4.5]])
        particles.thermal_energy[:] = 0.999
        model = ThermalModel(scenario_preset("hexane"), WIDTH, HEIGHT)
        model.apply_heating(particles, 1.0, np.full((1, 2), 0.5), np.zeros(1))
        assert particles.thermal_energy[0] == 1.0

    def test_heated_particle_pushed_up(self):
        """Heat in the strip produces upward (negative y) acceleration."""
        particles = make_particles([[WIDTH / 2, HEIGHT - 4.5]])
        particles.thermal_energy[:] = 0.8
        particles.accelerations[:] = 0.0
        model = ThermalModel(scenario_preset("hexane"), WIDTH, HEIGHT)
        model.apply_heating(particles, 0.01, np.full((1, 2), 0.5), np.full(1, 0.75))
        assert particles.accelerations[0, 1] < 0

    def test_dissipation(self):
        """With heating off thermal energy decays at 0.02/s and stops at 0."""
        particles = make_particles([[50.0, 50.0], [80.0, 50.0]])
        particles.thermal_energy[:] = [0.5, 0.01]
        ThermalModel(scenario_preset("honey"), WIDTH, HEIGHT).dissipate(particles, 1.0)
        assert np.allclose(particles.thermal_energy, [0.48, 0.0])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
