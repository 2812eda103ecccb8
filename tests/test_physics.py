#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Physics Module Tests
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
from imfsim.particles import ParticleSet, LIQUID, GAS
from imfsim.physics import (
    FORCE_CLAMP,
    ForceModel,
    dispersion_force,
    dispersion_cutoff,
    hydrogen_bond_force,
    dipole_force,
    pair_force,
    interaction_range,
    calculate_kinetic_energy,
    calculate_temperature
)
from imfsim.scenarios import scenario_preset
from imfsim.spatial import SpatialIndex


class TestDispersionForce:
    """Tests for the Lennard-Jones force law."""

    def test_zero_at_potential_minimum(self):
        """Force vanishes at r = 2^(1/6) sigma."""
        r_min = 2**(1/6) * 10.0
        assert abs(dispersion_force(r_min, 0.7, 10.0)) < 1e-10

    def test_repulsive_at_sigma(self):
        """F(sigma) = 24 epsilon / sigma, repulsive."""
        f = dispersion_force(10.0, 0.7, 10.0)
        assert np.isclose(f, 24.0 * 0.7 / 10.0)

    def test_attractive_beyond_minimum(self):
        """Force is attractive between the minimum and the cutoff."""
        assert dispersion_force(15.0, 0.7, 10.0) < 0

    def test_zero_beyond_cutoff(self):
        """Force is exactly zero past 2.5 sigma."""
        assert dispersion_force(25.1, 0.7, 10.0) == 0.0

    def test_weak_well_uses_shorter_cutoff(self):
        """Epsilon below 0.1 cuts off at 2.0 sigma instead of 2.5 sigma."""
        assert dispersion_cutoff(0.05, 10.0) == 20.0
        assert dispersion_cutoff(0.2, 10.0) == 25.0
        assert dispersion_force(22.0, 0.05, 10.0) == 0.0
        assert dispersion_force(22.0, 0.2, 10.0) != 0.0

    def test_clamped_at_short_range(self):
        """Huge short-range repulsion is clipped to the force clamp."""
        assert dispersion_force(2.0, 0.7, 10.0) == FORCE_CLAMP


class TestDirectionalForces:
    """Tests for the hydrogen-bond and dipole proxies."""

    def test_hydrogen_bond_at_contact(self):
        """H-bond proxy equals its strength at zero distance."""
        assert np.isclose(hydrogen_bond_force(0.0, 5.0, 10.0), 5.0)

    def test_hydrogen_bond_vanishes_at_cutoff(self):
        """H-bond proxy is zero at and beyond 2.8 sigma."""
        assert hydrogen_bond_force(28.0, 5.0, 10.0) == 0.0
        assert hydrogen_bond_force(30.0, 5.0, 10.0) == 0.0

    def test_hydrogen_bond_clamped(self):
        """Strong H-bonds are clipped to the force clamp."""
        assert hydrogen_bond_force(1.0, 500.0, 10.0) == FORCE_CLAMP

    def test_disabled_forces_are_zero(self):
        """Zero strength switches the proxies off."""
        assert hydrogen_bond_force(5.0, 0.0, 10.0) == 0.0
        assert dipole_force(5.0, 0.0, 10.0) == 0.0

    def test_dipole_value(self):
        """Dipole proxy follows D / r^2 * (1 - r / 2.2 sigma)."""
        expected = 5.0 / 100.0 * (1.0 - 10.0 / 22.0)
        assert np.isclose(dipole_force(10.0, 5.0, 10.0), expected)

    def test_dipole_floor_factor(self):
        """Near the cutoff the falloff factor never drops below 0.1."""
        expected = 5.0 / 21.5**2 * 0.1
        assert np.isclose(dipole_force(21.5, 5.0, 10.0), expected)


class TestForceBounds:
    """Tests for the force clamp across all materials."""

    @pytest.mark.parametrize("name", ["honey", "dmso", "hexane"])
    def test_laws_finite_and_clamped(self, name):
        """Every law stays finite and within [-60, 60] at any distance."""
        s = scenario_preset(name)
        for r in np.linspace(1e-9, 3.0 * s.sigma, 200):
            for f in (
                dispersion_force(r, s.epsilon, s.sigma),
                hydrogen_bond_force(r, s.hb_strength, s.sigma),
                dipole_force(r, s.dipole_strength, s.sigma),
            ):
                assert np.isfinite(f)
                assert -FORCE_CLAMP <= f <= FORCE_CLAMP


class TestPairForce:
    """Tests for phase-dependent pair scaling."""

    ARGS = (0.7, 10.0, 30.0, 0.0, 9.5, 18.0, 1.0)

    def test_gas_pairs_scaled_down(self):
        """Any pair involving gas uses 20% of the unboosted force."""
        mixed = pair_force(12.0, LIQUID, GAS, *self.ARGS)
        gas = pair_force(12.0, GAS, GAS, *self.ARGS)
        assert np.isclose(mixed, gas)

    def test_liquid_boost_only_on_dispersion_and_hbond(self):
        """Dipole-only pairs are not boosted between liquid particles."""
        args = (0.7, 10.0, 0.0, 5.0, 0.0, 0.0, 1.0)
        liquid = pair_force(12.0, LIQUID, LIQUID, *args)
        gas = pair_force(12.0, GAS, GAS, *args)
        assert np.isclose(liquid * 0.2, gas)

    def test_liquid_pair_attracts_at_mid_range(self):
        """Honey-like liquid pair pulls together at 1.5 sigma."""
        assert pair_force(15.0, LIQUID, LIQUID, *self.ARGS) > 0


class TestForceModel:
    """Tests for the neighbor pass."""

    def _pair(self, distance):
        particles = ParticleSet()
        particles.add(
            np.array([[100.0, 200.0], [100.0 + distance, 200.0]]),
            np.zeros((2, 2)), 4.5
        )
        index = SpatialIndex(225.0, 420.0, 12.0)
        index.build(particles.positions)
        return particles, index

    def test_newton_third_law(self):
        """Pair forces are equal and opposite."""
        particles, index = self._pair(12.0)
        ForceModel(scenario_preset("honey")).compute(particles, index)
        assert np.allclose(particles.accelerations[0], -particles.accelerations[1])
        assert particles.accelerations[0, 0] > 0

    def test_local_density(self):
        """Neighbors within 2.4 sigma count toward local density."""
        particles, index = self._pair(20.0)
        ForceModel(scenario_preset("honey")).compute(particles, index)
        assert np.all(particles.local_neighbors == 1)

        particles, index = self._pair(30.0)
        ForceModel(scenario_preset("honey")).compute(particles, index)
        assert np.all(particles.local_neighbors == 0)

    def test_query_radius_covers_all_cutoffs(self):
        """Query radius is the largest cutoff in use."""
        model = ForceModel(scenario_preset("honey"))
        assert model.query_radius == interaction_range(10.0)
        assert np.isclose(model.query_radius, 28.0)

    def test_breakdown(self):
        """Per-law breakdown finds the nearest neighbor."""
        particles, index = self._pair(12.0)
        breakdown = ForceModel(scenario_preset("honey")).breakdown(particles, index, 0)
        assert breakdown.nearest_row == 1
        assert np.isclose(breakdown.nearest_distance, 12.0)
        assert breakdown.hydrogen_bond > 0
        assert breakdown.dipole == 0.0


class TestSpatialIndex:
    """Tests for the uniform-grid index."""

    def test_minimum_cell_size(self):
        """Cells are never smaller than 8 px."""
        assert SpatialIndex(225.0, 420.0, 4.0).cell_size == 8.0

    def test_out_of_bounds_clamped(self):
        """Points outside the box land in edge cells."""
        index = SpatialIndex(225.0, 420.0, 12.0)
        assert index.cell_of(-5.0, -5.0) == 0
        assert index.cell_of(1000.0, 1000.0) == index.n_cells - 1

    def test_neighbor_superset(self):
        """Every particle within the radius is reported."""
        np.random.seed(42)
        positions = np.random.rand(300, 2) * np.array([225.0, 420.0])
        index = SpatialIndex(225.0, 420.0, 12.0)
        index.build(positions)

        for q in range(20):
            x, y = positions[q]
            found = set(index.neighbors(x, y, 28.0))
            dist = np.hypot(positions[:, 0] - x, positions[:, 1] - y)
            assert set(np.flatnonzero(dist <= 28.0)) <= found

    def test_insert_and_clear(self):
        """Inserted items are found until the index is cleared."""
        index = SpatialIndex(225.0, 420.0, 12.0)
        index.insert(7, 50.0, 50.0)
        index.insert(9, 200.0, 400.0)
        assert len(index) == 2
        assert index.neighbors(52.0, 52.0, 5.0) == [7]

        index.clear()
        assert len(index) == 0
        assert index.neighbors(52.0, 52.0, 5.0) == []


class TestEnergyCalculations:
    """Tests for kinetic energy and temperature."""

    def test_kinetic_energy(self):
        """KE = 1/2 sum m v^2."""
        velocities = np.array([[3.0, 4.0], [0.0, 0.0]])
        assert np.isclose(calculate_kinetic_energy(velocities), 12.5)

    def test_temperature_empty(self):
        """Temperature of no particles is zero."""
        assert calculate_temperature(np.zeros((0, 2))) == 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
