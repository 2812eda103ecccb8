#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Collision Module Tests
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
from imfsim.collisions import (
    CollisionResolver,
    WallHandler,
    RESTITUTION,
    FLOOR_FRICTION,
    MAX_RESOLUTION_PASSES,
    SEPARATION_TOLERANCE
)
from imfsim.particles import ParticleSet
from imfsim.spatial import SpatialIndex


WIDTH, HEIGHT = 225.0, 420.0
RADIUS = 4.5


def make_particles(positions, velocities=None):
    positions = np.asarray(positions, dtype=float)
    if velocities is None:
        velocities = np.zeros_like(positions)
    particles = ParticleSet()
    particles.add(positions, np.asarray(velocities, dtype=float), RADIUS)
    return particles


def min_contact_ratio(particles):
    diff = particles.positions[:, None, :] - particles.positions[None, :, :]
    dist = np.linalg.norm(diff, axis=-1)
    contact = particles.radii[:, None] + particles.radii[None, :]
    upper = np.triu_indices(len(particles), k=1)
    return float(np.min(dist[upper] / contact[upper]))


class TestWallHandler:
    """Tests for walls and the open top."""

    def test_left_wall_reflects(self):
        """Crossing the left wall clamps x and reverses vx with restitution."""
        particles = make_particles([[-1.0, 200.0]], [[-50.0, 0.0]])
        escaped = WallHandler(WIDTH, HEIGHT).apply(particles)
        assert not escaped[0]
        assert particles.positions[0, 0] == RADIUS
        assert np.isclose(particles.velocities[0, 0], 50.0 * RESTITUTION)

    def test_right_wall_reflects(self):
        """Crossing the right wall clamps x to width - r."""
        particles = make_particles([[WIDTH + 3.0, 200.0]], [[40.0, 0.0]])
        WallHandler(WIDTH, HEIGHT).apply(particles)
        assert particles.positions[0, 0] == WIDTH - RADIUS
        assert particles.velocities[0, 0] < 0

    def test_floor_reflects_with_friction(self):
        """The floor reflects vy and damps vx."""
        particles = make_particles([[100.0, HEIGHT + 2.0]], [[10.0, 30.0]])
        WallHandler(WIDTH, HEIGHT).apply(particles)
        assert particles.positions[0, 1] == HEIGHT - RADIUS
        assert np.isclose(particles.velocities[0, 1], -30.0 * RESTITUTION)
        assert np.isclose(particles.velocities[0, 0], 10.0 * FLOOR_FRICTION)

    def test_top_escape(self):
        """Reaching within one radius of the top is an escape."""
        particles = make_particles([[100.0, 2.0], [100.0, 200.0]], [[0.0, -80.0], [0.0, 0.0]])
        escaped = WallHandler(WIDTH, HEIGHT).apply(particles)
        assert list(escaped) == [True, False]
        assert particles.positions[0, 1] == 2.0


class TestCollisionResolver:
    """Tests for overlap resolution."""

    def _resolve(self, particles, **kwargs):
        index = SpatialIndex(WIDTH, HEIGHT, 12.0)
        resolver = CollisionResolver(HEIGHT, **kwargs)
        contacts = resolver.resolve(particles, index)
        return contacts, resolver

    def test_overlap_separated(self):
        """An overlapping pair ends at least 99% of contact distance apart."""
        particles = make_particles([[100.0, 200.0], [105.0, 200.0]])
        contacts, resolver = self._resolve(particles)
        dist = np.linalg.norm(particles.positions[1] - particles.positions[0])
        assert contacts == 1
        assert resolver.last_contacts == 1
        assert dist >= SEPARATION_TOLERANCE * 2 * RADIUS

    def test_approaching_pair_bounces(self):
        """A head-on collision leaves the pair separating."""
        particles = make_particles(
            [[100.0, 200.0], [108.0, 200.0]],
            [[20.0, 0.0], [-20.0, 0.0]]
        )
        self._resolve(particles)
        relative = particles.velocities[1, 0] - particles.velocities[0, 0]
        assert np.isclose(relative, 40.0 * RESTITUTION)

    def test_momentum_conserved(self):
        """Normal and friction impulses conserve total momentum."""
        particles = make_particles(
            [[100.0, 200.0], [106.0, 204.0]],
            [[20.0, 10.0], [-20.0, -10.0]]
        )
        self._resolve(particles)
        assert np.allclose(particles.velocities.sum(axis=0), 0.0)
        assert not np.allclose(particles.velocities, [[20.0, 10.0], [-20.0, -10.0]])

    def test_grounded_particle_not_pushed_into_floor(self):
        """A particle resting on the floor keeps its position."""
        floor_y = HEIGHT - RADIUS
        particles = make_particles([[100.0, floor_y - 6.0], [100.0, floor_y]])
        self._resolve(particles)
        assert particles.positions[1, 1] == floor_y
        assert particles.positions[1, 1] - particles.positions[0, 1] >= SEPARATION_TOLERANCE * 2 * RADIUS

    def test_separated_pair_untouched(self):
        """Particles farther apart than contact distance are not moved."""
        particles = make_particles([[100.0, 200.0], [120.0, 200.0]], [[5.0, 0.0], [-5.0, 0.0]])
        contacts, _ = self._resolve(particles)
        assert contacts == 0
        assert np.allclose(particles.positions, [[100.0, 200.0], [120.0, 200.0]])

    def test_coincident_pair_separated(self):
        """Two particles at the same point are pushed apart along a fixed axis."""
        particles = make_particles(
            [[100.0, 200.0], [100.0, 200.0]],
            [[10.0, 0.0], [-10.0, 0.0]]
        )
        contacts, _ = self._resolve(particles)
        assert contacts == 1
        assert min_contact_ratio(particles) >= SEPARATION_TOLERANCE
        assert np.all(np.isfinite(particles.velocities))

    def test_coincident_pair_deterministic(self):
        """The separation axis for coincident centers does not depend on chance."""
        results = []
        for _ in range(2):
            particles = make_particles([[100.0, 200.0], [100.0, 200.0]])
            self._resolve(particles)
            results.append(particles.positions.copy())
        assert np.array_equal(results[0], results[1])

    def test_crowded_cluster_separated(self):
        """A packed cluster with a coincident pair relaxes past the tolerance."""
        grid = [[112.0 + 6.0 * gx, 200.0 + 6.0 * gy] for gy in (-1, 0, 1) for gx in (-1, 0, 1)]
        particles = make_particles(grid + [[112.0, 200.0]])
        assert min_contact_ratio(particles) == 0.0

        contacts, resolver = self._resolve(particles, max_passes=100)
        assert contacts > 0
        assert 1 < resolver.last_passes < 100
        assert min_contact_ratio(particles) >= SEPARATION_TOLERANCE

    def test_pass_cap(self):
        """The resolver never runs more passes than its cap."""
        grid = [[112.0 + 3.0 * gx, 200.0 + 3.0 * gy] for gy in (-2, -1, 0, 1, 2) for gx in (-2, -1, 0, 1, 2)]
        particles = make_particles(grid)
        _, resolver = self._resolve(particles, max_passes=2)
        assert resolver.last_passes <= 2
        assert CollisionResolver(HEIGHT).max_passes == MAX_RESOLUTION_PASSES

    def test_separated_pair_single_pass(self):
        """Without overlaps no extra passes run."""
        particles = make_particles([[100.0, 200.0], [120.0, 200.0]])
        _, resolver = self._resolve(particles)
        assert resolver.last_passes == 1

    def test_empty(self):
        """No particles, no contacts."""
        contacts, _ = self._resolve(ParticleSet())
        assert contacts == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
