#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Simulation Exceptions
================================================================================

Project:        IMF Evaporation Simulator
Module:         exceptions.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 22, 2026
Last Updated:   February 9, 2026

License:        MIT License
================================================================================
"""


class PhysicsError(Exception):
    """Base class for errors raised by the simulation core."""
    def __init__(self, message="Simulation error."):
        super().__init__(message)


class InvalidConfigurationError(PhysicsError):
    """Scenario or container parameters are out of range."""
    def __init__(self, message="Invalid simulation configuration."):
        super().__init__(message)


class ParticleNotFoundError(PhysicsError):
    """Particle id is not in the active set (never existed or escaped)."""
    def __init__(self, message="Particle not found in the active set."):
        super().__init__(message)
