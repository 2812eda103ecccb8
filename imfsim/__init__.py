#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
IMF Evaporation Simulator
================================================================================

Project:        IMF Evaporation Simulator
Description:    2D particle simulation of evaporation from an open container,
                driven by intermolecular forces and a stovetop heat source

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 22, 2026
Last Updated:   February 9, 2026

License:        MIT License
================================================================================

This package implements an educational evaporation simulation featuring:
- London dispersion, hydrogen-bond and dipole-dipole pair forces
- Numba-compiled cell lists for the neighbor and collision passes
- A Langevin thermostat and a heated strip along the container floor
- Liquid/gas transitions with hysteresis, and escape through the open top

Modules:
    - spatial: Uniform-grid spatial index
    - physics: Intermolecular force laws and the neighbor pass
    - scenarios: Material presets and playground scenarios
    - particles: Struct-of-arrays particle storage
    - thermal: Thermostat and stovetop heating
    - collisions: Walls and overlap resolution
    - thermodynamics: Liquid/gas phase state machine
    - trial: Escape records, history and trial results
    - simulation: Integrator and engine facade
"""

from .exceptions import InvalidConfigurationError, ParticleNotFoundError, PhysicsError
from .scenarios import (
    ScenarioParameters, scenario_preset, playground_scenario, scenario_from_imf_strength
)
from .simulation import SimulationConfig, SimulationEngine, SimulationObserver, SimulationState
from .thermodynamics import Phase, StateChange
from .trial import TrialResult

__version__ = "1.0.0"
__author__ = "Ryan Kamp"
