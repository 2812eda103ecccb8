#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Material Scenarios and IMF Tuning
================================================================================

Project:        IMF Evaporation Simulator
Module:         scenarios.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 22, 2026
Last Updated:   February 9, 2026

License:        MIT License
================================================================================

Material-dependent constants for the evaporation simulation.

Three discrete materials are provided, one per dominant intermolecular force:

    - honey:  hydrogen bonding (strongest IMF, hardest to evaporate)
    - dmso:   dipole-dipole
    - hexane: London dispersion only (weakest IMF, evaporates readily)

The "playground" scenario replaces the discrete choice with slider values
that are mapped onto a single IMF strength t in [0, 1]. Every behavior that
differs between materials is then interpolated between the hexane-like
(t = 0) and honey-like (t = 1) endpoints.

The thresholds below are pedagogical tuning, not physical constants. They
are kept as tables/formulas so the behavior of each material stays exactly
reproducible.
"""

import math
from dataclasses import dataclass, replace, fields
from typing import Dict, Optional

from .exceptions import InvalidConfigurationError


# Particle count bounds
MIN_PARTICLES = 1
MAX_PARTICLES = 500

# Heat intensity slider range
MIN_HEAT_INTENSITY = 0.0
MAX_HEAT_INTENSITY = 5.0

# IMF strength normalization ranges (hexane ... honey)
VISCOSITY_RANGE = (0.05, 10.0)
EPSILON_RANGE = (0.05, 0.7)
HB_STRENGTH_SCALE = 3.0
DIPOLE_SCALE = 2.0

# Weights of each normalized component in the IMF strength
IMF_WEIGHTS = {
    "viscosity": 0.45,
    "hb_strength": 0.35,
    "dipole": 0.12,
    "epsilon": 0.08,
}

# Playground cohesion endpoints
HEXANE_COH_LJ = 0.011
HONEY_COH_LJ = 9.5
HONEY_COH_HB = 18.0
DMSO_COH_DP = 1.8

# Raw slider values a playground scenario is rebuilt from
PLAYGROUND_SLIDERS = ("viscosity", "epsilon", "sigma", "hb_strength", "dipole_strength")


@dataclass
class ScenarioParameters:
    """
    Material-dependent simulation constants.

    Replaced wholesale on a scenario change. Distances are in pixels, times
    in seconds.
    """
    name: str = "honey"
    label: str = "Honey (H-bond)"
    epsilon: float = 0.7          # Dispersion well depth
    sigma: float = 10.0           # Length scale
    viscosity: float = 10.0       # IMF-strength proxy
    hb_strength: float = 30.0     # Hydrogen-bond proxy strength
    dipole_strength: float = 0.0  # Dipole proxy strength
    coh_lj: float = 9.5           # Cohesion multipliers per force law
    coh_hb: float = 18.0
    coh_dp: float = 1.0
    n_particles: int = 200
    kt: float = 1.0               # Thermal bath temperature
    heat_intensity: float = 5.0   # User heat multiplier
    heat_accel: float = 80.0      # px/s^2 along velocity inside the heating strip
    interpolated: bool = False    # True for playground (IMF-strength) scenarios
    sliders: Optional[Dict[str, float]] = None  # Raw playground slider values

    def validate(self) -> "ScenarioParameters":
        """
        Reject parameters the engine cannot run with.

        Raises:
            InvalidConfigurationError: on any out-of-range value
        """
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, float) and not math.isfinite(value):
                raise InvalidConfigurationError(f"{f.name} must be finite, got {value!r}")

        if self.sigma <= 0:
            raise InvalidConfigurationError(f"sigma must be positive, got {self.sigma}")
        if self.epsilon <= 0:
            raise InvalidConfigurationError(f"epsilon must be positive, got {self.epsilon}")
        for name in ("viscosity", "hb_strength", "dipole_strength",
                     "coh_lj", "coh_hb", "coh_dp", "kt", "heat_accel"):
            if getattr(self, name) < 0:
                raise InvalidConfigurationError(f"{name} must be non-negative, got {getattr(self, name)}")
        if not MIN_HEAT_INTENSITY <= self.heat_intensity <= MAX_HEAT_INTENSITY:
            raise InvalidConfigurationError(
                f"heat_intensity must be in [{MIN_HEAT_INTENSITY}, {MAX_HEAT_INTENSITY}], "
                f"got {self.heat_intensity}"
            )
        if int(self.n_particles) != self.n_particles or not MIN_PARTICLES <= self.n_particles <= MAX_PARTICLES:
            raise InvalidConfigurationError(
                f"n_particles must be an integer in [{MIN_PARTICLES}, {MAX_PARTICLES}], "
                f"got {self.n_particles}"
            )
        return self

    @property
    def imf_strength(self) -> float:
        """Overall IMF strength: 0 = hexane-like, 1 = honey-like."""
        return imf_strength(self.viscosity, self.epsilon, self.hb_strength, self.dipole_strength)

    @property
    def upward_multiplier(self) -> float:
        """Damping of buoyant pushes: 1.0 for weak IMFs down to 0.3 for strong."""
        return 0.3 + (1.0 - self.imf_strength) * 0.7

    @property
    def gas_speed_sq(self) -> float:
        """Reference squared speed vGas^2 for the phase thresholds."""
        eps_base = 0.15 + 0.25 * self.viscosity
        return 120.0 * self.kt + 10.0 * eps_base

    @property
    def floor_attraction(self) -> float:
        """Downward pull (px/s^2) on liquid particles close to the floor."""
        return floor_attraction_for_viscosity(self.viscosity)

    def evaporation_thresholds(self) -> "EvaporationThresholds":
        if self.interpolated:
            return thresholds_for_imf_strength(self.imf_strength)
        return thresholds_for_viscosity(self.viscosity)

    def with_changes(self, **changes) -> "ScenarioParameters":
        """Validated copy with some fields replaced (slider updates)."""
        return replace(self, **changes).validate()

    def with_sliders(self, **changes) -> "ScenarioParameters":
        """
        Playground scenario rebuilt from updated raw slider values.

        Cohesion and directional strengths depend on all sliders at once, so
        they are derived again instead of being replaced field by field.

        Raises:
            InvalidConfigurationError: if this is not a playground scenario or
                a change names something other than a slider
        """
        if not self.interpolated or self.sliders is None:
            raise InvalidConfigurationError(f"{self.name} has no playground sliders")
        unknown = sorted(set(changes) - set(PLAYGROUND_SLIDERS))
        if unknown:
            raise InvalidConfigurationError(f"Unknown playground sliders: {unknown}")
        return playground_scenario(
            n_particles=self.n_particles,
            heat_intensity=self.heat_intensity,
            kt=self.kt,
            **dict(self.sliders, **changes),
        )


@dataclass(frozen=True)
class EvaporationThresholds:
    """Material-dependent evaporation tuning derived from the scenario."""
    escape_multiplier: float          # Bulk Liquid->Gas kinetic multiplier
    bulk_thermal_threshold: float     # Bulk thermal energy needed to boil
    surface_multiplier: float         # Surface Liquid->Gas kinetic multiplier
    surface_thermal_threshold: float  # Surface thermal energy needed to evaporate
    thermal_gain_multiplier: float    # Heating rate factor (hexane heats 3x faster)


def _normalize(value: float, low: float, high: float) -> float:
    return min(1.0, max(0.0, (value - low) / (high - low)))


def imf_strength(viscosity: float, epsilon: float, hb_strength: float, dipole_strength: float) -> float:
    """
    Weighted IMF strength in [0, 1].

    Viscosity and hydrogen bonding dominate; dipole and dispersion well depth
    contribute less.
    """
    v_norm = _normalize(viscosity, *VISCOSITY_RANGE)
    eps_norm = _normalize(epsilon, *EPSILON_RANGE)
    hb_norm = min(1.0, max(0.0, hb_strength / HB_STRENGTH_SCALE))
    dp_norm = min(1.0, max(0.0, dipole_strength / DIPOLE_SCALE))

    strength = (
        v_norm * IMF_WEIGHTS["viscosity"]
        + hb_norm * IMF_WEIGHTS["hb_strength"]
        + dp_norm * IMF_WEIGHTS["dipole"]
        + eps_norm * IMF_WEIGHTS["epsilon"]
    )
    return min(1.0, max(0.0, strength))


def floor_attraction_for_viscosity(viscosity: float) -> float:
    # honey 200, dmso-like 100, hexane 20
    if viscosity > 5:
        return 200.0
    if viscosity > 1:
        return 100.0
    return 20.0


def thresholds_for_viscosity(viscosity: float) -> EvaporationThresholds:
    """
    Piecewise-affine tuning for the discrete materials.

    honey (v=10): escape 4.0, bulk thermal 0.85, surface 1.8 / 0.8
    dmso-like (1 < v <= 5): escape 1.5 + 0.9(v - 0.05), surface 1.5 / 0.2 + 0.3v
    hexane (v=0.05): escape 1.505, bulk thermal ~0.26, surface 0.7 / 0.1275
    """
    v = max(0.0, viscosity)

    if v > 5:
        escape = 1.5 + (v - 5) * 0.5
    elif v > 1:
        escape = 1.5 + (v - 0.05) * 0.9
    else:
        escape = 1.5 + v * 0.1

    if v <= 2:
        bulk_thermal = min(0.95, 0.25 + v * 0.29)
    else:
        bulk_thermal = min(0.95, 0.5 + (v - 2) * 0.04375)

    if v > 5:
        surface, surface_thermal = 1.8, 0.4 + (v - 2) * 0.05
    elif v > 1:
        surface, surface_thermal = 1.5, 0.2 + v * 0.3
    else:
        surface, surface_thermal = 0.7, 0.12 + v * 0.15

    return EvaporationThresholds(
        escape_multiplier=escape,
        bulk_thermal_threshold=bulk_thermal,
        surface_multiplier=surface,
        surface_thermal_threshold=surface_thermal,
        thermal_gain_multiplier=3.0 if v < 0.1 else 1.0,
    )


def thresholds_for_imf_strength(t: float) -> EvaporationThresholds:
    """Linear interpolation between the hexane (t=0) and honey (t=1) tuning."""
    t = min(1.0, max(0.0, t))
    return EvaporationThresholds(
        escape_multiplier=1.505 + (4.0 - 1.505) * t,
        bulk_thermal_threshold=0.26 + (0.85 - 0.26) * t,
        surface_multiplier=0.7 + (1.8 - 0.7) * t,
        surface_thermal_threshold=0.1275 + (0.8 - 0.1275) * t,
        thermal_gain_multiplier=3.0 - (3.0 - 1.0) * t,
    )


# Base material values (before cohesion coefficients are derived)
_MATERIALS: Dict[str, dict] = {
    "honey": dict(label="Honey (H-bond)", epsilon=0.7, sigma=10.0, viscosity=10.0),
    "dmso": dict(label="DMSO (dipole-dipole)", epsilon=0.6, sigma=10.0, viscosity=0.1),
    "hexane": dict(label="Hexane (dispersion)", epsilon=0.05, sigma=10.0, viscosity=0.05),
}

SCENARIO_NAMES = tuple(_MATERIALS)


def scenario_preset(
    name: str,
    n_particles: int = 200,
    kt: float = 1.0,
    heat_intensity: float = 5.0
) -> ScenarioParameters:
    """
    Build one of the discrete material scenarios.

    Cohesion coefficients and the directional-force strengths are derived
    from the material's viscosity.

    Raises:
        InvalidConfigurationError: unknown name or out-of-range values
    """
    if name not in _MATERIALS:
        raise InvalidConfigurationError(
            f"Unknown scenario {name!r}; expected one of {', '.join(SCENARIO_NAMES)}"
        )
    base = _MATERIALS[name]
    v = base["viscosity"]

    if name == "honey":
        coeffs = dict(hb_strength=3.0 * v, dipole_strength=0.0,
                      coh_lj=1.5 + 0.8 * v, coh_hb=3.0 + 1.5 * v, coh_dp=1.0)
    elif name == "dmso":
        coeffs = dict(hb_strength=0.0, dipole_strength=1.5 * v,
                      coh_lj=0.8 + 0.5 * v, coh_hb=1.0, coh_dp=1.2 + 0.8 * v)
    else:
        coeffs = dict(hb_strength=0.0, dipole_strength=0.0,
                      coh_lj=0.01 + 0.02 * v, coh_hb=0.0, coh_dp=0.0)

    return ScenarioParameters(
        name=name,
        n_particles=n_particles,
        kt=kt,
        heat_intensity=heat_intensity,
        **base,
        **coeffs,
    ).validate()


def playground_scenario(
    viscosity: float,
    epsilon: float,
    sigma: float = 10.0,
    hb_strength: float = 0.0,
    dipole_strength: float = 0.0,
    n_particles: int = 200,
    heat_intensity: float = 5.0,
    kt: float = 1.0
) -> ScenarioParameters:
    """
    Scenario built from playground slider values.

    The IMF strength t of the raw slider values sets the cohesion
    coefficients between the hexane and honey endpoints. Enabled directional
    forces are additionally scaled by 0.5 + 0.5t; disabled ones (value 0)
    are switched off entirely.
    """
    sliders = dict(viscosity=viscosity, epsilon=epsilon, sigma=sigma,
                   hb_strength=hb_strength, dipole_strength=dipole_strength)
    t = imf_strength(viscosity, epsilon, hb_strength, dipole_strength)

    coh_lj = HEXANE_COH_LJ + (HONEY_COH_LJ - HEXANE_COH_LJ) * t
    if hb_strength > 0:
        coh_hb = HONEY_COH_HB * t
        hb_strength = hb_strength * (0.5 + 0.5 * t)
    else:
        coh_hb = 0.0
        hb_strength = 0.0
    if dipole_strength > 0:
        coh_dp = DMSO_COH_DP * t
        dipole_strength = dipole_strength * (0.5 + 0.5 * t)
    else:
        coh_dp = 0.0
        dipole_strength = 0.0

    return ScenarioParameters(
        name="playground",
        label="Playground",
        epsilon=epsilon,
        sigma=sigma,
        viscosity=viscosity,
        hb_strength=hb_strength,
        dipole_strength=dipole_strength,
        coh_lj=coh_lj,
        coh_hb=coh_hb,
        coh_dp=coh_dp,
        n_particles=n_particles,
        kt=kt,
        heat_intensity=heat_intensity,
        interpolated=True,
        sliders=sliders,
    ).validate()


# Slider endpoints used by scenario_from_imf_strength
HEXANE_SLIDERS = dict(viscosity=0.05, epsilon=0.05, hb_strength=0.0, dipole_strength=0.0)
HONEY_SLIDERS = dict(viscosity=10.0, epsilon=0.7, hb_strength=2.5, dipole_strength=0.0)


def scenario_from_imf_strength(
    strength: float,
    n_particles: int = 200,
    heat_intensity: float = 5.0,
    kt: float = 1.0,
    sigma: float = 10.0
) -> ScenarioParameters:
    """
    Pure mapping from a scalar IMF strength to a playground scenario.

    Slider values are interpolated linearly between the hexane-like and
    honey-like endpoints, then passed through `playground_scenario`.
    """
    if not math.isfinite(strength) or not 0.0 <= strength <= 1.0:
        raise InvalidConfigurationError(f"IMF strength must be in [0, 1], got {strength}")
    sliders = {
        key: HEXANE_SLIDERS[key] + (HONEY_SLIDERS[key] - HEXANE_SLIDERS[key]) * strength
        for key in HEXANE_SLIDERS
    }
    return playground_scenario(
        sigma=sigma,
        n_particles=n_particles,
        heat_intensity=heat_intensity,
        kt=kt,
        **sliders,
    )


@dataclass(frozen=True)
class ParameterLimits:
    """Allowed playground slider ranges for the enabled IMF types."""
    viscosity_min: float
    viscosity_max: float
    epsilon_min: float
    epsilon_max: float

    @property
    def defaults(self) -> Dict[str, float]:
        """Midpoints of the allowed ranges."""
        return {
            "viscosity": (self.viscosity_min + self.viscosity_max) / 2,
            "epsilon": (self.epsilon_min + self.epsilon_max) / 2,
        }


def parameter_limits(hydrogen_bonding: bool = False, dipole: bool = False) -> ParameterLimits:
    """
    Playground slider ranges.

    London dispersion is always present; enabling H-bonding and/or dipole
    forces moves the allowed viscosity and well depth toward stickier
    materials.
    """
    if hydrogen_bonding and dipole:
        return ParameterLimits(0.5, 10.0, 0.4, 0.7)
    if hydrogen_bonding:
        return ParameterLimits(5.0, 10.0, 0.5, 0.7)
    if dipole:
        return ParameterLimits(0.5, 2.0, 0.4, 0.6)
    return ParameterLimits(0.05, 1.0, 0.05, 0.3)


def default_playground_scenario(
    hydrogen_bonding: bool = False,
    dipole: bool = False,
    n_particles: int = 200,
    heat_intensity: float = 5.0
) -> ScenarioParameters:
    """Playground reset: midpoints of the allowed ranges, sigma 10."""
    defaults = parameter_limits(hydrogen_bonding, dipole).defaults
    return playground_scenario(
        viscosity=defaults["viscosity"],
        epsilon=defaults["epsilon"],
        sigma=10.0,
        hb_strength=1.5 if hydrogen_bonding else 0.0,
        dipole_strength=0.5 if dipole else 0.0,
        n_particles=n_particles,
        heat_intensity=heat_intensity,
    )
