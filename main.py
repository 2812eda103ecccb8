#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
IMF Evaporation Simulator - Command Line Interface
================================================================================

Project:        IMF Evaporation Simulator
Module:         main.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        January 22, 2026
Last Updated:   February 9, 2026

License:        MIT License
================================================================================

Command line interface for running headless evaporation trials.
"""

import argparse
import logging
import time
import numpy as np

from imfsim.exceptions import PhysicsError
from imfsim.scenarios import SCENARIO_NAMES, scenario_preset, scenario_from_imf_strength
from imfsim.simulation import SimulationConfig, SimulationEngine
from imfsim.trial import TrialResult, random_goal


REPORT_INTERVAL = 5.0


def run_trial(engine: SimulationEngine, dt: float = 1.0 / 60.0, verbose: bool = True) -> TrialResult:
    """
    Heat the engine's liquid until the trial ends.

    Args:
        engine: Freshly built engine
        dt: Frame time in seconds
        verbose: Print the escape curve every few seconds

    Returns:
        the trial result
    """
    engine.set_heating(True)
    next_report = REPORT_INTERVAL
    t_start = time.time()

    while not engine.trial_ended:
        engine.step(dt)
        if verbose and engine.trial.elapsed >= next_report:
            print(f"  t = {engine.trial.elapsed:5.1f} s: "
                  f"gas = {engine.gas_count:3d}, escaped = {engine.escaped_count:3d}")
            next_report += REPORT_INTERVAL

    if verbose:
        t_end = time.time()
        print(f"\nTrial completed in {t_end - t_start:.2f} seconds "
              f"({engine.step_count / max(t_end - t_start, 1e-9):.1f} steps/s)")
    return engine.trial.result


def build_config(args) -> SimulationConfig:
    return SimulationConfig(seed=args.seed, gravity_on=not args.no_gravity)


def run_single_trial(args) -> None:
    """Run one heated trial of a material preset."""
    print("=" * 60)
    print(f"IMF Evaporation Simulator - {args.trial} trial")
    print("=" * 60)

    scenario = scenario_preset(args.trial, n_particles=args.particles, heat_intensity=args.heat)
    engine = SimulationEngine(scenario, build_config(args))
    print(f"\n{scenario.label}: {engine.n_particles} particles, IMF strength {scenario.imf_strength:.2f}")

    result = run_trial(engine, dt=args.dt)
    print(f"\nEscaped: {result.escaped_count}/{result.total_particles} ({result.escaped_percent}%)")


def run_comparison(args) -> None:
    """Run every material preset with the same seed and compare."""
    print("=" * 60)
    print("IMF Evaporation Simulator - Material Comparison")
    print("=" * 60)

    results = []
    for name in SCENARIO_NAMES:
        scenario = scenario_preset(name, n_particles=args.particles, heat_intensity=args.heat)
        print(f"\nRunning {scenario.label}...")
        engine = SimulationEngine(scenario, build_config(args))
        results.append((scenario, run_trial(engine, dt=args.dt, verbose=False)))

    print(f"\n{'Material':<24}{'IMF':>6}{'Escaped':>10}{'Percent':>10}")
    print("-" * 50)
    for scenario, result in results:
        print(f"{scenario.label:<24}{scenario.imf_strength:>6.2f}"
              f"{result.escaped_count:>10d}{result.escaped_percent:>9d}%")


def run_playground(args) -> None:
    """Run an interpolated scenario and check it against a random goal."""
    print("=" * 60)
    print("IMF Evaporation Simulator - Playground")
    print("=" * 60)

    goal = random_goal(np.random.default_rng(args.seed))
    print(f"\nGoal: {goal.text}")

    scenario = scenario_from_imf_strength(args.playground, n_particles=args.particles, heat_intensity=args.heat)
    engine = SimulationEngine(scenario, build_config(args))
    print(f"IMF strength {args.playground:.2f}: viscosity {scenario.viscosity:.2f}, "
          f"epsilon {scenario.epsilon:.2f}, H-bond {scenario.hb_strength:.2f}")

    result = run_trial(engine, dt=args.dt)
    print(f"\nEscaped: {result.escaped_percent}%")
    if goal.check(result.escaped_percent):
        print("  ✓ Goal reached!")
    else:
        print("  ✗ Goal missed, try a different IMF strength")


def main():
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="IMF Evaporation Simulator - 2D intermolecular force evaporation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --trial honey           Run a 30 s heated honey trial
  python main.py --compare --seed 7      Compare honey, DMSO and hexane
  python main.py --playground 0.4        Playground trial at IMF strength 0.4
        """
    )

    parser.add_argument('--trial', choices=SCENARIO_NAMES,
                       help='Run a heated trial of one material')
    parser.add_argument('--compare', action='store_true',
                       help='Compare all materials with the same seed')
    parser.add_argument('--playground', type=float, metavar='IMF',
                       help='Run a playground trial at IMF strength in [0, 1]')
    parser.add_argument('--particles', '-n', type=int, default=200,
                       help='Number of particles (default: 200)')
    parser.add_argument('--seed', type=int, default=None,
                       help='Random seed (default: fresh entropy)')
    parser.add_argument('--heat', type=float, default=5.0,
                       help='Heat intensity in [0, 5] (default: 5)')
    parser.add_argument('--dt', type=float, default=1.0 / 60.0,
                       help='Frame time in seconds (default: 1/60)')
    parser.add_argument('--no-gravity', action='store_true',
                       help='Disable gravity')
    parser.add_argument('--verbose', '-v', action='store_true',
                       help='Enable debug logging')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s"
    )

    try:
        if args.trial:
            run_single_trial(args)
        elif args.compare:
            run_comparison(args)
        elif args.playground is not None:
            run_playground(args)
        else:
            parser.print_help()
            print("\nNo action specified. Run with --trial, --compare, or --playground")
    except PhysicsError as e:
        parser.error(str(e))


if __name__ == "__main__":
    main()
