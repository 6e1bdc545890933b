#!/usr/bin/env python3
"""
Transfer Controller Scenario Runner.

Usage:
    python run.py                            # Run default scenario (write_wait)
    python run.py read_wait                  # Run a named scenario from config/
    python run.py back_to_back --waveform out/b2b.png
    python run.py --config my_scenario.yaml  # Run a custom scenario file
    python run.py --random 200 --seed 7      # Random stimulus, property check only
"""

import sys
import argparse
import logging
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from apb_model.config import ScenarioConfig, load_scenario_config
from apb_model.testbench import Testbench, Requester, random_sequence
from apb_model.verification import TraceChecker, GoldenChecker


SCENARIOS = ['write_wait', 'read_wait', 'back_to_back', 'error_response']


def run_scenario(
    scenario: ScenarioConfig,
    verbose: bool = True,
    waveform: str = None,
    trace_file: str = None,
) -> dict:
    """
    Run one scenario and check it.

    Args:
        scenario: Scenario configuration.
        verbose: Print trace, summary and check results.
        waveform: Optional path for a waveform image.
        trace_file: Optional path for a YAML trace dump.

    Returns:
        Result dictionary with a 'success' flag.
    """
    if verbose:
        print("\n" + "=" * 60)
        print(f"Scenario: {scenario.name}")
        print("=" * 60)
        if scenario.description:
            print(scenario.description)
        print()

    tb = Testbench.from_scenario(scenario)

    requester = None
    if scenario.is_transaction_level:
        requester = Requester.from_specs(scenario.transfers)
        trace = tb.run_transfers(requester, max_cycles=scenario.max_cycles)
    else:
        trace = tb.run_scenario(scenario)

    report = TraceChecker(scenario.controller).check_all(trace)
    expected = tb.check_expected(scenario)
    expected_ok = all(passed for _, _, passed in expected.values())

    golden_ok = True
    if requester is not None:
        golden = GoldenChecker().verify(
            requester.results,
            tb.completer.memory if tb.completer is not None else None,
        )
        golden_ok = golden.all_passed

    if verbose:
        trace.print_table()
        print()
        tb.controller.print_summary()
        report.print_results()
        for counter, (want, got, passed) in expected.items():
            status = "PASS" if passed else "FAIL"
            print(f"{counter:16s} expected 0x{want:08X} got 0x{got:08X}  {status}")
        if requester is not None:
            print(f"Golden read-back: {golden.passed}/{golden.total_checks} passed, "
                  f"{len(golden.memory_mismatches)} memory mismatches")

    if waveform:
        from apb_model.visualization import plot_waveform, WaveformConfig
        plot_waveform(trace, WaveformConfig(title=scenario.name), save_path=waveform)
        if verbose:
            print(f"Waveform saved to {waveform}")

    if trace_file:
        trace.save(trace_file)
        if verbose:
            print(f"Trace saved to {trace_file}")

    success = report.all_passed and expected_ok and golden_ok
    return {
        'success': success,
        'cycles': len(trace),
        'properties_passed': report.all_passed,
        'expected_passed': expected_ok,
        'golden_passed': golden_ok,
    }


def run_random(cycles: int, seed: int, verbose: bool = True) -> dict:
    """Run random stimulus and check every property."""
    tb = Testbench(name=f"random_{seed}")
    trace = tb.run_sequence(random_sequence(cycles, seed=seed, error_prob=0.1))
    report = TraceChecker(tb.controller.config).check_all(trace)
    if verbose:
        tb.controller.print_summary()
        report.print_results()
    return {'success': report.all_passed, 'cycles': len(trace)}


def main():
    parser = argparse.ArgumentParser(description="Transfer Controller Scenario Runner")
    parser.add_argument('scenario', nargs='?', default='write_wait',
                        choices=SCENARIOS, help='Scenario to run')
    parser.add_argument('--config', type=str, help='Custom scenario file')
    parser.add_argument('--random', type=int, metavar='CYCLES',
                        help='Run random stimulus for CYCLES cycles instead')
    parser.add_argument('--seed', type=int, default=42, help='Random seed')
    parser.add_argument('--waveform', type=str, help='Save waveform image to path')
    parser.add_argument('--trace', type=str, help='Save YAML trace to path')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    parser.add_argument('-q', '--quiet', action='store_true', help='Quiet mode')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s: %(message)s',
    )
    verbose = not args.quiet

    if args.random:
        result = run_random(args.random, args.seed, verbose)
        return 0 if result['success'] else 1

    config_dir = Path(__file__).parent / 'config'
    if args.config:
        config_path = Path(args.config)
    else:
        config_path = config_dir / f'{args.scenario}.yaml'

    if not config_path.exists():
        print(f"Config not found: {config_path}")
        return 1

    scenario = load_scenario_config(config_path)
    result = run_scenario(scenario, verbose, waveform=args.waveform, trace_file=args.trace)

    return 0 if result['success'] else 1


if __name__ == '__main__':
    sys.exit(main())
