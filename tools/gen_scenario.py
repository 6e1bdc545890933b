#!/usr/bin/env python3
"""
Scenario Generator.

Generates random requester-driven scenarios for the transfer controller.

Usage:
    python gen_scenario.py -n 10                   # 10 random transfers
    python gen_scenario.py -n 20 --seed 123 --wait-states 2
    python gen_scenario.py -n 8 --write-ratio 0.25 -o custom.yaml
"""

import sys
import argparse
import random
from pathlib import Path
from typing import List

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from apb_model.config import (
    CompleterConfig,
    ScenarioConfig,
    TransferDirection,
    TransferSpec,
)


def generate_random_transfers(
    count: int,
    write_ratio: float = 0.5,
    max_idle: int = 2,
    data_width: int = 32,
    seed: int = 42,
) -> List[TransferSpec]:
    """
    Generate random transfer specifications.

    Args:
        count: Number of transfers to generate.
        write_ratio: Probability that a transfer is a write.
        max_idle: Maximum idle cycles before a transfer.
        data_width: Payload width in bits.
        seed: Random seed for reproducibility.

    Returns:
        List of TransferSpec objects.
    """
    rng = random.Random(seed)
    transfers = []
    for _ in range(count):
        is_write = rng.random() < write_ratio
        transfers.append(TransferSpec(
            direction=TransferDirection.WRITE if is_write else TransferDirection.READ,
            data=rng.getrandbits(data_width) if is_write else 0,
            idle_before=rng.randint(0, max_idle),
        ))
    return transfers


def build_scenario(
    transfers: List[TransferSpec],
    wait_states: int,
    memory_words: int,
    seed: int,
) -> ScenarioConfig:
    """Wrap transfers into a scenario with expected final counters."""
    writes = sum(1 for t in transfers if t.direction.is_write)
    reads = len(transfers) - writes
    scenario = ScenarioConfig(
        name=f"random_{seed}",
        description=f"{len(transfers)} random transfers (seed={seed})",
        completer=CompleterConfig(wait_states=wait_states, memory_words=memory_words),
        transfers=transfers,
        expected_write_address=1 + writes,
        expected_read_address=1 + reads,
    )
    scenario.validate()
    return scenario


def main():
    parser = argparse.ArgumentParser(
        description="Generate random transfer controller scenarios",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python gen_scenario.py -n 10
  python gen_scenario.py -n 20 --seed 123 --wait-states 3
"""
    )
    parser.add_argument('-n', '--num', type=int, default=5,
                        help='Number of transfers to generate (default: 5)')
    parser.add_argument('--write-ratio', type=float, default=0.5,
                        help='Fraction of writes (default: 0.5)')
    parser.add_argument('--max-idle', type=int, default=2,
                        help='Maximum idle cycles before a transfer (default: 2)')
    parser.add_argument('--wait-states', type=int, default=0,
                        help='Completer wait states (default: 0)')
    parser.add_argument('--memory-words', type=int, default=1024,
                        help='Completer memory size in words (default: 1024)')
    parser.add_argument('--seed', type=int, default=42,
                        help='Random seed for reproducibility (default: 42)')
    parser.add_argument('-o', '--output', type=str,
                        default='examples/Transfer/config/generated.yaml',
                        help='Output YAML file path')

    args = parser.parse_args()

    transfers = generate_random_transfers(
        count=args.num,
        write_ratio=args.write_ratio,
        max_idle=args.max_idle,
        seed=args.seed,
    )
    scenario = build_scenario(transfers, args.wait_states, args.memory_words, args.seed)
    scenario.save(Path(args.output))

    print(f"Scenario written to {args.output}")
    print()
    print("Transfer summary:")
    for i, t in enumerate(transfers):
        data_str = f"0x{t.data:08X}" if t.direction.is_write else "-"
        print(f"  [{i+1:2d}] {t.direction.value:5s} {data_str:>10s} idle={t.idle_before}")


if __name__ == '__main__':
    main()
