"""
Golden data verification for requester-driven runs.

Replays completed transfers in completion order against a golden word
store: writes update the store, reads must return the last value written
to the same address (or the preloaded value, if one was given).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..testbench.requester import TransferResult
from ..testbench.memory import Memory


@dataclass
class ReadCheck:
    """Single read-back comparison."""
    request_id: int
    address: int
    expected: int
    actual: int

    @property
    def passed(self) -> bool:
        return self.expected == self.actual


@dataclass
class GoldenReport:
    """Complete golden verification report."""
    total_checks: int = 0
    passed: int = 0
    failed: int = 0
    unchecked_reads: int = 0    # Reads of addresses with no golden value
    memory_mismatches: List[int] = field(default_factory=list)
    results: List[ReadCheck] = field(default_factory=list)

    @property
    def all_passed(self) -> bool:
        return self.failed == 0 and not self.memory_mismatches

    @property
    def pass_rate(self) -> float:
        if self.total_checks == 0:
            return 0.0
        return self.passed / self.total_checks


class GoldenChecker:
    """
    Replays transfer results against golden data.

    Errored transfers do not update the golden store and their read data
    is not checked.
    """

    def __init__(self, preload: Optional[Dict[int, int]] = None):
        """
        Initialize checker.

        Args:
            preload: Initial golden store (address -> word), e.g. the
                contents loaded into the completer memory before the run.
        """
        self._golden: Dict[int, int] = dict(preload or {})

    @property
    def golden(self) -> Dict[int, int]:
        return dict(self._golden)

    def verify(
        self,
        results: List[TransferResult],
        memory: Optional[Memory] = None,
    ) -> GoldenReport:
        """
        Verify transfer results.

        Args:
            results: Completed transfers in completion order.
            memory: Completer memory to compare against the final golden
                store (optional).

        Returns:
            GoldenReport.
        """
        report = GoldenReport()

        for result in sorted(results, key=lambda r: r.complete_cycle):
            if result.error:
                continue
            if result.is_write:
                self._golden[result.address] = result.request.data
                continue

            expected = self._golden.get(result.address)
            if expected is None:
                report.unchecked_reads += 1
                continue

            check = ReadCheck(
                request_id=result.request.request_id,
                address=result.address,
                expected=expected,
                actual=result.read_data,
            )
            report.results.append(check)
            report.total_checks += 1
            if check.passed:
                report.passed += 1
            else:
                report.failed += 1

        if memory is not None:
            for address, value in sorted(self._golden.items()):
                if not memory.contains(address):
                    continue
                if memory.get_contents(address, 1)[0] != value & memory.config.data_mask:
                    report.memory_mismatches.append(address)

        return report
