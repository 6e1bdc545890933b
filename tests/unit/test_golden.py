"""
Tests for golden data verification.
"""

import pytest

from apb_model.config import TransferDirection
from apb_model.testbench import (
    Memory,
    MemoryConfig,
    TransferRequest,
    TransferResult,
)
from apb_model.verification import GoldenChecker


def result(request_id, direction, address, cycle, data=0, read_data=0, error=False):
    return TransferResult(
        request=TransferRequest(request_id, direction, data),
        address=address,
        read_data=read_data,
        error=error,
        setup_cycle=cycle - 1,
        complete_cycle=cycle,
    )


W, R = TransferDirection.WRITE, TransferDirection.READ


class TestGoldenChecker:
    """Test read-back replay."""

    def test_read_after_write_passes(self):
        report = GoldenChecker().verify([
            result(0, W, 1, 3, data=0xBEAD),
            result(1, R, 1, 6, read_data=0xBEAD),
        ])
        assert report.all_passed
        assert report.total_checks == 1
        assert report.pass_rate == 1.0

    def test_mismatch_detected(self):
        report = GoldenChecker().verify([
            result(0, W, 1, 3, data=0xBEAD),
            result(1, R, 1, 6, read_data=0xDEAD),
        ])
        assert not report.all_passed
        assert report.failed == 1
        check = report.results[0]
        assert (check.expected, check.actual) == (0xBEAD, 0xDEAD)

    def test_replay_in_completion_order(self):
        """A read completing before the write sees no golden value."""
        report = GoldenChecker().verify([
            result(1, W, 1, 9, data=5),
            result(0, R, 1, 4, read_data=0),
        ])
        assert report.unchecked_reads == 1
        assert report.total_checks == 0
        assert report.pass_rate == 0.0

    def test_errored_transfers_skipped(self):
        report = GoldenChecker().verify([
            result(0, W, 1, 3, data=7, error=True),
            result(1, R, 1, 6, read_data=0, error=True),
        ])
        assert report.all_passed
        assert report.total_checks == 0
        assert report.unchecked_reads == 0

    def test_preload(self):
        checker = GoldenChecker(preload={2: 0x99})
        report = checker.verify([result(0, R, 2, 3, read_data=0x99)])
        assert report.passed == 1
        assert checker.golden == {2: 0x99}

    def test_memory_comparison(self):
        memory = Memory(MemoryConfig(words=8))
        memory.write(1, 0xBEAD)
        results = [result(0, W, 1, 3, data=0xBEAD), result(1, W, 2, 6, data=0x1)]
        report = GoldenChecker().verify(results, memory)
        assert report.memory_mismatches == [2]
        assert not report.all_passed

    def test_unmapped_addresses_ignored(self):
        memory = Memory(MemoryConfig(words=2))
        report = GoldenChecker().verify([result(0, W, 50, 3, data=1)], memory)
        assert report.memory_mismatches == []
