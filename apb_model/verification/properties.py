"""
Trace-based property checker for the transfer controller.

Monitor-based: reads a recorded Trace and checks protocol and FSM
properties without touching the controller. Every property is evaluated
over the whole trace and reports all violating cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Callable, Dict

from ..config import ControllerConfig
from ..core.signals import Phase, ControllerRegisters
from ..testbench.trace import Trace, TraceRecord


@dataclass
class PropertyResult:
    """Result of checking one property over a trace."""
    name: str
    checked: int = 0
    violations: List[int] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.violations

    @property
    def first_violation(self) -> Optional[int]:
        """Cycle of the first violation (None if passed)."""
        return self.violations[0] if self.violations else None

    def fail(self, cycle: int, message: str) -> None:
        self.violations.append(cycle)
        self.messages.append(f"cycle {cycle}: {message}")


@dataclass
class CheckReport:
    """Results of all properties checked on a trace."""
    trace_name: str = ""
    cycles: int = 0
    results: List[PropertyResult] = field(default_factory=list)

    @property
    def all_passed(self) -> bool:
        return all(r.passed for r in self.results)

    @property
    def failed(self) -> List[PropertyResult]:
        return [r for r in self.results if not r.passed]

    def get(self, name: str) -> PropertyResult:
        for result in self.results:
            if result.name == name:
                return result
        raise KeyError(name)

    def print_results(self) -> None:
        """Pretty-print check results."""
        print("=" * 70)
        print(f"Property Check Results: {self.trace_name} ({self.cycles} cycles)")
        print("=" * 70)
        for result in self.results:
            status = "PASS" if result.passed else "FAIL"
            detail = (
                f"{result.checked} checked" if result.passed
                else f"{len(result.violations)} violations, first at cycle {result.first_violation}"
            )
            print(f"{result.name:28s} {status:6s} {detail}")
            for message in result.messages[:3]:
                print(f"    {message}")
        print("=" * 70)
        print(f"Overall: {'PASS' if self.all_passed else 'FAIL'}")
        print("=" * 70)


class TraceChecker:
    """
    Checks FSM and protocol properties on a recorded trace.

    Properties:
    - reset_dominance: reset forces Idle, latch low, counters to reset value
    - single_cycle_setup: Setup is always followed by Access
    - wait_state_containment: Access holds while ready is low, with stable
      address, write data and direction
    - counter_exclusivity: one counter advances by 1 per completed transfer
    - latch_timing: the direction latch changes only on edges entering Setup
    - read_capture_gating: read data changes only on read completion
    - output_encoding: select/enable/direction/idle values match the phase
    - error_gating: error is asserted only on a completing cycle
    """

    def __init__(self, config: Optional[ControllerConfig] = None):
        self.config = config or ControllerConfig()
        self._checks: Dict[str, Callable[[Trace, PropertyResult], None]] = {
            "reset_dominance": self._check_reset_dominance,
            "single_cycle_setup": self._check_single_cycle_setup,
            "wait_state_containment": self._check_wait_state_containment,
            "counter_exclusivity": self._check_counter_exclusivity,
            "latch_timing": self._check_latch_timing,
            "read_capture_gating": self._check_read_capture_gating,
            "output_encoding": self._check_output_encoding,
            "error_gating": self._check_error_gating,
        }

    @property
    def property_names(self) -> List[str]:
        return list(self._checks)

    def check(self, trace: Trace, name: str) -> PropertyResult:
        """Check a single property by name."""
        result = PropertyResult(name=name)
        self._checks[name](trace, result)
        return result

    def check_all(self, trace: Trace) -> CheckReport:
        """Check every property."""
        report = CheckReport(trace_name=trace.name, cycles=len(trace))
        for name in self._checks:
            report.results.append(self.check(trace, name))
        return report

    # =========================================================================
    # Properties
    # =========================================================================

    def _check_reset_dominance(self, trace: Trace, result: PropertyResult) -> None:
        expected = ControllerRegisters.reset_value(self.config)
        for r in trace:
            if not r.inputs.reset:
                continue
            result.checked += 1
            if r.after != expected:
                result.fail(r.cycle, f"reset left {r.after!r}")

    def _check_single_cycle_setup(self, trace: Trace, result: PropertyResult) -> None:
        for r in trace:
            if r.inputs.reset or r.before.phase is not Phase.SETUP:
                continue
            result.checked += 1
            if r.after.phase is not Phase.ACCESS:
                result.fail(r.cycle, f"SETUP -> {r.after.phase.name}")

    def _check_wait_state_containment(self, trace: Trace, result: PropertyResult) -> None:
        for prev, cur in _pairs(trace):
            if cur.before.phase is not Phase.ACCESS:
                continue
            if not cur.inputs.reset and not cur.inputs.ready:
                result.checked += 1
                if cur.after.phase is not Phase.ACCESS:
                    result.fail(cur.cycle, f"left ACCESS without ready ({cur.after.phase.name})")
            if prev is None or prev.inputs.reset:
                continue
            if cur.outputs.address != prev.outputs.address:
                result.fail(
                    cur.cycle,
                    f"address changed 0x{prev.outputs.address:X} -> 0x{cur.outputs.address:X}",
                )
            if cur.outputs.write_data != prev.outputs.write_data:
                result.fail(cur.cycle, "write data changed during ACCESS")
            if prev.before.phase is Phase.ACCESS and cur.outputs.direction != prev.outputs.direction:
                result.fail(cur.cycle, "direction changed during ACCESS")

    def _check_counter_exclusivity(self, trace: Trace, result: PropertyResult) -> None:
        mask = self.config.addr_mask
        for r in trace:
            if r.inputs.reset:
                continue
            result.checked += 1
            w_delta = (r.after.write_address - r.before.write_address) & mask
            r_delta = (r.after.read_address - r.before.read_address) & mask
            if not r.completes_transfer:
                if w_delta or r_delta:
                    result.fail(r.cycle, "counter changed without a completed transfer")
            elif r.before.direction_latch:
                if (w_delta, r_delta) != (1, 0):
                    result.fail(r.cycle, f"write completion changed counters by ({w_delta}, {r_delta})")
            elif (w_delta, r_delta) != (0, 1):
                result.fail(r.cycle, f"read completion changed counters by ({w_delta}, {r_delta})")

    def _check_latch_timing(self, trace: Trace, result: PropertyResult) -> None:
        for r in trace:
            if r.inputs.reset:
                continue
            result.checked += 1
            if r.enters_setup:
                if r.after.direction_latch != r.inputs.check:
                    result.fail(r.cycle, "latch did not capture the selector entering SETUP")
            elif r.after.direction_latch != r.before.direction_latch:
                result.fail(r.cycle, f"latch changed on {r.before.phase.name} -> {r.after.phase.name}")

    def _check_read_capture_gating(self, trace: Trace, result: PropertyResult) -> None:
        for prev, cur in _pairs(trace):
            if prev is None:
                continue
            result.checked += 1
            if cur.outputs.read_data == prev.outputs.read_data:
                continue
            if _is_read_capture(cur) or prev.inputs.reset or _is_read_capture(prev):
                continue
            result.fail(cur.cycle, "read data changed outside a read completion")

    def _check_output_encoding(self, trace: Trace, result: PropertyResult) -> None:
        for r in trace:
            result.checked += 1
            o, phase = r.outputs, r.before.phase
            if phase is Phase.IDLE:
                if o.select or o.enable or o.direction or o.address or o.write_data:
                    result.fail(r.cycle, f"IDLE outputs not zero: {o!r}")
            elif phase is Phase.SETUP:
                if not o.select or o.enable:
                    result.fail(r.cycle, "SETUP must assert select only")
                if not r.inputs.check and o.write_data:
                    result.fail(r.cycle, "SETUP read presents write data")
            else:
                if not (o.select and o.enable):
                    result.fail(r.cycle, "ACCESS must assert select and enable")
                if o.direction != r.before.direction_latch:
                    result.fail(r.cycle, "ACCESS direction differs from latch")

    def _check_error_gating(self, trace: Trace, result: PropertyResult) -> None:
        for r in trace:
            result.checked += 1
            expected = (
                r.before.phase is Phase.ACCESS and r.inputs.ready and r.inputs.slverr
            )
            if r.outputs.error != expected:
                result.fail(r.cycle, f"error={int(r.outputs.error)}, expected {int(expected)}")


def _is_read_capture(record: TraceRecord) -> bool:
    return (
        record.before.phase is Phase.ACCESS
        and record.inputs.ready
        and not record.before.direction_latch
    )


def _pairs(trace: Trace):
    """Yield (previous, current) records; previous is None for the first."""
    prev = None
    for record in trace:
        yield prev, record
        prev = record


def check_trace(trace: Trace, config: Optional[ControllerConfig] = None) -> CheckReport:
    """Check every property on a trace."""
    return TraceChecker(config).check_all(trace)
