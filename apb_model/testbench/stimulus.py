"""
Cycle-level stimulus for the transfer controller.

A StimulusSequence is a list of StimulusStep, one per clock cycle,
built either programmatically, from scenario StepConfig entries, or at
random for property checking.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, List, Iterator
import random

from ..config import StepConfig
from ..core.signals import ControllerInputs


@dataclass(frozen=True)
class StimulusStep:
    """
    Requester-side inputs for one cycle.

    ready, read_data and slverr set to None are left to the completer.
    """
    reset: bool = False
    start: bool = False
    check: bool = False
    write_data: int = 0
    write_flag: bool = False
    ready: Optional[bool] = None
    read_data: Optional[int] = None
    slverr: Optional[bool] = None
    label: str = ""

    def to_inputs(
        self,
        ready: bool = False,
        read_data: int = 0,
        slverr: bool = False,
    ) -> ControllerInputs:
        """
        Build controller inputs, filling completer-driven fields.

        Explicit values in the step take priority over the arguments.
        """
        return ControllerInputs(
            reset=self.reset,
            ready=ready if self.ready is None else self.ready,
            start=self.start,
            check=self.check,
            write_data=self.write_data,
            write_flag=self.write_flag,
            read_data=read_data if self.read_data is None else self.read_data,
            slverr=slverr if self.slverr is None else self.slverr,
        )


class StimulusSequence:
    """
    Ordered per-cycle stimulus.

    Builder methods return self so sequences can be chained:

        seq = StimulusSequence().reset().request_write(0xBEAD).wait(2).complete()
    """

    def __init__(self, steps: Optional[List[StimulusStep]] = None):
        self._steps: List[StimulusStep] = list(steps or [])

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[StimulusStep]:
        return iter(self._steps)

    def __getitem__(self, index: int) -> StimulusStep:
        return self._steps[index]

    @property
    def steps(self) -> List[StimulusStep]:
        return list(self._steps)

    @property
    def last(self) -> StimulusStep:
        """Most recent step (idle step if empty)."""
        return self._steps[-1] if self._steps else StimulusStep()

    def append(self, step: StimulusStep, cycles: int = 1) -> "StimulusSequence":
        """Append a step held for `cycles` cycles."""
        if cycles < 1:
            raise ValueError("cycles must be at least 1")
        self._steps.extend([step] * cycles)
        return self

    def extend(self, other: "StimulusSequence") -> "StimulusSequence":
        self._steps.extend(other.steps)
        return self

    # =========================================================================
    # Builders
    # =========================================================================

    def reset(self, cycles: int = 1) -> "StimulusSequence":
        """Assert reset."""
        return self.append(StimulusStep(reset=True, label="reset"), cycles)

    def idle(self, cycles: int = 1) -> "StimulusSequence":
        """Drive all requester inputs low."""
        return self.append(StimulusStep(label="idle"), cycles)

    def request_write(self, data: int, write_flag: bool = True) -> "StimulusSequence":
        """Request a write for one cycle."""
        return self.append(StimulusStep(
            start=True, check=True, write_data=data,
            write_flag=write_flag, label="write",
        ))

    def request_read(self) -> "StimulusSequence":
        """Request a read for one cycle."""
        return self.append(StimulusStep(start=True, check=False, label="read"))

    def hold(self, cycles: int = 1, **changes) -> "StimulusSequence":
        """
        Repeat the last requester inputs with `changes` applied.

        start and reset are dropped and completer-side overrides are
        cleared unless given in `changes`.
        """
        for key in ("start", "reset"):
            changes.setdefault(key, False)
        for key in ("ready", "read_data", "slverr"):
            changes.setdefault(key, None)
        changes.setdefault("label", "hold")
        return self.append(replace(self.last, **changes), cycles)

    def wait(self, cycles: int = 1, **changes) -> "StimulusSequence":
        """Hold with ready forced low (wait states)."""
        changes.setdefault("label", "wait")
        return self.hold(cycles, ready=False, **changes)

    def complete(
        self,
        read_data: Optional[int] = None,
        slverr: Optional[bool] = None,
        **changes,
    ) -> "StimulusSequence":
        """Hold for one cycle with ready forced high."""
        changes.setdefault("label", "ready")
        return self.hold(1, ready=True, read_data=read_data, slverr=slverr, **changes)

    @classmethod
    def from_steps(cls, steps: List[StepConfig]) -> "StimulusSequence":
        """Build from scenario step configurations."""
        seq = cls()
        for step in steps:
            step.validate()
            seq.append(StimulusStep(
                reset=step.reset,
                start=step.start,
                check=step.check,
                write_data=step.write_data,
                write_flag=step.write_flag,
                ready=step.ready,
                read_data=step.read_data,
                slverr=step.slverr,
                label=step.label,
            ), step.cycles)
        return seq


def random_sequence(
    cycles: int,
    seed: int = 42,
    start_prob: float = 0.5,
    write_prob: float = 0.5,
    ready_prob: float = 0.5,
    reset_prob: float = 0.02,
    error_prob: float = 0.0,
    data_width: int = 32,
    drive_completer: bool = True,
) -> StimulusSequence:
    """
    Generate random per-cycle stimulus.

    Args:
        cycles: Number of cycles.
        seed: Random seed for reproducibility.
        start_prob: Probability start is asserted.
        write_prob: Probability the selector indicates write.
        ready_prob: Probability ready is asserted (if driving the completer side).
        reset_prob: Probability reset is asserted.
        error_prob: Probability slverr is asserted (if driving the completer side).
        data_width: Payload width in bits.
        drive_completer: Also randomize ready/read_data/slverr.

    Returns:
        StimulusSequence with one step per cycle (first step is a reset).
    """
    rng = random.Random(seed)
    seq = StimulusSequence().reset()

    for _ in range(cycles - 1):
        step = StimulusStep(
            reset=rng.random() < reset_prob,
            start=rng.random() < start_prob,
            check=rng.random() < write_prob,
            write_data=rng.getrandbits(data_width),
            write_flag=rng.random() < 0.5,
            label="random",
        )
        if drive_completer:
            step = replace(
                step,
                ready=rng.random() < ready_prob,
                read_data=rng.getrandbits(data_width),
                slverr=rng.random() < error_prob,
            )
        seq.append(step)

    return seq
