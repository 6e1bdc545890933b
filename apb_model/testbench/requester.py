"""
Transaction-level requester model.

Turns a queue of write/read requests into the start/check/write_data
inputs of the transfer controller, one cycle at a time, and collects
the result of every completed transfer.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Optional, List, Deque, Dict, Iterable

from ..config import TransferDirection, TransferSpec
from ..core.signals import Phase
from .stimulus import StimulusStep
from .trace import TraceRecord


@dataclass
class TransferRequest:
    """A single-beat transfer waiting to be issued."""
    request_id: int
    direction: TransferDirection
    data: int = 0
    idle_before: int = 0    # Idle cycles with start low before issuing


@dataclass
class TransferResult:
    """Outcome of a completed transfer."""
    request: TransferRequest
    address: int
    read_data: int   # 0 for writes
    error: bool
    setup_cycle: int
    complete_cycle: int

    @property
    def latency(self) -> int:
        """Cycles from Setup to completion, inclusive."""
        return self.complete_cycle - self.setup_cycle + 1

    @property
    def is_write(self) -> bool:
        return self.request.direction.is_write


@dataclass
class RequesterStats:
    """Requester statistics."""
    issued: int = 0
    completed: int = 0
    errors: int = 0
    total_latency: int = 0

    @property
    def avg_latency(self) -> float:
        if self.completed == 0:
            return 0.0
        return self.total_latency / self.completed


class Requester:
    """
    Issues queued transfers to the controller.

    drive() is called before each clock edge with the controller's current
    phase; observe() is called after the edge with the cycle's TraceRecord.
    A request stays at the head of the queue with start asserted until the
    controller enters Setup, at which point it becomes the in-flight
    transfer and the next request (if any) is presented.
    """

    def __init__(self, requests: Optional[Iterable[TransferRequest]] = None):
        self._pending: Deque[TransferRequest] = deque()
        self._in_flight: Optional[TransferRequest] = None
        self._setup_cycle = 0
        self._idle_remaining = 0
        self._next_id = 0

        self.results: List[TransferResult] = []
        self.stats = RequesterStats()

        for request in requests or []:
            self._enqueue(request)

    # =========================================================================
    # Queueing
    # =========================================================================

    def _enqueue(self, request: TransferRequest) -> None:
        if not self._pending:
            self._idle_remaining = request.idle_before
        self._pending.append(request)
        self._next_id = max(self._next_id, request.request_id + 1)

    def submit(
        self,
        direction: TransferDirection,
        data: int = 0,
        idle_before: int = 0,
    ) -> TransferRequest:
        """Queue a transfer and return its request."""
        request = TransferRequest(
            request_id=self._next_id,
            direction=direction,
            data=data,
            idle_before=idle_before,
        )
        self._enqueue(request)
        return request

    def write(self, data: int, idle_before: int = 0) -> TransferRequest:
        return self.submit(TransferDirection.WRITE, data, idle_before)

    def read(self, idle_before: int = 0) -> TransferRequest:
        return self.submit(TransferDirection.READ, 0, idle_before)

    @classmethod
    def from_specs(cls, specs: List[TransferSpec]) -> "Requester":
        """Build from scenario transfer specifications."""
        requester = cls()
        for spec in specs:
            requester.submit(spec.direction, spec.data, spec.idle_before)
        return requester

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def in_flight(self) -> Optional[TransferRequest]:
        return self._in_flight

    @property
    def is_complete(self) -> bool:
        """Check if every submitted request has completed."""
        return not self._pending and self._in_flight is None

    # =========================================================================
    # Per-cycle interface
    # =========================================================================

    @staticmethod
    def _present(request: TransferRequest, start: bool) -> StimulusStep:
        is_write = request.direction.is_write
        return StimulusStep(
            start=start,
            check=is_write,
            write_data=request.data if is_write else 0,
            write_flag=is_write,
            label=f"{request.direction.value}#{request.request_id}",
        )

    def drive(self, phase: Phase) -> StimulusStep:
        """
        Requester inputs for the current cycle.

        Args:
            phase: Controller phase during this cycle.
        """
        if phase is Phase.SETUP and self._in_flight is not None:
            return self._present(self._in_flight, start=False)
        if self._pending and self._idle_remaining == 0:
            return self._present(self._pending[0], start=True)
        return StimulusStep(label="idle")

    def observe(self, record: TraceRecord) -> Optional[TransferResult]:
        """
        Update request state after a clock edge.

        Args:
            record: Trace record of the cycle just clocked.

        Returns:
            Result of the transfer completed on this edge, if any.
        """
        if record.inputs.reset:
            # Reset aborts the in-flight transfer; it is reissued.
            if self._in_flight is not None:
                self._pending.appendleft(self._in_flight)
                self._in_flight = None
            return None

        result = None
        if record.completes_transfer and self._in_flight is not None:
            # read_data holds the last captured read; meaningless for writes
            is_write = self._in_flight.direction.is_write
            result = TransferResult(
                request=self._in_flight,
                address=record.outputs.address,
                read_data=0 if is_write else record.outputs.read_data,
                error=record.outputs.error,
                setup_cycle=self._setup_cycle,
                complete_cycle=record.cycle,
            )
            self.results.append(result)
            self.stats.completed += 1
            self.stats.total_latency += result.latency
            if result.error:
                self.stats.errors += 1
            self._in_flight = None

        if record.enters_setup and self._pending:
            self._in_flight = self._pending.popleft()
            self._setup_cycle = record.cycle + 1
            self.stats.issued += 1
            if self._pending:
                self._idle_remaining = self._pending[0].idle_before
        elif record.before.phase is Phase.IDLE and self._idle_remaining > 0:
            self._idle_remaining -= 1

        return result

    def get_results_by_id(self) -> Dict[int, TransferResult]:
        return {r.request.request_id: r for r in self.results}
