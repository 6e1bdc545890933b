"""
Testbench harness.

Wires stimulus (scripted or requester-driven), the transfer controller
and an optional completer together and advances them one clock cycle at
a time, recording a Trace.

Per-cycle evaluation order:
1. Requester-side inputs for the cycle (StimulusStep)
2. Controller outputs that do not depend on completer signals
3. Completer response (ready / read data / error)
4. Final controller outputs with the full inputs, recorded
5. Completer and controller clock edge
"""

from __future__ import annotations

import logging
from typing import Optional, Dict, Any

from ..config import ScenarioConfig
from ..core.controller import TransferController
from ..core.signals import ControllerInputs
from .completer import Completer, CompleterResponse
from .requester import Requester
from .stimulus import StimulusSequence, StimulusStep
from .trace import Trace, TraceRecord

logger = logging.getLogger(__name__)


class Testbench:
    """Cycle-by-cycle simulation harness around one TransferController."""

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        controller: Optional[TransferController] = None,
        completer: Optional[Completer] = None,
        name: str = "",
    ):
        """
        Initialize testbench.

        Args:
            controller: Controller under test (default config if not provided).
            completer: Completer model. Without one, ready/read_data/slverr
                come only from the stimulus and default low.
            name: Testbench name (used as trace name).
        """
        self.controller = controller or TransferController()
        self.completer = completer
        self.name = name or "testbench"
        self.trace = Trace(name=self.name)

    @property
    def cycle(self) -> int:
        return len(self.trace)

    def step(self, stimulus: StimulusStep) -> TraceRecord:
        """
        Simulate one clock cycle.

        Args:
            stimulus: Requester-side inputs for the cycle.

        Returns:
            Trace record of the cycle.
        """
        response = CompleterResponse()
        if self.completer is not None:
            probe = self.controller.outputs(stimulus.to_inputs())
            response = self.completer.respond(probe)

        inputs = stimulus.to_inputs(
            ready=response.ready,
            read_data=response.read_data,
            slverr=response.slverr,
        )
        before = self.controller.registers
        outputs = self.controller.outputs(inputs)

        if self.completer is not None:
            self.completer.commit(outputs, CompleterResponse(
                ready=inputs.ready,
                read_data=inputs.read_data,
                slverr=inputs.slverr,
            ))
        self.controller.tick(inputs)

        record = TraceRecord(
            cycle=self.cycle,
            inputs=inputs,
            outputs=outputs,
            before=before,
            after=self.controller.registers,
            label=stimulus.label,
        )
        self.trace.append(record)
        return record

    def apply(self, inputs: ControllerInputs, label: str = "") -> TraceRecord:
        """Simulate one cycle with fully specified controller inputs."""
        return self.step(StimulusStep(
            reset=inputs.reset,
            start=inputs.start,
            check=inputs.check,
            write_data=inputs.write_data,
            write_flag=inputs.write_flag,
            ready=inputs.ready,
            read_data=inputs.read_data,
            slverr=inputs.slverr,
            label=label,
        ))

    def run_sequence(self, sequence: StimulusSequence) -> Trace:
        """
        Apply a scripted stimulus sequence.

        Args:
            sequence: Per-cycle stimulus.

        Returns:
            The testbench trace (all cycles run so far).
        """
        for stimulus in sequence:
            self.step(stimulus)
        return self.trace

    def run_transfers(
        self,
        requester: Requester,
        max_cycles: int = 10000,
        reset_cycles: int = 1,
    ) -> Trace:
        """
        Run requester-driven transfers until all complete.

        Args:
            requester: Requester with queued transfers.
            max_cycles: Cycle limit.
            reset_cycles: Reset cycles applied before the first transfer.

        Returns:
            The testbench trace.

        Raises:
            RuntimeError: If transfers do not complete within max_cycles.
        """
        for _ in range(reset_cycles):
            self.step(StimulusStep(reset=True, label="reset"))

        while not (requester.is_complete and self.controller.is_idle):
            if self.cycle >= max_cycles:
                raise RuntimeError(
                    f"{self.name}: transfers did not complete within {max_cycles} cycles "
                    f"({requester.pending_count} pending)"
                )
            stimulus = requester.drive(self.controller.phase)
            record = self.step(stimulus)
            requester.observe(record)

        logger.debug(
            "%s: %d transfers completed in %d cycles",
            self.name, requester.stats.completed, self.cycle,
        )
        return self.trace

    # =========================================================================
    # Scenarios
    # =========================================================================

    @classmethod
    def from_scenario(cls, scenario: ScenarioConfig) -> "Testbench":
        """Build controller and completer from a scenario configuration."""
        controller = TransferController(scenario.controller, name=scenario.name)
        completer = None
        if scenario.completer is not None:
            completer = Completer(
                scenario.completer,
                data_width=scenario.controller.data_width,
            )
        return cls(controller, completer, name=scenario.name)

    def run_scenario(self, scenario: ScenarioConfig) -> Trace:
        """
        Run the stimulus described by a scenario.

        Args:
            scenario: Scenario configuration.

        Returns:
            The testbench trace.
        """
        if scenario.is_transaction_level:
            requester = Requester.from_specs(scenario.transfers)
            return self.run_transfers(requester, max_cycles=scenario.max_cycles)

        sequence = StimulusSequence.from_steps(scenario.steps)
        if len(sequence) > scenario.max_cycles:
            raise RuntimeError(
                f"{self.name}: {len(sequence)} steps exceed max_cycles {scenario.max_cycles}"
            )
        return self.run_sequence(sequence)

    def check_expected(self, scenario: ScenarioConfig) -> Dict[str, Any]:
        """
        Compare final address counters with a scenario's expectations.

        Returns:
            Dict of counter name -> (expected, actual, passed).
        """
        results = {}
        if scenario.expected_write_address is not None:
            actual = self.controller.write_address
            expected = scenario.expected_write_address
            results["write_address"] = (expected, actual, expected == actual)
        if scenario.expected_read_address is not None:
            actual = self.controller.read_address
            expected = scenario.expected_read_address
            results["read_address"] = (expected, actual, expected == actual)
        return results
