"""
Tests for the Testbench harness and Trace recording.
"""

import pytest
import yaml
from pathlib import Path
from tempfile import TemporaryDirectory

from apb_model.config import ScenarioConfig, StepConfig, CompleterConfig
from apb_model.core import Phase, ControllerInputs
from apb_model.testbench import Testbench, StimulusStep


class TestTestbenchStep:
    """Test single-cycle stepping."""

    def test_records_before_and_after(self, testbench):
        record = testbench.step(StimulusStep(start=True, check=True))
        assert record.cycle == 0
        assert record.before.phase is Phase.IDLE
        assert record.after.phase is Phase.SETUP
        assert record.enters_setup
        assert testbench.cycle == 1

    def test_apply_full_inputs(self, testbench):
        testbench.apply(ControllerInputs(start=True), label="go")
        testbench.apply(ControllerInputs())
        record = testbench.apply(ControllerInputs(ready=True, read_data=0x5))
        assert record.label == ""
        assert record.completes_transfer
        assert record.outputs.read_data == 0x5
        assert testbench.trace[0].label == "go"

    def test_completer_drives_ready(self, testbench_with_completer):
        bench = testbench_with_completer
        bench.step(StimulusStep(start=True, check=True, write_data=0x9))
        readies = []
        for _ in range(4):
            record = bench.step(StimulusStep(check=True, write_data=0x9))
            readies.append(record.inputs.ready)
        # Setup, two wait states, then completion
        assert readies == [False, False, False, True]
        assert bench.completer.memory.get_contents(1, 1) == [0x9]

    def test_stimulus_ready_overrides_completer(self, testbench_with_completer):
        bench = testbench_with_completer
        bench.step(StimulusStep(start=True, check=True))
        bench.step(StimulusStep(check=True))
        record = bench.step(StimulusStep(check=True, ready=True))
        assert record.completes_transfer


class TestTestbenchScenario:
    """Test scenario-driven runs."""

    def test_from_scenario_builds_completer(self):
        scenario = ScenarioConfig(name="s", completer=CompleterConfig(wait_states=3))
        bench = Testbench.from_scenario(scenario)
        assert bench.name == "s"
        assert bench.controller.name == "s"
        assert bench.completer.config.wait_states == 3

    def test_steps_exceed_max_cycles(self):
        scenario = ScenarioConfig(steps=[StepConfig(cycles=5)], max_cycles=3)
        with pytest.raises(RuntimeError, match="exceed max_cycles"):
            Testbench.from_scenario(scenario).run_scenario(scenario)

    def test_check_expected(self, testbench, write_bead_sequence):
        testbench.run_sequence(write_bead_sequence)
        scenario = ScenarioConfig(expected_write_address=2, expected_read_address=5)
        results = testbench.check_expected(scenario)
        assert results["write_address"] == (2, 2, True)
        assert results["read_address"] == (5, 1, False)

    def test_check_expected_empty(self, testbench):
        assert testbench.check_expected(ScenarioConfig()) == {}


class TestTrace:
    """Test trace accessors and output."""

    @pytest.fixture
    def trace(self, testbench, write_bead_sequence):
        return testbench.run_sequence(write_bead_sequence)

    def test_accessors(self, trace):
        assert len(trace) == 7
        assert trace.input("start") == [False, True] + [False] * 5
        assert trace.output("select") == [False, False] + [True] * 4 + [False]
        assert trace[1].phase is Phase.IDLE

    def test_completed_transfers(self, trace):
        (done,) = trace.completed_transfers()
        assert done.is_write is True
        assert done.address == 1
        assert done.write_data == 0xBEAD
        assert done.error is False

    def test_format_table(self, trace):
        lines = trace.format_table().splitlines()
        assert len(lines) == 2 + 7
        assert "SETUP" in lines[4]
        assert lines[4].endswith("wait")

    def test_empty_trace_final_registers(self):
        assert Testbench().trace.final_registers is None

    def test_save(self, trace):
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "trace.yaml"
            trace.save(path)
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        assert data["trace"]["cycles"] == 7
        record = data["trace"]["records"][2]
        assert record["phase"] == "SETUP"
        assert record["next_phase"] == "ACCESS"
        assert record["outputs"]["write_data"] == 0xBEAD
