"""
Tests for the Completer model.

Tests cover:
1. Response gating on select/enable
2. Wait-state counting
3. Memory writes and reads
4. Error responses
"""

import logging

import pytest

from apb_model.config import CompleterConfig
from apb_model.core import ControllerOutputs
from apb_model.testbench import Completer, CompleterResponse


def access(address: int, write: bool, data: int = 0) -> ControllerOutputs:
    return ControllerOutputs(
        select=True, enable=True, direction=write, address=address, write_data=data,
    )


def setup(address: int, write: bool, data: int = 0) -> ControllerOutputs:
    return ControllerOutputs(
        select=True, enable=False, direction=write, address=address, write_data=data,
    )


def run_access(completer: Completer, outputs: ControllerOutputs, limit: int = 20):
    """Clock Access cycles until the completer answers ready."""
    completer.commit(setup(outputs.address, outputs.direction, outputs.write_data),
                     CompleterResponse())
    for _ in range(limit):
        response = completer.respond(outputs)
        completer.commit(outputs, response)
        if response.ready:
            return response
    raise AssertionError("completer never became ready")


class TestCompleterResponse:
    """Test combinational response."""

    def test_idle_and_setup_get_no_response(self):
        completer = Completer()
        assert completer.respond(ControllerOutputs()) == CompleterResponse()
        assert completer.respond(setup(1, True)) == CompleterResponse()

    def test_zero_wait_states_ready_immediately(self):
        completer = Completer(CompleterConfig(wait_states=0))
        assert completer.respond(access(1, True, 5)).ready is True

    def test_wait_states(self, completer):
        """Two wait states: ready on the third Access cycle."""
        outputs = access(1, True, 5)
        completer.commit(setup(1, True, 5), CompleterResponse())
        readies = []
        for _ in range(3):
            response = completer.respond(outputs)
            completer.commit(outputs, response)
            readies.append(response.ready)
        assert readies == [False, False, True]
        assert completer.stats.wait_cycles == 2
        assert completer.accesses[0].wait_cycles == 2


class TestCompleterMemory:
    """Test memory side effects."""

    def test_write_commits_to_memory(self, completer):
        run_access(completer, access(1, True, 0xBEAD))
        assert completer.memory.get_contents(1, 1) == [0xBEAD]
        assert completer.stats.writes == 1
        assert len(completer.writes) == 1

    def test_read_returns_memory_word(self, completer):
        completer.memory.write(4, 0xCAFEF00D)
        response = run_access(completer, access(4, False))
        assert response.read_data == 0xCAFEF00D
        assert response.slverr is False
        assert completer.reads[0].data == 0xCAFEF00D

    def test_custom_memory(self):
        from apb_model.testbench import Memory, MemoryConfig
        memory = Memory(MemoryConfig(words=8))
        completer = Completer(memory=memory)
        assert completer.memory is memory


class TestCompleterErrors:
    """Test error responses."""

    def test_configured_error_address(self, caplog):
        completer = Completer(CompleterConfig(error_addresses=[2]))
        with caplog.at_level(logging.WARNING, logger="apb_model.testbench.completer"):
            response = run_access(completer, access(2, True, 0x99))
        assert response.slverr is True
        assert completer.memory.used_words == 0
        assert completer.stats.errors == 1
        assert completer.accesses[0].error is True
        assert "error response" in caplog.text

    def test_unmapped_address(self):
        completer = Completer(CompleterConfig(memory_words=4))
        response = run_access(completer, access(10, False))
        assert response.slverr is True
        assert response.read_data == 0

    def test_invalid_config(self):
        with pytest.raises(ValueError):
            Completer(CompleterConfig(wait_states=-1))

    def test_reset_clears_wait_count(self, completer):
        outputs = access(1, True)
        completer.commit(outputs, completer.respond(outputs))
        completer.reset()
        completer.commit(outputs, completer.respond(outputs))
        assert completer.respond(outputs).ready is False
