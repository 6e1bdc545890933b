"""
Shared pytest fixtures for transfer controller tests.

This module provides common fixtures for creating controllers,
completers, testbenches and stimulus used across unit and
integration tests.
"""

import pytest
from typing import List

from apb_model.config import ControllerConfig, CompleterConfig
from apb_model.core import (
    Phase,
    ControllerInputs,
    ControllerOutputs,
    TransferController,
)
from apb_model.testbench import Completer, Testbench, StimulusSequence


# ==============================================================================
# Configuration Fixtures
# ==============================================================================

@pytest.fixture
def controller_config() -> ControllerConfig:
    """Default controller configuration for testing."""
    return ControllerConfig()


@pytest.fixture
def completer_config() -> CompleterConfig:
    """Completer with two wait states and a small memory."""
    return CompleterConfig(wait_states=2, memory_words=64)


# ==============================================================================
# Component Fixtures
# ==============================================================================

@pytest.fixture
def controller(controller_config) -> TransferController:
    """Fresh controller in its reset state."""
    return TransferController(controller_config, name="DUT")


@pytest.fixture
def completer(completer_config) -> Completer:
    """Completer backed by a 64-word memory."""
    return Completer(completer_config)


@pytest.fixture
def testbench(controller) -> Testbench:
    """Testbench without a completer (stimulus drives ready)."""
    return Testbench(controller, name="tb")


@pytest.fixture
def testbench_with_completer(controller, completer) -> Testbench:
    """Testbench with the two-wait-state completer."""
    return Testbench(controller, completer, name="tb_completer")


# ==============================================================================
# Stimulus Fixtures
# ==============================================================================

@pytest.fixture
def write_bead_sequence() -> StimulusSequence:
    """Reset, write 0xBEAD, Setup plus two Access cycles with ready low, ready, idle."""
    return (
        StimulusSequence()
        .reset()
        .request_write(0xBEAD)
        .wait(3)
        .complete()
        .idle()
    )


@pytest.fixture
def read_sequence() -> StimulusSequence:
    """Reset, read, Setup plus two Access cycles with ready low, 0xCAFEF00D, idle."""
    return (
        StimulusSequence()
        .reset()
        .request_read()
        .wait(3)
        .complete(read_data=0xCAFEF00D)
        .idle()
    )


@pytest.fixture
def clock():
    """Apply a list of inputs to a controller; returns the outputs per cycle."""
    def _clock(
        controller: TransferController,
        inputs: List[ControllerInputs],
    ) -> List[ControllerOutputs]:
        return [controller.tick(i) for i in inputs]
    return _clock


@pytest.fixture
def drive_to_access():
    """Move a controller from Idle into Access for a write or read."""
    def _drive(controller: TransferController, write: bool, data: int = 0) -> None:
        assert controller.phase is Phase.IDLE
        controller.tick(ControllerInputs(start=True, check=write, write_data=data))
        controller.tick(ControllerInputs(check=write, write_data=data))
        assert controller.phase is Phase.ACCESS
    return _drive
