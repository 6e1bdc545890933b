"""
APB transfer controller behavior model.

Cycle-accurate model of a three-phase peripheral-bus transfer controller
with its testbench, property checker and waveform rendering.
"""

from .config import (
    SetupDirection,
    TransferDirection,
    ControllerConfig,
    CompleterConfig,
    StepConfig,
    TransferSpec,
    ScenarioConfig,
    load_scenario_config,
)
from .core import (
    Phase,
    ControllerInputs,
    ControllerOutputs,
    ControllerRegisters,
    TransferController,
)

__version__ = "0.1.0"

__all__ = [
    "SetupDirection",
    "TransferDirection",
    "ControllerConfig",
    "CompleterConfig",
    "StepConfig",
    "TransferSpec",
    "ScenarioConfig",
    "load_scenario_config",
    "Phase",
    "ControllerInputs",
    "ControllerOutputs",
    "ControllerRegisters",
    "TransferController",
]
