"""Core APB components: signals, transfer controller."""

from .signals import (
    Phase,
    ControllerInputs,
    ControllerOutputs,
    ControllerRegisters,
)
from .controller import (
    ControllerStats,
    TransferController,
    next_phase,
    next_registers,
    compute_outputs,
    is_completing,
)

__all__ = [
    # Signals
    "Phase",
    "ControllerInputs",
    "ControllerOutputs",
    "ControllerRegisters",
    # Controller
    "ControllerStats",
    "TransferController",
    "next_phase",
    "next_registers",
    "compute_outputs",
    "is_completing",
]
