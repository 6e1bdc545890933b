"""
Transfer controller signal definitions.

Groups the controller's signal-level interface:
- Phase (FSM state encoding)
- ControllerInputs (sampled every clock edge)
- ControllerOutputs (combinational, evaluated every cycle)
- ControllerRegisters (everything held across clock edges)
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from enum import IntEnum
from typing import Dict, Any, TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import ControllerConfig


class Phase(IntEnum):
    """Transfer controller FSM state."""
    IDLE = 0     # No transfer in progress
    SETUP = 1    # Address/direction/data presented, one cycle
    ACCESS = 2   # Transfer executing, extended by wait states

    @property
    def is_active(self) -> bool:
        """Check if a transfer is in progress (select asserted)."""
        return self is not Phase.IDLE


# =============================================================================
# Inputs
# =============================================================================

@dataclass(frozen=True)
class ControllerInputs:
    """
    Controller inputs for one clock cycle.

    Attributes:
        reset: Synchronous active-high reset.
        ready: Completer signals transfer completion during Access.
        start: Requests a new transfer.
        check: Direction selector (True = write, False = read).
        write_data: Write payload.
        write_flag: External write-direction register.
        read_data: Completer read data bus.
        slverr: Completer error indication.
    """
    reset: bool = False
    ready: bool = False
    start: bool = False
    check: bool = False
    write_data: int = 0
    write_flag: bool = False
    read_data: int = 0
    slverr: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# =============================================================================
# Outputs
# =============================================================================

@dataclass(frozen=True)
class ControllerOutputs:
    """
    Controller outputs for one clock cycle.

    Attributes:
        select: Asserted for Setup and Access.
        enable: Asserted only in Access.
        direction: Transfer direction presented to the completer.
        address: Selected address counter value.
        write_data: Write payload for write transfers, else 0.
        read_data: Captured read payload.
        error: Completer error, asserted on the completing cycle only.
    """
    select: bool = False
    enable: bool = False
    direction: bool = False
    address: int = 0
    write_data: int = 0
    read_data: int = 0
    error: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def __repr__(self) -> str:
        return (
            f"ControllerOutputs(sel={int(self.select)}, en={int(self.enable)}, "
            f"dir={int(self.direction)}, addr=0x{self.address:08X}, "
            f"wdata=0x{self.write_data:08X}, rdata=0x{self.read_data:08X}, "
            f"err={int(self.error)})"
        )


# =============================================================================
# Registers
# =============================================================================

@dataclass(frozen=True)
class ControllerRegisters:
    """
    Controller state held across clock edges.

    address_hold and write_data_hold keep the values chosen in Setup so
    Access presents them unchanged; read_data_hold keeps the last captured
    read payload.
    """
    phase: Phase = Phase.IDLE
    direction_latch: bool = False
    write_address: int = 1
    read_address: int = 1
    address_hold: int = 0
    write_data_hold: int = 0
    read_data_hold: int = 0

    @classmethod
    def reset_value(cls, config: "ControllerConfig") -> "ControllerRegisters":
        """Register contents after reset."""
        return cls(
            write_address=config.reset_address,
            read_address=config.reset_address,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["phase"] = self.phase.name
        return data

    def __repr__(self) -> str:
        return (
            f"ControllerRegisters({self.phase.name}, "
            f"latch={'W' if self.direction_latch else 'R'}, "
            f"waddr=0x{self.write_address:08X}, raddr=0x{self.read_address:08X})"
        )
