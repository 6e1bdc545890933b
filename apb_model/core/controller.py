"""
APB Transfer Controller.

Cycle-accurate model of a three-phase (IDLE -> SETUP -> ACCESS) transfer
sequencer with a latched direction flag and independent read/write
address counters.

The model is split Mealy-style into pure functions evaluated from the
pre-tick state:
- next_phase(): FSM transition function
- next_registers(): next value of every register (phase, latch, counters)
- compute_outputs(): combinational outputs from state and live inputs

TransferController holds the registers and commits next_registers() once
per tick.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Dict, Tuple

from ..config import ControllerConfig, SetupDirection
from .signals import Phase, ControllerInputs, ControllerOutputs, ControllerRegisters

logger = logging.getLogger(__name__)


# =============================================================================
# Transition / Output Functions
# =============================================================================

def next_phase(phase: Phase, inputs: ControllerInputs) -> Phase:
    """
    FSM transition function (reset not included).

    Args:
        phase: Current phase.
        inputs: Inputs sampled this cycle.

    Returns:
        Phase after the clock edge.
    """
    if phase is Phase.IDLE:
        return Phase.SETUP if inputs.start else Phase.IDLE
    if phase is Phase.SETUP:
        return Phase.ACCESS
    # ACCESS: hold until the completer is ready
    if not inputs.ready:
        return Phase.ACCESS
    return Phase.SETUP if inputs.start else Phase.IDLE


def is_completing(registers: ControllerRegisters, inputs: ControllerInputs) -> bool:
    """Check if the transfer in progress completes on this clock edge."""
    return registers.phase is Phase.ACCESS and inputs.ready


def _setup_address_data(
    registers: ControllerRegisters,
    inputs: ControllerInputs,
    config: ControllerConfig,
) -> Tuple[int, int]:
    """Address and write payload presented during Setup (live selector)."""
    if inputs.check:
        return registers.write_address, inputs.write_data & config.data_mask
    return registers.read_address, 0


def next_registers(
    registers: ControllerRegisters,
    inputs: ControllerInputs,
    config: ControllerConfig,
) -> ControllerRegisters:
    """
    Compute register values after the clock edge.

    Everything is derived from the pre-tick registers and inputs. Reset
    takes priority over every other update.

    Args:
        registers: Registers before the edge.
        inputs: Inputs sampled this cycle.
        config: Controller configuration.

    Returns:
        Registers after the edge.
    """
    if inputs.reset:
        return ControllerRegisters.reset_value(config)

    phase = next_phase(registers.phase, inputs)
    latch = registers.direction_latch
    write_address = registers.write_address
    read_address = registers.read_address
    address_hold = registers.address_hold
    write_data_hold = registers.write_data_hold
    read_data_hold = registers.read_data_hold

    # Direction is committed on every edge entering Setup, including
    # back-to-back Access -> Setup on the same edge as the counter update.
    if phase is Phase.SETUP:
        latch = inputs.check

    if registers.phase is Phase.SETUP:
        address_hold, write_data_hold = _setup_address_data(registers, inputs, config)
    elif is_completing(registers, inputs):
        if registers.direction_latch:
            write_address = (write_address + 1) & config.addr_mask
        else:
            read_address = (read_address + 1) & config.addr_mask
            read_data_hold = inputs.read_data & config.data_mask

    return ControllerRegisters(
        phase=phase,
        direction_latch=latch,
        write_address=write_address,
        read_address=read_address,
        address_hold=address_hold,
        write_data_hold=write_data_hold,
        read_data_hold=read_data_hold,
    )


def compute_outputs(
    registers: ControllerRegisters,
    inputs: ControllerInputs,
    config: ControllerConfig,
) -> ControllerOutputs:
    """
    Combinational output function.

    Args:
        registers: Current (pre-tick) registers.
        inputs: Live inputs this cycle.
        config: Controller configuration.

    Returns:
        Outputs presented during this cycle.
    """
    phase = registers.phase

    if phase is Phase.IDLE:
        return ControllerOutputs(read_data=registers.read_data_hold)

    if phase is Phase.SETUP:
        address, write_data = _setup_address_data(registers, inputs, config)
        if config.setup_direction is SetupDirection.WRITE_FLAG:
            direction = inputs.write_flag
        else:
            direction = inputs.check
        return ControllerOutputs(
            select=True,
            enable=False,
            direction=direction,
            address=address,
            write_data=write_data,
            read_data=registers.read_data_hold,
        )

    # ACCESS
    read_data = registers.read_data_hold
    if inputs.ready and not registers.direction_latch:
        read_data = inputs.read_data & config.data_mask

    return ControllerOutputs(
        select=True,
        enable=True,
        direction=registers.direction_latch,
        address=registers.address_hold,
        write_data=registers.write_data_hold,
        read_data=read_data,
        error=inputs.ready and inputs.slverr,
    )


# =============================================================================
# Controller
# =============================================================================

@dataclass
class ControllerStats:
    """Statistics for transfer controller operation."""
    cycles: int = 0
    reset_cycles: int = 0
    writes_completed: int = 0
    reads_completed: int = 0
    wait_cycles: int = 0
    error_transfers: int = 0
    back_to_back: int = 0
    total_latency: int = 0   # Setup entry to completion, in cycles

    @property
    def transfers_completed(self) -> int:
        return self.writes_completed + self.reads_completed

    @property
    def avg_latency(self) -> float:
        if self.transfers_completed == 0:
            return 0.0
        return self.total_latency / self.transfers_completed


class TransferController:
    """
    APB Transfer Controller.

    Sequences single-beat read and write transfers. Call tick() once per
    clock edge with the inputs sampled that cycle; outputs() evaluates the
    combinational outputs without advancing state.
    """

    def __init__(
        self,
        config: Optional[ControllerConfig] = None,
        name: str = "",
    ):
        """
        Initialize transfer controller.

        Args:
            config: Controller configuration (defaults if not provided).
            name: Instance name for identification.
        """
        self.config = config or ControllerConfig()
        self.config.validate()
        self.name = name or "TransferController"

        self._registers = ControllerRegisters.reset_value(self.config)
        self._transfer_start_cycle = 0

        # Statistics
        self.stats = ControllerStats()

    # =========================================================================
    # State Access
    # =========================================================================

    @property
    def registers(self) -> ControllerRegisters:
        """Current register contents."""
        return self._registers

    @property
    def phase(self) -> Phase:
        return self._registers.phase

    @property
    def direction_latch(self) -> bool:
        return self._registers.direction_latch

    @property
    def write_address(self) -> int:
        return self._registers.write_address

    @property
    def read_address(self) -> int:
        return self._registers.read_address

    @property
    def cycle(self) -> int:
        """Number of clock edges applied so far."""
        return self.stats.cycles

    @property
    def is_idle(self) -> bool:
        return self._registers.phase is Phase.IDLE

    # =========================================================================
    # Clocking
    # =========================================================================

    def outputs(self, inputs: ControllerInputs) -> ControllerOutputs:
        """Evaluate outputs for the current cycle without clocking."""
        return compute_outputs(self._registers, inputs, self.config)

    def tick(self, inputs: ControllerInputs) -> ControllerOutputs:
        """
        Apply one rising clock edge.

        Args:
            inputs: Inputs sampled this cycle.

        Returns:
            Outputs presented during the cycle (before the edge).
        """
        current = self._registers
        outputs = compute_outputs(current, inputs, self.config)
        updated = next_registers(current, inputs, self.config)

        self._update_stats(current, updated, inputs)
        self._registers = updated

        logger.debug(
            "%s cycle %d: %s -> %s %r",
            self.name, self.stats.cycles - 1,
            current.phase.name, updated.phase.name, outputs,
        )
        return outputs

    def reset(self) -> None:
        """Force the reset state without clocking (power-on)."""
        self._registers = ControllerRegisters.reset_value(self.config)
        self._transfer_start_cycle = 0

    def _update_stats(
        self,
        current: ControllerRegisters,
        updated: ControllerRegisters,
        inputs: ControllerInputs,
    ) -> None:
        """Update statistics for one clock edge."""
        cycle = self.stats.cycles
        self.stats.cycles += 1

        if inputs.reset:
            self.stats.reset_cycles += 1
            logger.debug("%s cycle %d: reset", self.name, cycle)
            return

        if current.phase is Phase.ACCESS and not inputs.ready:
            self.stats.wait_cycles += 1

        if is_completing(current, inputs):
            self.stats.total_latency += cycle + 1 - self._transfer_start_cycle
            if current.direction_latch:
                self.stats.writes_completed += 1
            else:
                self.stats.reads_completed += 1
            if inputs.slverr:
                self.stats.error_transfers += 1
                logger.warning(
                    "%s cycle %d: completer error on %s at 0x%08X",
                    self.name, cycle,
                    "write" if current.direction_latch else "read",
                    current.address_hold,
                )
            if inputs.start:
                self.stats.back_to_back += 1
            logger.debug(
                "%s cycle %d: %s complete at 0x%08X",
                self.name, cycle,
                "write" if current.direction_latch else "read",
                current.address_hold,
            )

        if updated.phase is Phase.SETUP:
            self._transfer_start_cycle = cycle + 1

    # =========================================================================
    # Reporting
    # =========================================================================

    def get_summary(self) -> Dict:
        """Get controller summary."""
        return {
            "name": self.name,
            "phase": self.phase.name,
            "cycles": self.stats.cycles,
            "writes_completed": self.stats.writes_completed,
            "reads_completed": self.stats.reads_completed,
            "wait_cycles": self.stats.wait_cycles,
            "error_transfers": self.stats.error_transfers,
            "back_to_back": self.stats.back_to_back,
            "avg_latency": self.stats.avg_latency,
            "write_address": self.write_address,
            "read_address": self.read_address,
        }

    def print_summary(self) -> None:
        """Print controller summary."""
        summary = self.get_summary()
        print("=" * 60)
        print(f"{summary['name']} Summary")
        print("=" * 60)
        print(f"Phase: {summary['phase']}")
        print(f"Cycles: {summary['cycles']}")
        print(f"Writes: {summary['writes_completed']}  Reads: {summary['reads_completed']}")
        print(f"Wait cycles: {summary['wait_cycles']}")
        print(f"Errored transfers: {summary['error_transfers']}")
        print(f"Back-to-back transfers: {summary['back_to_back']}")
        print(f"Average Latency: {summary['avg_latency']:.2f} cycles")
        print(f"Write address: 0x{summary['write_address']:08X}")
        print(f"Read address: 0x{summary['read_address']:08X}")
        print("=" * 60)

    def __repr__(self) -> str:
        return f"TransferController({self.name}, {self._registers!r})"
