"""
APB Completer (responder) model.

Answers the transfer controller's Access phase with a configurable
number of wait states, serves reads from and commits writes to a word
memory, and flags errors for unmapped or configured error addresses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, List

from ..config import CompleterConfig
from ..core.signals import ControllerOutputs
from .memory import Memory, MemoryConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompleterResponse:
    """Completer-driven signals for one cycle."""
    ready: bool = False
    read_data: int = 0
    slverr: bool = False


@dataclass
class CompleterAccess:
    """Record of one completed access as seen by the completer."""
    cycle: int
    is_write: bool
    address: int
    data: int
    error: bool = False
    wait_cycles: int = 0


@dataclass
class CompleterStats:
    """Completer statistics."""
    writes: int = 0
    reads: int = 0
    errors: int = 0
    wait_cycles: int = 0


class Completer:
    """
    Single-beat APB completer.

    respond() is combinational: it looks only at the controller's
    select/enable/direction/address outputs for the cycle. commit() is
    called once per clock edge with the same outputs.
    """

    def __init__(
        self,
        config: Optional[CompleterConfig] = None,
        memory: Optional[Memory] = None,
        data_width: int = 32,
        name: str = "",
    ):
        """
        Initialize completer.

        Args:
            config: Completer configuration (defaults if not provided).
            memory: Backing memory (created from config if not provided).
            data_width: Data bus width in bits.
            name: Completer name for identification.
        """
        self.config = config or CompleterConfig()
        self.config.validate()
        self.name = name or "Completer"
        self.memory = memory or Memory(
            MemoryConfig(
                words=self.config.memory_words,
                base_address=self.config.base_address,
                data_width=data_width,
            ),
            name=f"{self.name}.memory",
        )

        self._error_addresses = set(self.config.error_addresses)
        self._access_cycles = 0   # Access cycles seen for the current transfer
        self._cycle = 0

        self.accesses: List[CompleterAccess] = []
        self.stats = CompleterStats()

    def _is_error(self, address: int) -> bool:
        return address in self._error_addresses or not self.memory.contains(address)

    def respond(self, outputs: ControllerOutputs) -> CompleterResponse:
        """
        Drive ready, read data and error for the current cycle.

        Args:
            outputs: Controller outputs this cycle.

        Returns:
            Completer response.
        """
        if not (outputs.select and outputs.enable):
            return CompleterResponse()
        if self._access_cycles < self.config.wait_states:
            return CompleterResponse()

        error = self._is_error(outputs.address)
        read_data = 0
        if not outputs.direction and not error:
            read_data = self.memory.get_contents(outputs.address, 1)[0]
        return CompleterResponse(ready=True, read_data=read_data, slverr=error)

    def commit(self, outputs: ControllerOutputs, response: CompleterResponse) -> None:
        """
        Apply one clock edge.

        Args:
            outputs: Controller outputs this cycle.
            response: What the completer drove this cycle.
        """
        cycle = self._cycle
        self._cycle += 1

        if not (outputs.select and outputs.enable):
            self._access_cycles = 0
            return

        if not response.ready:
            self._access_cycles += 1
            self.stats.wait_cycles += 1
            return

        if response.slverr:
            self.stats.errors += 1
            data = outputs.write_data if outputs.direction else 0
            logger.warning(
                "%s cycle %d: error response at 0x%08X", self.name, cycle, outputs.address
            )
        elif outputs.direction:
            self.memory.write(outputs.address, outputs.write_data)
            data = outputs.write_data
        else:
            data = self.memory.read(outputs.address)

        if outputs.direction:
            self.stats.writes += 1
        else:
            self.stats.reads += 1

        self.accesses.append(CompleterAccess(
            cycle=cycle,
            is_write=outputs.direction,
            address=outputs.address,
            data=data,
            error=response.slverr,
            wait_cycles=self._access_cycles,
        ))
        logger.debug(
            "%s cycle %d: %s 0x%08X = 0x%08X",
            self.name, cycle, "write" if outputs.direction else "read",
            outputs.address, data,
        )
        self._access_cycles = 0

    def reset(self) -> None:
        """Reset handshake state (memory contents are kept)."""
        self._access_cycles = 0

    @property
    def writes(self) -> List[CompleterAccess]:
        return [a for a in self.accesses if a.is_write]

    @property
    def reads(self) -> List[CompleterAccess]:
        return [a for a in self.accesses if not a.is_write]
