"""
Per-cycle simulation trace.

A Trace records, for every clock cycle, the controller inputs, the
outputs presented during the cycle and the registers before and after
the clock edge.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Dict, Any, Iterator, Optional
from pathlib import Path
import yaml

from ..core.signals import (
    Phase,
    ControllerInputs,
    ControllerOutputs,
    ControllerRegisters,
)


@dataclass
class TraceRecord:
    """One clock cycle of a simulation."""
    cycle: int
    inputs: ControllerInputs
    outputs: ControllerOutputs
    before: ControllerRegisters
    after: ControllerRegisters
    label: str = ""

    @property
    def phase(self) -> Phase:
        """Phase during this cycle."""
        return self.before.phase

    @property
    def completes_transfer(self) -> bool:
        """Check if a transfer completes on this cycle's edge."""
        return (
            not self.inputs.reset
            and self.before.phase is Phase.ACCESS
            and self.inputs.ready
        )

    @property
    def enters_setup(self) -> bool:
        """Check if this cycle's edge moves the controller into Setup."""
        return not self.inputs.reset and self.after.phase is Phase.SETUP

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cycle": self.cycle,
            "label": self.label,
            "phase": self.before.phase.name,
            "next_phase": self.after.phase.name,
            "inputs": self.inputs.to_dict(),
            "outputs": self.outputs.to_dict(),
            "registers": self.after.to_dict(),
        }


@dataclass
class CompletedTransfer:
    """A transfer as observed on the controller's outputs."""
    cycle: int
    is_write: bool
    address: int
    write_data: int
    read_data: int
    error: bool


@dataclass
class Trace:
    """Ordered list of TraceRecord with signal accessors."""
    name: str = "trace"
    records: List[TraceRecord] = field(default_factory=list)

    def append(self, record: TraceRecord) -> None:
        self.records.append(record)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[TraceRecord]:
        return iter(self.records)

    def __getitem__(self, index: int) -> TraceRecord:
        return self.records[index]

    @property
    def final_registers(self) -> Optional[ControllerRegisters]:
        """Registers after the last recorded edge."""
        return self.records[-1].after if self.records else None

    def phases(self) -> List[Phase]:
        """Phase during each cycle."""
        return [r.before.phase for r in self.records]

    def output(self, name: str) -> List[Any]:
        """Values of one output signal per cycle."""
        return [getattr(r.outputs, name) for r in self.records]

    def input(self, name: str) -> List[Any]:
        """Values of one input signal per cycle."""
        return [getattr(r.inputs, name) for r in self.records]

    def register(self, name: str) -> List[Any]:
        """Values of one register after each cycle's edge."""
        return [getattr(r.after, name) for r in self.records]

    def completed_transfers(self) -> List[CompletedTransfer]:
        """All transfers completed during the trace."""
        return [
            CompletedTransfer(
                cycle=r.cycle,
                is_write=r.before.direction_latch,
                address=r.outputs.address,
                write_data=r.outputs.write_data,
                read_data=r.outputs.read_data,
                error=r.outputs.error,
            )
            for r in self.records if r.completes_transfer
        ]

    # =========================================================================
    # Output
    # =========================================================================

    def format_table(self) -> str:
        """Format the trace as a fixed-width text table."""
        header = (
            f"{'cyc':>4} {'phase':<6} {'rst':>3} {'st':>2} {'chk':>3} {'rdy':>3} "
            f"{'sel':>3} {'en':>2} {'dir':>3} {'addr':>10} {'wdata':>10} "
            f"{'rdata':>10} {'err':>3}  label"
        )
        lines = [header, "-" * len(header)]
        for r in self.records:
            i, o = r.inputs, r.outputs
            lines.append(
                f"{r.cycle:>4} {r.phase.name:<6} {int(i.reset):>3} {int(i.start):>2} "
                f"{int(i.check):>3} {int(i.ready):>3} {int(o.select):>3} "
                f"{int(o.enable):>2} {int(o.direction):>3} 0x{o.address:08X} "
                f"0x{o.write_data:08X} 0x{o.read_data:08X} {int(o.error):>3}  {r.label}"
            )
        return "\n".join(lines)

    def print_table(self) -> None:
        """Print the trace table."""
        print(self.format_table())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trace": {
                "name": self.name,
                "cycles": len(self.records),
                "records": [r.to_dict() for r in self.records],
            }
        }

    def save(self, path: str | Path) -> None:
        """Save trace to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
