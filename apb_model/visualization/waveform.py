"""
Waveform (timing diagram) visualization for recorded traces.

Single-bit signals are drawn as step traces, multi-bit buses as value
segments labelled in hex, and the FSM phase as a labelled lane.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple, List, TYPE_CHECKING

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure

if TYPE_CHECKING:
    from ..testbench.trace import Trace


# (lane label, source, attribute, is_bus)
DEFAULT_SIGNALS: List[Tuple[str, str, str, bool]] = [
    ("reset", "inputs", "reset", False),
    ("start", "inputs", "start", False),
    ("check", "inputs", "check", False),
    ("ready", "inputs", "ready", False),
    ("select", "outputs", "select", False),
    ("enable", "outputs", "enable", False),
    ("direction", "outputs", "direction", False),
    ("address", "outputs", "address", True),
    ("write_data", "outputs", "write_data", True),
    ("read_data", "outputs", "read_data", True),
    ("error", "outputs", "error", False),
]


@dataclass
class WaveformConfig:
    """Configuration for waveform rendering."""
    title: str = "Transfer Controller Waveform"
    signals: List[Tuple[str, str, str, bool]] = field(
        default_factory=lambda: list(DEFAULT_SIGNALS)
    )
    show_phase: bool = True
    lane_height: float = 0.6
    line_color: str = 'steelblue'
    bus_color: str = 'darkorange'
    phase_colors: Tuple[str, str, str] = ('lightgray', 'khaki', 'lightgreen')
    width_per_cycle: float = 0.5
    min_width: float = 8.0
    show_grid: bool = True
    grid_alpha: float = 0.3


def _signal_values(trace: "Trace", source: str, attr: str) -> np.ndarray:
    return np.array([int(getattr(getattr(r, source), attr)) for r in trace], dtype=np.int64)


def _bus_segments(values: np.ndarray) -> List[Tuple[int, int, int]]:
    """Split a bus into (start, end, value) runs of constant value."""
    if values.size == 0:
        return []
    changes = np.flatnonzero(np.diff(values)) + 1
    starts = np.concatenate(([0], changes))
    ends = np.concatenate((changes, [values.size]))
    return [(int(s), int(e), int(values[s])) for s, e in zip(starts, ends)]


def plot_waveform(
    trace: "Trace",
    config: Optional[WaveformConfig] = None,
    save_path: Optional[str] = None,
) -> Figure:
    """
    Plot a timing diagram of a trace.

    Args:
        trace: Recorded simulation trace.
        config: Waveform configuration.
        save_path: Optional path to save the figure.

    Returns:
        Matplotlib Figure object.
    """
    if config is None:
        config = WaveformConfig()

    lanes = len(config.signals) + (1 if config.show_phase else 0)
    width = max(config.min_width, len(trace) * config.width_per_cycle)
    fig, ax = plt.subplots(figsize=(width, 1 + lanes * config.lane_height))

    if len(trace) == 0:
        ax.text(0.5, 0.5, "No trace data available", ha='center', va='center',
                transform=ax.transAxes)
        ax.set_title(config.title)
        return fig

    cycles = np.arange(len(trace) + 1)
    labels = []
    lane = lanes - 1

    if config.show_phase:
        phases = np.array([int(r.phase) for r in trace], dtype=np.int64)
        for start, end, value in _bus_segments(phases):
            ax.add_patch(plt.Rectangle(
                (start, lane + 0.1), end - start, 0.8,
                facecolor=config.phase_colors[value], edgecolor='black', linewidth=0.5,
            ))
            ax.text((start + end) / 2, lane + 0.5, trace[start].phase.name,
                    ha='center', va='center', fontsize=7)
        labels.append((lane, "phase"))
        lane -= 1

    for label, source, attr, is_bus in config.signals:
        values = _signal_values(trace, source, attr)
        if is_bus:
            for start, end, value in _bus_segments(values):
                ax.plot([start, end], [lane + 0.1, lane + 0.1], color=config.bus_color)
                ax.plot([start, end], [lane + 0.9, lane + 0.9], color=config.bus_color)
                ax.plot([start, start], [lane + 0.1, lane + 0.9], color=config.bus_color)
                ax.text((start + end) / 2, lane + 0.5, f"{value:X}",
                        ha='center', va='center', fontsize=6)
        else:
            levels = np.append(values, values[-1]) * 0.8 + lane + 0.1
            ax.step(cycles, levels, where='post', color=config.line_color,
                    linewidth=1.2)
        labels.append((lane, label))
        lane -= 1

    ax.set_yticks([pos + 0.5 for pos, _ in labels])
    ax.set_yticklabels([name for _, name in labels])
    ax.set_xlim(0, len(trace))
    ax.set_ylim(0, lanes)
    ax.set_xlabel("Cycle")
    ax.set_title(config.title, fontsize=14, fontweight='bold')

    if config.show_grid:
        ax.set_xticks(cycles)
        ax.grid(True, axis='x', alpha=config.grid_alpha)

    plt.tight_layout()

    if save_path:
        from pathlib import Path
        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig
