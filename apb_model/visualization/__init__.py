"""
Trace Visualization Module.

- plot_waveform: timing diagram of a recorded trace
"""

from .waveform import (
    DEFAULT_SIGNALS,
    WaveformConfig,
    plot_waveform,
)

__all__ = [
    "DEFAULT_SIGNALS",
    "WaveformConfig",
    "plot_waveform",
]
