"""Verification components: trace property checker, golden data replay."""

from .properties import (
    PropertyResult,
    CheckReport,
    TraceChecker,
    check_trace,
)
from .golden import (
    ReadCheck,
    GoldenReport,
    GoldenChecker,
)

__all__ = [
    # Property checker
    "PropertyResult",
    "CheckReport",
    "TraceChecker",
    "check_trace",
    # Golden data
    "ReadCheck",
    "GoldenReport",
    "GoldenChecker",
]
