"""
Testbench models around the transfer controller.

- Memory: word memory backing the completer
- Completer: responder with wait states and error map
- StimulusSequence: scripted per-cycle stimulus
- Requester: transaction-level request queue
- Testbench: per-cycle harness producing a Trace
"""

from .memory import (
    MemoryConfig,
    Memory,
    MemoryStats,
)
from .completer import (
    CompleterResponse,
    CompleterAccess,
    CompleterStats,
    Completer,
)
from .stimulus import (
    StimulusStep,
    StimulusSequence,
    random_sequence,
)
from .trace import (
    TraceRecord,
    CompletedTransfer,
    Trace,
)
from .requester import (
    TransferRequest,
    TransferResult,
    RequesterStats,
    Requester,
)
from .harness import Testbench

__all__ = [
    # Memory
    "MemoryConfig",
    "Memory",
    "MemoryStats",
    # Completer
    "CompleterResponse",
    "CompleterAccess",
    "CompleterStats",
    "Completer",
    # Stimulus
    "StimulusStep",
    "StimulusSequence",
    "random_sequence",
    # Trace
    "TraceRecord",
    "CompletedTransfer",
    "Trace",
    # Requester
    "TransferRequest",
    "TransferResult",
    "RequesterStats",
    "Requester",
    # Harness
    "Testbench",
]
