"""
reactfn - Reactive Functions over an Incremental Dependency Graph

Wrap plain functions into nodes, wire nodes together by binding arguments,
and read them: only what changed upstream is recomputed, each node at most
once per change.

Example:
    b = state(2)
    c = state(1)
    a = wrap(lambda x, y: x + y).bind_to(b, c)

    a()      # 3
    b(5)
    a()      # 6
    c(10)
    a()      # 15
"""

from .base import (
    ABSENT,
    GAP,
    ArityError,
    ComputationError,
    CyclicDependencyError,
    ReactiveError,
)
from .binder import Slot, SlotKind
from .evaluator import affected, invalidate, refresh, resolve
from .graph import (
    Graph,
    GraphSettings,
    _reset_global_graph,
    configure,
    get_global_graph,
)
from .node import Node, wrap
from .state import StateCell, state

__version__ = "0.1.0"

__all__ = [
    # Graph elements
    "Node",
    "StateCell",
    "Slot",
    "SlotKind",
    # Factory functions
    "wrap",
    "state",
    # Sentinels
    "GAP",
    "ABSENT",
    # Evaluation
    "resolve",
    "invalidate",
    "refresh",
    "affected",
    # Configuration
    "Graph",
    "GraphSettings",
    "configure",
    "get_global_graph",
    # Exceptions
    "ReactiveError",
    "ArityError",
    "CyclicDependencyError",
    "ComputationError",
    # Testing utilities (internal use)
    "_reset_global_graph",
]
