"""
State cells - settable sources of the dependency graph.

A cell is a node with no slots. Reading it never computes anything; writing
it stores the value and marks everything downstream stale. There is no
equality short-circuit: writing the same value again still invalidates.
"""

import weakref
from typing import Any, Optional

from .binder import Parameters, plan_binding
from .evaluator import invalidate
from .graph import Graph, get_global_graph
from .node import Node

_NO_PARAMETERS = Parameters(0, False, ())


class StateCell(Node):
    """
    A source node holding externally settable state.

    Usage:
        count = state(0)
        count()      # 0
        count(5)     # set, returns 5
        count.value  # 5
    """

    __slots__ = ()

    def __init__(self, initial_value: Any = None, *, graph: Optional[Graph] = None):
        self._fn = None
        self._context = None
        self._params = _NO_PARAMETERS
        self._slots = []
        self._cached = initial_value
        self._stale = False
        self._dependents = weakref.WeakSet()
        self._graph = graph or get_global_graph()

    def __call__(self, *args: Any) -> Any:
        if not args:
            return self._cached
        if len(args) > 1:
            raise TypeError(
                f"{self!r} takes at most one argument ({len(args)} given)"
            )
        return self.set(args[0])

    @property
    def value(self) -> Any:
        return self._cached

    @value.setter
    def value(self, new_value: Any) -> None:
        self.set(new_value)

    def set(self, new_value: Any) -> Any:
        """Store ``new_value`` and mark every transitive dependent stale."""
        self._cached = new_value
        invalidate(self)
        return new_value

    def _invoke(self, values, kwargs=None) -> Any:
        return self._cached

    def bind_to(self, *args: Any) -> "StateCell":
        """Cells have no slots; only gaps are accepted."""
        plan_binding(self, args)
        return self

    def unbind(self, *positions: int) -> "StateCell":
        if positions:
            raise IndexError(f"{self!r} has no slot {positions[0]}")
        return self

    def dispose(self) -> None:
        """Cells have nothing upstream; dependents are invalidated."""
        invalidate(self)

    @property
    def name(self) -> str:
        return "state"

    def __repr__(self) -> str:
        return f"StateCell({self._cached!r})"


def state(initial_value: Any = None, *, graph: Optional[Graph] = None) -> StateCell:
    """Create a state cell holding ``initial_value``."""
    return StateCell(initial_value, graph=graph)
