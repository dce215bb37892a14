"""
Node - a wrapped computation participating in the dependency graph.

A node keeps the function, an optional context (the receiver handed to the
function as its first argument), one slot per positional parameter, the last
computed value and a stale flag.

Calling conventions:
    node()          reactive read, recomputes only what is stale
    node(*args)     no slot bound: plain call of the wrapped function,
                    nothing cached
                    some slots unbound: args fill the gaps left to right for
                    this call only; the result is cached
                    every slot bound: args are ignored, reactive read

Ownership:
    Slots hold their dependencies strongly. The reverse index (dependents)
    is a WeakSet, so a node that the application drops disappears from the
    graph without explicit cleanup.
"""

import logging
import weakref
from typing import Any, Callable, List, Optional, Tuple

from .base import ABSENT
from .binder import (
    UNBOUND_SLOT,
    Bindable,
    Parameters,
    Slot,
    SlotKind,
    bind,
    dependencies_of,
    discover_parameters,
    unbind,
)
from .evaluator import invalidate, resolve
from .graph import Graph, get_global_graph

_NO_CONTEXT = object()


class Node(Bindable):
    """
    Node: a function lifted into the dependency graph.

    State:
        _fn: wrapped computation
        _context: receiver passed as first argument, or _NO_CONTEXT
        _params: positional parameter layout (arity, defaults, variadic)
        _slots: list of Slot, one per parameter position
        _cached: last computed value (ABSENT before the first computation)
        _stale: True until computed and whenever an input changed since
        _dependents: WeakSet of nodes bound to this one
        _graph: settings and counters
    """

    __slots__ = (
        "_fn",
        "_context",
        "_params",
        "_slots",
        "_cached",
        "_stale",
        "_dependents",
        "_graph",
        "__weakref__",
    )

    def __init__(
        self,
        fn: Callable,
        context: Any = _NO_CONTEXT,
        *,
        arity: Optional[int] = None,
        graph: Optional[Graph] = None,
    ):
        if not callable(fn):
            raise TypeError(f"Cannot wrap non-callable {fn!r}")
        self._fn = fn
        self._context = context
        self._params: Parameters = discover_parameters(
            fn, has_context=context is not _NO_CONTEXT, arity=arity
        )
        self._slots: List[Slot] = [UNBOUND_SLOT] * self._params.arity
        self._cached: Any = ABSENT
        self._stale = True
        self._dependents: "weakref.WeakSet[Node]" = weakref.WeakSet()
        self._graph = graph or get_global_graph()

    # ========================================================================
    # CALLING
    # ========================================================================

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        if not self.is_bound:
            if args or kwargs:
                return self._invoke(args, kwargs)
            return resolve(self)

        if kwargs:
            raise TypeError(
                f"{self!r} is bound; keyword arguments are only accepted "
                f"by unbound nodes"
            )

        if args:
            if self.has_gaps:
                return resolve(self, fill=args)
            logging.debug(f"Ignoring arguments passed to fully bound {self.name}")

        return resolve(self)

    def _invoke(self, values, kwargs=None) -> Any:
        kwargs = kwargs or {}
        if self._context is _NO_CONTEXT:
            return self._fn(*values, **kwargs)
        return self._fn(self._context, *values, **kwargs)

    @property
    def value(self) -> Any:
        """Reactive read (same as calling with no arguments)."""
        return resolve(self)

    def get(self) -> Any:
        """Explicit getter (alias for value property)."""
        return self.value

    # ========================================================================
    # BINDING
    # ========================================================================

    def bind_to(self, *args: Any) -> "Node":
        """
        Bind parameter slots positionally and return this node.

        Each argument is GAP (leave the slot unbound), a node or state cell
        (bind to its value), or anything else (bind as a literal). Positions
        not supplied keep their current binding. The node and everything
        downstream of it become stale.

        Raises:
            ArityError: more positions than the function has parameters
            CyclicDependencyError: the binding would make the node depend on
                itself
        """
        bind(self, args)
        return self

    def unbind(self, *positions: int) -> "Node":
        """Return the given slots (all of them when none given) to unbound."""
        unbind(self, positions)
        return self

    def dispose(self) -> None:
        """
        Detach this node from its dependencies and drop its cache.

        Dependents bound to this node stay bound and become stale; they read
        the node's plain-function result from then on.
        """
        if self._slots:
            unbind(self)
        self._cached = ABSENT
        invalidate(self, include_self=True)

    # ========================================================================
    # INTROSPECTION
    # ========================================================================

    @property
    def name(self) -> str:
        return getattr(self._fn, "__name__", None) or repr(self._fn)

    @property
    def context(self) -> Any:
        return None if self._context is _NO_CONTEXT else self._context

    @property
    def arity(self) -> int:
        return self._params.arity

    @property
    def slots(self) -> Tuple[Slot, ...]:
        return tuple(self._slots)

    @property
    def is_bound(self) -> bool:
        return any(slot.kind is not SlotKind.UNBOUND for slot in self._slots)

    @property
    def has_gaps(self) -> bool:
        return any(slot.kind is SlotKind.UNBOUND for slot in self._slots)

    @property
    def is_stale(self) -> bool:
        return self._stale

    @property
    def cached_value(self) -> Any:
        """Last computed value without triggering evaluation."""
        return self._cached

    @property
    def dependencies(self) -> List["Node"]:
        return dependencies_of(self)

    @property
    def dependents(self) -> List["Node"]:
        return list(self._dependents)

    @property
    def graph(self) -> Graph:
        return self._graph

    def __repr__(self) -> str:
        state = "stale" if self._stale else f"cached={self._cached!r}"
        return f"Node({self.name}, {state})"


def wrap(
    fn: Optional[Callable] = None,
    context: Any = _NO_CONTEXT,
    *,
    arity: Optional[int] = None,
    graph: Optional[Graph] = None,
):
    """
    Wrap ``fn`` into a Node.

    Usable directly or as a decorator, with or without options:

        total = wrap(lambda price, qty: price * qty).bind_to(price, 3)

        @wrap
        def greet(name):
            return f"Hello, {name}"

        @wrap(arity=2)
        def pair(*items):
            return items

    Args:
        fn: computation to wrap
        context: receiver passed as the first argument on every call; the
            receiver parameter does not count as a slot
        arity: number of slots, overriding signature discovery
        graph: graph the node joins (defaults to the global graph)
    """
    if fn is None:

        def decorator(func: Callable) -> Node:
            return Node(func, context, arity=arity, graph=graph)

        return decorator

    return Node(fn, context, arity=arity, graph=graph)
