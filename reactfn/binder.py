"""
Binder - attaches dependencies and literals to a node's parameter slots.

A slot is one positional parameter of the wrapped computation. It is always
in one of three states:

    UNBOUND   filled per call (or by its declared default, or ABSENT)
    LITERAL   a constant captured at bind time
    BOUND     the current value of another node

Binding is split in two phases so that a rejected call leaves the node
untouched:

    plan_binding()   validates arity and cycles, returns {position: Slot}
    apply_binding()  installs the slots, maintains the weak dependents index
                     and marks the node and everything downstream stale
"""

import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .base import ABSENT, GAP, ArityError, CyclicDependencyError
from .util.cycle_detector import find_path


class SlotKind(Enum):
    """State of a single parameter slot."""

    UNBOUND = "unbound"
    LITERAL = "literal"
    BOUND = "bound"


@dataclass(frozen=True)
class Slot:
    """Immutable binding of one parameter position."""

    kind: SlotKind
    value: Any = None

    @property
    def is_bound(self) -> bool:
        return self.kind is SlotKind.BOUND

    def __repr__(self) -> str:
        if self.kind is SlotKind.UNBOUND:
            return "Slot(unbound)"
        if self.kind is SlotKind.LITERAL:
            return f"Slot(literal={self.value!r})"
        return f"Slot(bound={self.value!r})"


UNBOUND_SLOT = Slot(SlotKind.UNBOUND)


class Bindable:
    """
    Marker base for anything that can sit in a BOUND slot.

    Nodes and state cells derive from it. Any other bind argument is taken as
    a literal.
    """

    __slots__ = ()


# ============================================================================
# ARITY DISCOVERY
# ============================================================================


@dataclass(frozen=True)
class Parameters:
    """Positional parameter layout of a computation."""

    arity: int
    variadic: bool
    defaults: Tuple[Any, ...]

    def default(self, position: int) -> Any:
        if position < len(self.defaults):
            return self.defaults[position]
        return ABSENT


def discover_parameters(
    fn: Callable, has_context: bool = False, arity: Optional[int] = None
) -> Parameters:
    """
    Read the positional parameters of ``fn``.

    With a context the first positional parameter is the receiver and does
    not count as a slot. An explicit ``arity`` overrides discovery; functions
    without an introspectable signature are treated as variadic with no
    fixed slots.
    """
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        if arity is not None:
            return Parameters(arity, False, (ABSENT,) * arity)
        return Parameters(0, True, ())

    positional = []
    variadic = False
    for param in signature.parameters.values():
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            positional.append(param)
        elif param.kind is param.VAR_POSITIONAL:
            variadic = True

    if has_context:
        if positional:
            positional = positional[1:]
        elif not variadic:
            raise TypeError(
                f"{fn!r} takes no positional parameter to receive its context"
            )

    defaults = tuple(
        ABSENT if p.default is inspect.Parameter.empty else p.default
        for p in positional
    )

    if arity is not None:
        if arity < len(defaults):
            defaults = defaults[:arity]
        else:
            defaults = defaults + (ABSENT,) * (arity - len(defaults))
        return Parameters(arity, False, defaults)

    return Parameters(len(positional), variadic, defaults)


# ============================================================================
# BINDING
# ============================================================================


def dependencies_of(node) -> List[Any]:
    """Bound upstream nodes of ``node`` in slot order, without repeats."""
    seen = set()
    result = []
    for slot in node._slots:
        if slot.kind is SlotKind.BOUND and slot.value not in seen:
            seen.add(slot.value)
            result.append(slot.value)
    return result


def _slot_for(argument: Any) -> Slot:
    if argument is GAP:
        return UNBOUND_SLOT
    if isinstance(argument, Bindable):
        return Slot(SlotKind.BOUND, argument)
    return Slot(SlotKind.LITERAL, argument)


def plan_binding(owner, args: Iterable[Any]) -> Dict[int, Slot]:
    """
    Validate a bind call and return the slots it would install.

    Raises:
        ArityError: a non-gap argument lands past the last slot and the
            owner's graph is strict about arity
        CyclicDependencyError: binding a dependency that already (directly
            or transitively) depends on ``owner``
    """
    params = owner._params
    settings = owner._graph.settings
    plan: Dict[int, Slot] = {}

    for position, argument in enumerate(args):
        if position >= params.arity and not params.variadic:
            if argument is GAP:
                continue
            if settings.strict_arity:
                raise ArityError(
                    f"{owner!r} takes {params.arity} argument(s) but a value was "
                    f"bound at position {position}"
                )
            logging.warning(
                f"Dropping bind argument {argument!r} at position {position} "
                f"of {owner!r}: it takes {params.arity} argument(s)"
            )
            continue
        plan[position] = _slot_for(argument)

    if settings.detect_cycles:
        for slot in plan.values():
            if slot.kind is SlotKind.BOUND:
                _check_cycle(owner, slot.value)

    return plan


def _check_cycle(owner, dependency) -> None:
    # Binding owner to dependency adds the edge dependency -> owner; it closes
    # a cycle when owner is already upstream of dependency.
    if dependency is not owner and not owner._dependents:
        return
    path = find_path(dependency, owner, dependencies_of)
    if path is not None:
        chain = " → ".join(repr(n) for n in reversed(path))
        raise CyclicDependencyError(
            f"Binding {owner!r} to {dependency!r} would create a cycle: "
            f"{chain} → {owner!r}"
        )


def apply_binding(owner, plan: Dict[int, Slot]) -> None:
    """Install planned slots, update dependents and invalidate downstream."""
    if not plan:
        return

    from .evaluator import invalidate

    before = set(dependencies_of(owner))

    slots = owner._slots
    for position in sorted(plan):
        while len(slots) <= position:
            slots.append(UNBOUND_SLOT)
        slots[position] = plan[position]

    # Variadic nodes drop trailing unbound slots past the declared arity
    while len(slots) > owner._params.arity and slots[-1].kind is SlotKind.UNBOUND:
        slots.pop()

    after = set(dependencies_of(owner))
    for dependency in before - after:
        dependency._dependents.discard(owner)
    for dependency in after - before:
        dependency._dependents.add(owner)

    invalidate(owner, include_self=True)


def bind(owner, args: Iterable[Any]) -> None:
    apply_binding(owner, plan_binding(owner, args))


def unbind(owner, positions: Iterable[int] = ()) -> None:
    """Return the given slots (all slots when none given) to UNBOUND."""
    positions = list(positions) or range(len(owner._slots))
    plan = {}
    for position in positions:
        if not 0 <= position < len(owner._slots):
            raise IndexError(f"{owner!r} has no slot {position}")
        plan[position] = UNBOUND_SLOT
    apply_binding(owner, plan)
