"""
Evaluator - stack-safe pull resolution and push invalidation.

Read path (pull):
    A stale node is refreshed by walking its bound slots with an explicit
    stack. Every node computed during one pass is recorded in a memo keyed by
    node identity, so an upstream node shared by several paths (diamond) is
    computed once and reused. Nodes that are not stale are cache hits and are
    never expanded.

Write path (push):
    Setting a state cell walks the weak dependents index breadth-first and
    only flips stale flags. Recomputation waits for the next read.

Invariant maintained by both paths: a stale node's dependents are stale.
The invalidation walk relies on it to stop at nodes that were already stale.
"""

import logging
from collections import deque
from typing import Any, Dict, List, Optional, Sequence

from .base import ComputationError, CyclicDependencyError, ReactiveError
from .binder import SlotKind, dependencies_of
from .util.cycle_detector import topological_sort


# ============================================================================
# READ PATH
# ============================================================================


def resolve(node, fill: Optional[Sequence[Any]] = None) -> Any:
    """
    Return the up-to-date value of ``node``, recomputing what is stale.

    Args:
        node: node to read
        fill: transient values for the node's unbound slots, left to right.
            When given, ``node`` itself is always recomputed with them.

    Raises:
        ComputationError: a computation raised; the failing node and its
            dependents stay stale
        CyclicDependencyError: the node depends on itself
    """
    if fill is None and not node._stale:
        return node._cached

    graph = node._graph
    graph.passes += 1

    memo: Dict[Any, Any] = {}
    expanded = set()
    stack = [node]

    while stack:
        current = stack[-1]

        if current in memo:
            stack.pop()
            continue

        forced = current is node and fill is not None
        if not current._stale and not forced:
            memo[current] = current._cached
            stack.pop()
            continue

        if current not in expanded:
            expanded.add(current)
            pending = [
                dep
                for dep in dependencies_of(current)
                if dep._stale and dep not in memo
            ]
            if pending:
                for dep in pending:
                    # Expanded but unfinished nodes are exactly the ancestors
                    # of the stack top.
                    if dep in expanded:
                        raise CyclicDependencyError(
                            f"Circular dependency detected involving {dep!r}"
                        )
                stack.extend(reversed(pending))
                continue

        stack.pop()
        values = _slot_values(current, fill if forced else None)
        memo[current] = _compute(current, values)

    if fill is not None:
        # The cache now reflects transient inputs; downstream must re-read it.
        invalidate(node)

    return memo[node]


def _slot_values(node, fill: Optional[Sequence[Any]]) -> List[Any]:
    transient = iter(fill or ())
    params = node._params
    values = []

    for position, slot in enumerate(node._slots):
        if slot.kind is SlotKind.BOUND:
            values.append(slot.value._cached)
        elif slot.kind is SlotKind.LITERAL:
            values.append(slot.value)
        else:
            values.append(next(transient, params.default(position)))

    leftover = sum(1 for _ in transient)
    if leftover:
        logging.debug(f"Ignoring {leftover} surplus argument(s) passed to {node.name}")

    return values


def _compute(node, values: List[Any]) -> Any:
    try:
        result = node._invoke(values)
    except ReactiveError:
        raise
    except Exception as e:
        raise ComputationError(f"Error in {node!r}: {e}", node=node) from e

    node._cached = result
    node._stale = False
    node._graph.recomputations += 1
    logging.debug(f"Recomputed {node.name}")
    return result


def refresh(*nodes) -> None:
    """Eagerly resolve every given node."""
    for node in nodes:
        resolve(node)


# ============================================================================
# WRITE PATH
# ============================================================================


def invalidate(node, include_self: bool = False) -> int:
    """
    Mark every node downstream of ``node`` stale.

    Args:
        node: origin of the change
        include_self: mark ``node`` itself stale as well (used after a
            rebinding; never for state cells)

    Returns:
        Number of nodes whose flag flipped from fresh to stale
    """
    marked = 0
    if include_self and not node._stale:
        node._stale = True
        marked += 1

    visited = {node}
    queue = deque([node])

    while queue:
        current = queue.popleft()
        for dependent in list(current._dependents):
            if dependent in visited:
                continue
            visited.add(dependent)
            if dependent._stale:
                continue
            dependent._stale = True
            marked += 1
            queue.append(dependent)

    node._graph.invalidations += marked
    if marked:
        logging.debug(f"Invalidated {marked} node(s) downstream of {node.name}")
    return marked


def affected(source) -> List[Any]:
    """
    Return every node transitively depending on ``source``.

    The result is in topological order: each node appears after all of its
    dependencies that are themselves in the result.
    """
    seen = {source}
    found = []
    queue = deque([source])

    while queue:
        current = queue.popleft()
        for dependent in list(current._dependents):
            if dependent not in seen:
                seen.add(dependent)
                found.append(dependent)
                queue.append(dependent)

    return topological_sort(found, dependencies_of)
