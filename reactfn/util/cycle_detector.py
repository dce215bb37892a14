"""
reactfn Cycle Detection - Iterative Reachability and Topological Sort
=====================================================================

Graph algorithms over an implicit graph: callers pass a ``neighbors``
function instead of materializing edges, so the same code runs over a node's
upstream slots, its weak dependents index, or plain dictionaries in tests.

Both walks use an explicit stack or queue. Dependency chains tens of
thousands of nodes long are common in practice and must not touch the
interpreter's recursion limit.

Usage:
    upstream = {"c": ["b"], "b": ["a"], "a": []}

    # Would making "a" depend on "c" close a loop?
    would_create_cycle("c", "a", lambda n: upstream[n])   # True

    topological_sort(["c", "a", "b"], lambda n: upstream[n])  # ["a", "b", "c"]
"""

from collections import deque
from typing import Callable, Dict, Hashable, Iterable, List, Optional, TypeVar

T = TypeVar("T", bound=Hashable)


def find_path(
    start: T, target: T, neighbors: Callable[[T], Iterable[T]]
) -> Optional[List[T]]:
    """
    Find a path from ``start`` to ``target`` following ``neighbors``.

    Depth-first with an explicit stack and a visited set, so every node is
    expanded at most once.

    Returns:
        The path as a list beginning with ``start`` and ending with
        ``target``, or None when ``target`` is unreachable
    """
    if start == target:
        return [start]

    parents: Dict[T, Optional[T]] = {start: None}
    stack = [start]

    while stack:
        current = stack.pop()
        for neighbor in neighbors(current):
            if neighbor in parents:
                continue
            parents[neighbor] = current
            if neighbor == target:
                path = [neighbor]
                while parents[path[-1]] is not None:
                    path.append(parents[path[-1]])
                path.reverse()
                return path
            stack.append(neighbor)

    return None


def would_create_cycle(
    from_node: T, to_node: T, neighbors: Callable[[T], Iterable[T]]
) -> bool:
    """
    Check whether adding the edge ``from_node -> to_node`` closes a cycle.

    ``neighbors`` must follow edges in the same direction as the new edge.
    The edge closes a cycle exactly when ``from_node`` is already reachable
    from ``to_node``.
    """
    return find_path(to_node, from_node, neighbors) is not None


def topological_sort(
    nodes: Iterable[T], predecessors: Callable[[T], Iterable[T]]
) -> List[T]:
    """
    Order ``nodes`` so every node comes after its predecessors (Kahn).

    Only edges between members of ``nodes`` are considered. Ties keep the
    input order.

    Raises:
        ValueError: If the subgraph contains a cycle
    """
    members = list(dict.fromkeys(nodes))
    if not members:
        return []

    index = set(members)
    in_degree: Dict[T, int] = {}
    successors: Dict[T, List[T]] = {node: [] for node in members}

    for node in members:
        preds = {p for p in predecessors(node) if p in index}
        in_degree[node] = len(preds)
        for pred in preds:
            successors[pred].append(node)

    queue = deque(node for node in members if in_degree[node] == 0)
    result = []

    while queue:
        current = queue.popleft()
        result.append(current)
        for successor in successors[current]:
            in_degree[successor] -= 1
            if in_degree[successor] == 0:
                queue.append(successor)

    if len(result) != len(members):
        raise ValueError("Graph contains cycles")

    return result
