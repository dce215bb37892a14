"""
Graph context - settings and counters shared by a family of nodes.

Every node belongs to exactly one Graph. Nodes created without an explicit
graph join the global one, which is created lazily on first use.

Implementation:
    - GraphSettings: bind-time policies (cycle detection, arity strictness)
    - Graph: settings holder plus recomputation/invalidation counters
    - get_global_graph(): lazy singleton pattern
    - _reset_global_graph(): fresh state for tests
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class GraphSettings:
    """
    Policies applied when nodes are bound.

    Attributes:
        detect_cycles: reject a binding that would close a cycle
        strict_arity: raise ArityError on surplus bind arguments instead of
            dropping them with a warning
    """

    detect_cycles: bool = True
    strict_arity: bool = True


class Graph:
    """
    Owner of settings and evaluation counters for its nodes.

    The graph keeps no references to nodes. Topology lives entirely in the
    nodes' slots (strong, upstream) and dependents (weak, downstream), so a
    node is collected as soon as the application drops it.
    """

    def __init__(self, settings: Optional[GraphSettings] = None):
        self.settings = settings or GraphSettings()
        self.recomputations = 0
        self.invalidations = 0
        self.passes = 0

    def configure(self, **changes: Any) -> GraphSettings:
        """Replace individual settings, returning the new settings object."""
        known = {f.name for f in fields(GraphSettings)}
        unknown = set(changes) - known
        if unknown:
            raise TypeError(f"Unknown graph setting(s): {', '.join(sorted(unknown))}")
        self.settings = replace(self.settings, **changes)
        return self.settings

    def settle(self, source) -> List[Any]:
        """
        Eagerly recompute every node affected by ``source``.

        Returns the refreshed nodes in topological order. Reads after a
        settle are cache hits until the next change.
        """
        from .evaluator import affected, refresh

        order = affected(source)
        refresh(*order)
        return order

    def stats(self) -> Dict[str, int]:
        return {
            "recomputations": self.recomputations,
            "invalidations": self.invalidations,
            "passes": self.passes,
        }

    def reset_stats(self) -> None:
        self.recomputations = 0
        self.invalidations = 0
        self.passes = 0

    def __repr__(self) -> str:
        return (
            f"Graph(recomputations={self.recomputations}, "
            f"invalidations={self.invalidations})"
        )


_global_graph = None


def get_global_graph() -> Graph:
    """
    Get or create the global graph instance.

    Lazy singleton pattern: creates on first access, reuses thereafter.
    Testing can reset via _reset_global_graph().
    """
    global _global_graph
    if _global_graph is None:
        _global_graph = Graph()
    return _global_graph


def _reset_global_graph() -> None:
    """
    Reset the global graph for testing purposes.

    Nodes created before the reset keep pointing at the old graph.
    """
    global _global_graph
    _global_graph = None


def configure(**changes: Any) -> GraphSettings:
    """Change settings of the global graph."""
    return get_global_graph().configure(**changes)
