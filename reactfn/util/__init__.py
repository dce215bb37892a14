"""Graph algorithms shared by the binder and the evaluator."""

from .cycle_detector import find_path, topological_sort, would_create_cycle

__all__ = ["find_path", "topological_sort", "would_create_cycle"]
