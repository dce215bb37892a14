"""
Shared pytest fixtures and configuration for reactfn tests.
"""

import inspect

import pytest

from reactfn import Graph, _reset_global_graph


@pytest.fixture(autouse=True)
def reset_global_graph():
    """Reset the global graph before each test to prevent state leakage."""
    _reset_global_graph()


@pytest.fixture
def graph():
    """Provide a fresh Graph instance for tests that need it."""
    return Graph()


class CallCounter:
    """Wraps a function and records every call's arguments."""

    def __init__(self, fn):
        self.fn = fn
        self.calls = []
        self.__name__ = getattr(fn, "__name__", "counted")
        self.__signature__ = inspect.signature(fn)

    def __call__(self, *args):
        self.calls.append(args)
        return self.fn(*args)

    @property
    def count(self):
        return len(self.calls)


@pytest.fixture
def counted():
    """Factory turning a function into a call-counting callable."""
    return CallCounter
