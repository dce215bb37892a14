"""
Sentinels and exceptions shared by every reactfn component.

Sentinels:
    GAP: placed in a bind call to leave a slot unbound. The slot then behaves
         as a normal parameter that callers fill positionally.
    ABSENT: handed to an unbound slot that received neither a transient
            argument nor a declared default.

Both are singletons compared by identity, never by equality, so no bound
argument can be mistaken for them.
"""


# ============================================================================
# SENTINEL VALUES
# ============================================================================


class _Gap:
    """Sentinel for 'leave this slot unbound' in bind calls."""

    _instance = None

    __slots__ = ()

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "GAP"

    def __reduce__(self):
        return (_Gap, ())


class _Absent:
    """Sentinel for a parameter that received no value at all."""

    _instance = None

    __slots__ = ()

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "ABSENT"

    def __bool__(self):
        return False

    def __reduce__(self):
        return (_Absent, ())


GAP = _Gap()
ABSENT = _Absent()


# ============================================================================
# EXCEPTIONS
# ============================================================================


class ReactiveError(Exception):
    """Base class for errors raised by the kernel."""

    pass


class ArityError(ReactiveError, TypeError):
    """Raised when a bind call supplies more arguments than there are slots."""

    pass


class CyclicDependencyError(ReactiveError):
    """Raised when a binding would make a node depend on itself."""

    pass


class ComputationError(ReactiveError):
    """Raised when a wrapped computation fails during a reactive read."""

    def __init__(self, message: str, node=None):
        super().__init__(message)
        self.node = node
