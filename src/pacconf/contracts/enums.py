"""Kinds, states, and policies shared across subsystem boundaries."""

from enum import Enum


class ValueKind(str, Enum):
    """Kind of a JSON value as seen by the merge engine.

    Two values are merge-compatible only when their kinds are equal.
    LIST is a kind of its own: lists are replaced wholesale, never merged
    element by element.

    Uses (str, Enum) so kinds render readably in error messages.
    """

    BOOL = "bool"
    STRING = "string"
    NUMBER = "number"
    MAPPING = "mapping"
    LIST = "list"
    NULL = "null"


class StoreState(str, Enum):
    """Freshness of a ConfigStore's merged view.

    CLEAN: last merged view is known valid and may be served as-is
    DIRTY: overlay or default changed since the last successful refresh
    """

    CLEAN = "clean"
    DIRTY = "dirty"


class ValidationPolicy(str, Enum):
    """When a ConfigStore re-validates after a mutation.

    LAZY: on the next read
    EAGER: inside the mutating call itself
    """

    LAZY = "lazy"
    EAGER = "eager"


class LogFormat(str, Enum):
    """Rendering of structured log events."""

    CONSOLE = "console"
    JSON = "json"
