"""Typed error taxonomy for the overlay engine.

Path and merge errors are local to the failing call. Construction-time
validation errors are fatal for the store being built. Post-construction
validation errors are recoverable: the overlay keeps the attempted change.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pacconf.contracts.enums import ValueKind
    from pacconf.contracts.results import SchemaViolation, VersionMismatch


class PacconfError(Exception):
    """Base class for all typed, caller-facing errors."""


class InvalidPathError(PacconfError, ValueError):
    """Raised when a path string is malformed."""

    def __init__(self, path: object, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid path {path!r}: {reason}")


class PathNotFoundError(PacconfError, KeyError):
    """Raised when a strict read misses.

    Attributes:
        path: Full dotted path that was requested
        missing: Dotted prefix at which the walk stopped
    """

    def __init__(self, path: str, missing: str) -> None:
        self.path = path
        self.missing = missing
        super().__init__(f"Path '{path}' not found (missing '{missing}')")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class PathConflictError(PacconfError):
    """Raised when a walk tries to descend into a non-mapping value."""

    def __init__(self, path: str, blocked_at: str, value: Any) -> None:
        self.path = path
        self.blocked_at = blocked_at
        self.value = value
        super().__init__(
            f"Cannot descend into '{blocked_at}' while resolving '{path}': "
            f"it holds {type(value).__name__} {value!r}, not a mapping"
        )


class TypeMismatchError(PacconfError, TypeError):
    """Raised when an overlay value changes the kind of a default value.

    Carries both values for diagnostics.
    """

    def __init__(
        self,
        path: str,
        default_value: Any,
        custom_value: Any,
        default_kind: ValueKind,
        custom_kind: ValueKind,
    ) -> None:
        self.path = path
        self.default_value = default_value
        self.custom_value = custom_value
        self.default_kind = default_kind
        self.custom_kind = custom_kind
        where = path or "<root>"
        super().__init__(
            f"Type mismatch at '{where}': default is {default_kind.value} "
            f"{default_value!r}, custom is {custom_kind.value} {custom_value!r}"
        )


class MergeInputError(PacconfError):
    """Raised when merge is called with neither side defined.

    This is an internal contract violation, never a user error.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f"merge called at '{path or '<root>'}' with neither default nor custom defined"
        )


class DuplicatePluginError(PacconfError, ValueError):
    """Raised when a plugin name is registered twice."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Duplicate plugin name: '{name}'")


class VersionIncompatibleError(PacconfError):
    """Raised when required plugins declare unusable versions.

    Attributes:
        mismatches: Every required plugin whose declaration failed
    """

    def __init__(self, mismatches: list[VersionMismatch]) -> None:
        self.mismatches = list(mismatches)
        details = "; ".join(str(m) for m in self.mismatches)
        super().__init__(f"Incompatible plugin versions: {details}")


class SchemaValidationError(PacconfError):
    """Raised when a tree fails the root or plugin schemas.

    Attributes:
        errors: Every violation found, across all schemas
    """

    def __init__(self, errors: list[SchemaViolation]) -> None:
        self.errors = list(errors)
        noun = "violation" if len(self.errors) == 1 else "violations"
        lines = [f"{len(self.errors)} schema {noun}:"]
        lines.extend(f"  - {e}" for e in self.errors)
        super().__init__("\n".join(lines))


class PayloadMarkerError(PacconfError):
    """Raised when the embedded payload cannot be located in a host script."""


def format_error(e: BaseException) -> str:
    """Return a short, uniform operator-facing message like 'TypeMismatchError: detail'."""
    name = e.__class__.__name__
    msg = str(e).strip()
    return f"{name}: {msg}" if msg else name
