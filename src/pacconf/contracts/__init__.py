"""Shared contracts for cross-boundary data types.

Enums, result records, and the error taxonomy used by the core engine,
the plugin registry, and the CLI all live here.

Import pattern:
    from pacconf.contracts import ValueKind, SchemaViolation, TypeMismatchError
"""

from pacconf.contracts.enums import (
    LogFormat,
    StoreState,
    ValidationPolicy,
    ValueKind,
)
from pacconf.contracts.errors import (
    DuplicatePluginError,
    InvalidPathError,
    MergeInputError,
    PacconfError,
    PathConflictError,
    PathNotFoundError,
    PayloadMarkerError,
    SchemaValidationError,
    TypeMismatchError,
    VersionIncompatibleError,
    format_error,
)
from pacconf.contracts.results import SchemaViolation, VersionMismatch

__all__ = [
    # enums
    "LogFormat",
    "StoreState",
    "ValidationPolicy",
    "ValueKind",
    # errors
    "DuplicatePluginError",
    "InvalidPathError",
    "MergeInputError",
    "PacconfError",
    "PathConflictError",
    "PathNotFoundError",
    "PayloadMarkerError",
    "SchemaValidationError",
    "TypeMismatchError",
    "VersionIncompatibleError",
    "format_error",
    # results
    "SchemaViolation",
    "VersionMismatch",
]
