"""Validation outcomes.

These types answer: "What is wrong with a merged view?"

SchemaViolation is a record, not an exception. Validators return lists of
them; SchemaValidationError carries a list when a caller wants to raise.
"""

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class SchemaViolation:
    """A single schema violation.

    Ordering is (schema_name, pointer, message) so batches sort
    deterministically.
    """

    schema_name: str
    pointer: str
    message: str

    def __str__(self) -> str:
        return f"[{self.schema_name}] {self.pointer or '/'}: {self.message}"

    def to_dict(self) -> dict[str, str]:
        """Serialize with the wire names used in reports."""
        return {
            "schemaTitle": self.schema_name,
            "jsonPointer": self.pointer,
            "message": self.message,
        }


@dataclass(frozen=True)
class VersionMismatch:
    """A required plugin whose declared version cannot be used."""

    plugin: str
    required: str
    declared: object | None

    def __str__(self) -> str:
        if self.declared is None:
            return f"plugin '{self.plugin}' requires version {self.required!r} but none is declared"
        return (
            f"plugin '{self.plugin}' requires version {self.required!r}, "
            f"merged view declares {self.declared!r}"
        )
