"""Plugin descriptors: name, version, and the schema fragment a plugin owns.

Descriptors are frozen pydantic models. The schema document is checked
against its JSON Schema meta-schema when the descriptor is built, so a
registered plugin can never carry a schema that fails at validation time.

Example:
    descriptor = PluginDescriptor.from_dict({
        "name": "anticensorship",
        "version": "0.0.0.15",
        "schema": {"type": "object", "required": ["anticensorship"]},
    })
"""

import copy
import re
from typing import Any, Self

from jsonschema import Draft202012Validator, SchemaError, validators
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pacconf.contracts.errors import PacconfError
from pacconf.plugins.versions import normalize_version

# Plugin names become top-level keys, so they cannot contain dots
_PLUGIN_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")


class PluginConfigError(PacconfError):
    """Raised when a plugin descriptor document is invalid."""


class PluginDescriptor(BaseModel):
    """A named, versioned configuration module."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    name: str = Field(description="Top-level section name the plugin owns")
    version: str = Field(description="Dotted-decimal version token")
    schema_document: dict[str, Any] = Field(
        alias="schema",
        description="JSON Schema validated against the whole merged view",
    )
    schema_url: str | None = Field(
        default=None,
        alias="schemaUrl",
        description="Where the schema is published; fetching it is the caller's job",
    )
    required: bool = Field(
        default=True,
        description="Whether the merged view must declare this plugin",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not _PLUGIN_NAME_PATTERN.match(v):
            raise ValueError(
                f"plugin name '{v}' must start with a letter or underscore and "
                "contain only letters, digits, '_' or '-'"
            )
        return v

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        if normalize_version(v) is None:
            raise ValueError(f"version {v!r} is not a dotted-decimal token like '0.0.0.15'")
        return v.strip()

    @field_validator("schema_document")
    @classmethod
    def validate_schema_document(cls, v: dict[str, Any]) -> dict[str, Any]:
        validator_cls = validators.validator_for(v, default=Draft202012Validator)
        try:
            validator_cls.check_schema(v)
        except SchemaError as e:
            raise ValueError(f"invalid JSON Schema: {e.message}") from e
        # Private copy: the model is frozen, the dict inside must not be shared
        return copy.deepcopy(v)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create a descriptor with a clear error on validation failure.

        Raises:
            PluginConfigError: If the document is invalid
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise PluginConfigError(f"Invalid plugin descriptor: {e}") from e

    def envelope_entry(self) -> dict[str, Any]:
        """The ``plugins.<name>`` entry advertising this plugin."""
        entry: dict[str, Any] = {"version": self.version}
        if self.schema_url is not None:
            entry["schemaUrl"] = self.schema_url
        return entry
