"""JSON Schema validation of merged views.

The root schema checks the envelope: a ``plugins`` object whose entries each
carry a string ``version``. Every registered plugin schema is then run
against the same merged view in its own independent pass. Plugins coexist
because the root allows additional top-level properties; no schema
composition keywords tie the fragments together.

Errors from every pass are collected, never fail-fast, so a caller can
report every problem at once.
"""

import copy
from collections.abc import Iterable, Mapping
from typing import Any

from jsonschema import Draft202012Validator, validators

from pacconf.contracts.errors import SchemaValidationError
from pacconf.contracts.results import SchemaViolation
from pacconf.core.logging import get_logger
from pacconf.plugins.registry import PluginRegistry

logger = get_logger(__name__)

ROOT_SCHEMA_NAME = "root"

ROOT_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": ROOT_SCHEMA_NAME,
    "type": "object",
    "required": ["plugins"],
    "additionalProperties": True,
    "properties": {
        "plugins": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["version"],
                "properties": {
                    "version": {"type": "string", "minLength": 1},
                    "schemaUrl": {"type": "string", "format": "uri"},
                },
            },
        },
    },
}


def _to_pointer(parts: Iterable[Any]) -> str:
    """RFC 6901 JSON pointer for a jsonschema error path."""
    escaped = [str(p).replace("~", "~0").replace("/", "~1") for p in parts]
    return "".join(f"/{p}" for p in escaped)


def _compile(schema: Mapping[str, Any]) -> Any:
    validator_cls = validators.validator_for(schema, default=Draft202012Validator)
    return validator_cls(schema, format_checker=validator_cls.FORMAT_CHECKER)


class SchemaValidator:
    """Validates merged views against the root schema and every plugin schema.

    Holds no state beyond its constructor arguments. Build one per store (or
    share one); there is no process-wide instance.
    """

    def __init__(
        self,
        registry: PluginRegistry,
        root_schema: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialize validator.

        Args:
            registry: Source of plugin schemas, read on every validate() call
            root_schema: Envelope schema; defaults to ROOT_SCHEMA

        Raises:
            jsonschema.SchemaError: If root_schema is not a valid schema
        """
        schema = copy.deepcopy(dict(root_schema if root_schema is not None else ROOT_SCHEMA))
        validators.validator_for(schema, default=Draft202012Validator).check_schema(schema)
        self._registry = registry
        self._root_schema = schema

    @property
    def registry(self) -> PluginRegistry:
        return self._registry

    def _run(self, schema_name: str, schema: Mapping[str, Any], instance: Any) -> list[SchemaViolation]:
        violations = [
            SchemaViolation(
                schema_name=schema_name,
                pointer=_to_pointer(error.absolute_path),
                message=error.message,
            )
            for error in _compile(schema).iter_errors(instance)
        ]
        return sorted(violations)

    def validate(self, merged_view: Any) -> list[SchemaViolation]:
        """Validate against the root schema, then each plugin schema.

        Never mutates ``merged_view``. Calling twice on an unchanged view
        returns equal lists.

        Returns:
            All violations (empty if valid)
        """
        errors = self._run(ROOT_SCHEMA_NAME, self._root_schema, merged_view)
        for descriptor in self._registry.descriptors():
            errors.extend(self._run(descriptor.name, descriptor.schema_document, merged_view))
        if errors:
            logger.info("validation failed", violations=len(errors))
        return errors

    def check(self, merged_view: Any) -> None:
        """Validate and raise if anything is wrong.

        Raises:
            SchemaValidationError: Carrying every violation
        """
        errors = self.validate(merged_view)
        if errors:
            raise SchemaValidationError(errors)
