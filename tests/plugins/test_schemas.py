"""Tests for root and plugin schema validation."""

from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st


def _validator(*descriptors: Any) -> Any:
    from pacconf.plugins.registry import PluginRegistry
    from pacconf.plugins.schemas import SchemaValidator

    registry = PluginRegistry()
    for descriptor in descriptors:
        registry.register(descriptor)
    return SchemaValidator(registry)


class TestToPointer:
    """Error paths become RFC 6901 pointers."""

    def test_escapes(self) -> None:
        from pacconf.plugins.schemas import _to_pointer

        assert _to_pointer(["a/b", "c~d", 0]) == "/a~1b/c~0d/0"

    def test_root(self) -> None:
        from pacconf.plugins.schemas import _to_pointer

        assert _to_pointer([]) == ""


class TestRootSchema:
    """The envelope every merged view must satisfy."""

    def test_valid_envelope(self, base_default: dict[str, Any]) -> None:
        assert _validator().validate(base_default) == []

    def test_missing_plugins_section(self) -> None:
        errors = _validator().validate({"proxies": {}})

        root_errors = [e for e in errors if e.schema_name == "root"]
        assert len(root_errors) == 1
        assert "'plugins' is a required property" in root_errors[0].message

    def test_plugin_entry_needs_string_version(self) -> None:
        view = {"plugins": {"plugins": {"version": "0.0.0.1"}, "ads": {"version": 0.15}}}
        errors = _validator().validate(view)

        assert [(e.schema_name, e.pointer) for e in errors] == [
            ("root", "/plugins/ads/version"),
        ]

    def test_schema_url_must_be_uri(self) -> None:
        view = {
            "plugins": {"plugins": {"version": "0.0.0.1", "schemaUrl": "not a uri"}},
        }
        errors = _validator().validate(view)

        assert [e.pointer for e in errors] == ["/plugins/plugins/schemaUrl"]

    def test_custom_root_schema(self, base_default: dict[str, Any]) -> None:
        from pacconf.plugins.registry import PluginRegistry
        from pacconf.plugins.schemas import SchemaValidator

        validator = SchemaValidator(
            PluginRegistry(),
            root_schema={"type": "object", "required": ["proxies"]},
        )
        errors = validator.validate(base_default)

        assert [e.schema_name for e in errors] == ["root"]

    def test_invalid_root_schema_rejected(self) -> None:
        from jsonschema import SchemaError

        from pacconf.plugins.registry import PluginRegistry
        from pacconf.plugins.schemas import SchemaValidator

        with pytest.raises(SchemaError):
            SchemaValidator(PluginRegistry(), root_schema={"type": 12})


class TestPluginSchemas:
    """Every plugin schema runs against the whole merged view."""

    def test_errors_collected_across_schemas(
        self, anticensorship_descriptor: Any, anticensorship_default: dict[str, Any]
    ) -> None:
        view = dict(anticensorship_default)
        view["anticensorship"] = {"mirrors": [1]}
        view["plugins"] = {"ads": {}}

        errors = _validator(anticensorship_descriptor).validate(view)

        assert {e.schema_name for e in errors} == {"root", "anticensorship", "plugins"}
        assert errors == sorted(errors, key=lambda e: e.schema_name != "root")

    def test_validate_is_idempotent_and_pure(
        self, anticensorship_descriptor: Any, anticensorship_default: dict[str, Any]
    ) -> None:
        from pacconf.core.merge import copy_tree

        anticensorship_default["anticensorship"]["enabled"] = "yes"
        snapshot = copy_tree(anticensorship_default)
        validator = _validator(anticensorship_descriptor)

        first = validator.validate(anticensorship_default)
        second = validator.validate(anticensorship_default)

        assert first == second
        assert len(first) == 1
        assert first[0].pointer == "/anticensorship/enabled"
        assert anticensorship_default == snapshot

    def test_check_raises_with_every_violation(self, anticensorship_descriptor: Any) -> None:
        from pacconf.contracts.errors import SchemaValidationError

        with pytest.raises(SchemaValidationError) as exc_info:
            _validator(anticensorship_descriptor).check({})

        names = {e.schema_name for e in exc_info.value.errors}
        assert names == {"root", "anticensorship", "plugins"}
        assert str(exc_info.value).startswith("3 schema violations:")

    def test_check_passes_valid_view(
        self, anticensorship_descriptor: Any, anticensorship_default: dict[str, Any]
    ) -> None:
        _validator(anticensorship_descriptor).check(anticensorship_default)


class TestValidationProperties:
    """Property tests over generated views."""

    @given(
        view=st.dictionaries(
            st.sampled_from(["plugins", "anticensorship", "proxies"]),
            st.recursive(
                st.one_of(st.none(), st.booleans(), st.integers(), st.text(max_size=5)),
                lambda children: st.dictionaries(
                    st.sampled_from(["plugins", "version", "enabled", "mirrors"]),
                    children,
                    max_size=3,
                ),
                max_leaves=10,
            ),
            max_size=3,
        )
    )
    def test_validate_is_idempotent(self, view: dict[str, Any]) -> None:
        from pacconf.core.merge import copy_tree
        from pacconf.plugins.descriptor import PluginDescriptor

        descriptor = PluginDescriptor(
            name="anticensorship",
            version="0.0.0.15",
            schema={"type": "object", "required": ["anticensorship"]},
        )
        validator = _validator(descriptor)
        snapshot = copy_tree(view)

        assert validator.validate(view) == validator.validate(view)
        assert view == snapshot
