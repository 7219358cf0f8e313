"""Tests for contracts enums."""


class TestValueKind:
    """Kinds the merge engine compares."""

    def test_has_all_kinds(self) -> None:
        from pacconf.contracts import ValueKind

        assert {k.value for k in ValueKind} == {
            "bool",
            "string",
            "number",
            "mapping",
            "list",
            "null",
        }

    def test_is_string_enum(self) -> None:
        from pacconf.contracts import ValueKind

        assert ValueKind.MAPPING == "mapping"


class TestStoreStateAndPolicy:
    """Store state machine and validation policies."""

    def test_two_states(self) -> None:
        from pacconf.contracts import StoreState

        assert [s.value for s in StoreState] == ["clean", "dirty"]

    def test_policies(self) -> None:
        from pacconf.contracts import ValidationPolicy

        assert ValidationPolicy("lazy") is ValidationPolicy.LAZY
        assert ValidationPolicy("eager") is ValidationPolicy.EAGER
