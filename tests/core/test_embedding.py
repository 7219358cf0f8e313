"""Tests for locating and replacing the payload embedded in a host script."""

import pytest

SCRIPT = (
    "function FindProxyForURL(url, host) {\n"
    "  var config = /**PACCONF_START**/"
    '{"plugins": {"plugins": {"version": "0.0.0.1"}}}'
    "/**PACCONF_END**/;\n"
    "  return 'DIRECT';\n"
    "}\n"
)


class TestExtractPayload:
    """Reading the JSON object between the markers."""

    def test_extracts_object(self) -> None:
        from pacconf.core.embedding import extract_payload

        assert extract_payload(SCRIPT) == {"plugins": {"plugins": {"version": "0.0.0.1"}}}

    def test_custom_markers(self) -> None:
        from pacconf.core.embedding import extract_payload

        script = "var c = /*<<*/{\"a\": 1}/*>>*/;"
        assert extract_payload(script, "/*<<*/", "/*>>*/") == {"a": 1}

    def test_missing_marker(self) -> None:
        from pacconf.contracts.errors import PayloadMarkerError
        from pacconf.core.embedding import extract_payload

        with pytest.raises(PayloadMarkerError, match="exactly one"):
            extract_payload("function FindProxyForURL() {}")

    def test_duplicate_marker(self) -> None:
        from pacconf.contracts.errors import PayloadMarkerError
        from pacconf.core.embedding import extract_payload

        with pytest.raises(PayloadMarkerError):
            extract_payload(SCRIPT + SCRIPT)

    def test_markers_out_of_order(self) -> None:
        from pacconf.contracts.errors import PayloadMarkerError
        from pacconf.core.embedding import extract_payload

        with pytest.raises(PayloadMarkerError, match="precedes"):
            extract_payload("/**PACCONF_END**/{}/**PACCONF_START**/")

    def test_invalid_json(self) -> None:
        from pacconf.contracts.errors import PayloadMarkerError
        from pacconf.core.embedding import extract_payload

        with pytest.raises(PayloadMarkerError, match="not valid JSON"):
            extract_payload("/**PACCONF_START**/{plugins: 1}/**PACCONF_END**/")

    def test_non_object_payload(self) -> None:
        from pacconf.contracts.errors import PayloadMarkerError
        from pacconf.core.embedding import extract_payload

        with pytest.raises(PayloadMarkerError, match="JSON object"):
            extract_payload("/**PACCONF_START**/[1, 2]/**PACCONF_END**/")


class TestInjectPayload:
    """Replacing the payload leaves the rest of the script untouched."""

    def test_inject_then_extract(self) -> None:
        from pacconf.core.embedding import extract_payload, inject_payload

        payload = {"plugins": {"plugins": {"version": "0.0.0.1"}}, "proxies": {"on": True}}
        updated = inject_payload(SCRIPT, payload)

        assert extract_payload(updated) == payload

    def test_surrounding_text_preserved(self) -> None:
        from pacconf.core.embedding import inject_payload

        updated = inject_payload(SCRIPT, {"a": 1})
        prefix = SCRIPT.split("/**PACCONF_START**/")[0]
        suffix = SCRIPT.split("/**PACCONF_END**/")[1]

        assert updated.startswith(prefix + "/**PACCONF_START**/")
        assert updated.endswith("/**PACCONF_END**/" + suffix)

    def test_non_ascii_kept_readable(self) -> None:
        from pacconf.core.embedding import inject_payload

        updated = inject_payload(SCRIPT, {"note": "пример"})
        assert "пример" in updated
