"""Locate and replace the JSON payload embedded in a host script.

The payload sits between two sentinel markers:

    var config = /**PACCONF_START**/{"plugins": {...}}/**PACCONF_END**/;

Only the text between the markers is parsed. The host script's own grammar
is never interpreted, and injection leaves every byte outside the markers
untouched.
"""

import json
from typing import Any

from pacconf.contracts.errors import PayloadMarkerError
from pacconf.core.config import DEFAULT_END_MARKER, DEFAULT_START_MARKER


def _locate(script: str, start_marker: str, end_marker: str) -> tuple[int, int]:
    """Return (payload_start, payload_end) offsets between the markers."""
    start_count = script.count(start_marker)
    end_count = script.count(end_marker)
    if start_count != 1 or end_count != 1:
        raise PayloadMarkerError(
            f"Expected exactly one start and one end marker, found "
            f"{start_count} x {start_marker!r} and {end_count} x {end_marker!r}"
        )
    begin = script.index(start_marker) + len(start_marker)
    end = script.index(end_marker)
    if end < begin:
        raise PayloadMarkerError("End marker precedes start marker")
    return begin, end


def extract_payload(
    script: str,
    start_marker: str = DEFAULT_START_MARKER,
    end_marker: str = DEFAULT_END_MARKER,
) -> dict[str, Any]:
    """Parse the JSON object between the markers.

    Raises:
        PayloadMarkerError: Markers missing, duplicated or out of order, or
            the payload is not a JSON object
    """
    begin, end = _locate(script, start_marker, end_marker)
    try:
        payload = json.loads(script[begin:end])
    except json.JSONDecodeError as e:
        raise PayloadMarkerError(f"Embedded payload is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise PayloadMarkerError(
            f"Embedded payload must be a JSON object, got {type(payload).__name__}"
        )
    return payload


def inject_payload(
    script: str,
    payload: dict[str, Any],
    start_marker: str = DEFAULT_START_MARKER,
    end_marker: str = DEFAULT_END_MARKER,
) -> str:
    """Return ``script`` with the text between the markers replaced by ``payload``."""
    begin, end = _locate(script, start_marker, end_marker)
    body = json.dumps(payload, indent=2, ensure_ascii=False)
    return script[:begin] + body + script[end:]
