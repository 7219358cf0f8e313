"""Plugin version tokens.

A version token is a dotted-decimal string such as ``"0.0.0.15"``.

Normalization strips surrounding whitespace and reads every component as a
non-negative decimal integer, so ``"0.0.0.015"`` and ``"0.0.0.15"`` are the
same version. Anything else (numbers, empty strings, non-digit components)
is uninterpretable.

Compatibility is exact equality of normalized components. There are no
ranges and no implicit padding: ``"1.0"`` and ``"1.0.0"`` differ.
"""

from typing import Any


def normalize_version(token: Any) -> tuple[int, ...] | None:
    """Return the component tuple for ``token``, or None if uninterpretable."""
    if not isinstance(token, str):
        return None
    text = token.strip()
    if not text:
        return None
    parts = text.split(".")
    if not all(p.isascii() and p.isdigit() for p in parts):
        return None
    return tuple(int(p) for p in parts)


def is_version_supported(declared: Any, supported: Any) -> bool:
    """Whether a declared token matches the version the engine supports."""
    declared_parts = normalize_version(declared)
    if declared_parts is None:
        return False
    return declared_parts == normalize_version(supported)
