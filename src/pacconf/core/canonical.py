"""
Canonical JSON serialization for deterministic fingerprints.

Two-phase approach:
1. Normalize: Reduce a configuration tree to JSON primitives (our code)
2. Serialize: Produce deterministic JSON per RFC 8785/JCS (rfc8785 package)

NaN and Infinity are REJECTED, not silently converted: JSON cannot
carry them, so a tree holding one could never round-trip through the
embedded payload.
"""

import hashlib
import math
from collections.abc import Mapping
from typing import Any

import rfc8785

# Version string reported alongside fingerprints
CANONICAL_VERSION = "sha256-rfc8785-v1"


def _normalize_value(obj: Any) -> Any:
    """Convert a single value to a JSON-safe primitive.

    Raises:
        ValueError: If value is a non-finite float
        TypeError: If value is not representable as JSON
    """
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            raise ValueError(
                f"Cannot canonicalize non-finite float: {obj}. "
                "Use null for missing values, not NaN."
            )
        return obj

    if obj is None or isinstance(obj, (str, int, bool)):
        return obj

    if isinstance(obj, Mapping):
        normalized: dict[str, Any] = {}
        for key, value in obj.items():
            if not isinstance(key, str):
                raise TypeError(f"JSON object keys must be strings, got {key!r}")
            normalized[key] = _normalize_value(value)
        return normalized

    if isinstance(obj, (list, tuple)):
        return [_normalize_value(v) for v in obj]

    raise TypeError(f"Cannot canonicalize {type(obj).__name__}: {obj!r}")


def canonical_json(obj: Any) -> str:
    """Serialize a tree to canonical JSON (RFC 8785)."""
    return rfc8785.dumps(_normalize_value(obj)).decode("utf-8")


def stable_hash(obj: Any) -> str:
    """SHA-256 hex digest of the canonical JSON form."""
    return hashlib.sha256(canonical_json(obj).encode("utf-8")).hexdigest()
