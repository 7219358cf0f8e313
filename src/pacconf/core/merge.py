"""Deep merge of a custom overlay onto a default tree.

Rules, applied depth-first:

1. One side defined: the result is a deep copy of that side.
2. Neither side defined: MergeInputError (caller contract violation).
3. Both defined: kinds must match, otherwise TypeMismatchError.
4. Both mappings: union of keys, recursing per key into a new mapping.
5. Both scalars of one kind: the overlay value wins outright.

Lists are scalars here. An overlay list replaces the default list wholesale;
there is no element-wise reconciliation.

Neither input is mutated and the result never aliases either input, so later
mutation of one tree cannot leak into another.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from pacconf.contracts.enums import ValueKind
from pacconf.contracts.errors import MergeInputError, TypeMismatchError


def kind_of(value: Any) -> ValueKind:
    """Classify a JSON value.

    bool is checked before number because bool subclasses int. NaN and
    infinities have no JSON encoding and are not JSON values.

    Raises:
        TypeError: If value is not a JSON value
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int):
        return ValueKind.NUMBER
    if isinstance(value, float) and math.isfinite(value):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    if isinstance(value, (list, tuple)):
        return ValueKind.LIST
    raise TypeError(f"Not a JSON value: {type(value).__name__} {value!r}")


def copy_tree(value: Any) -> Any:
    """Deep copy of a JSON value; containers become plain dicts and lists."""
    if isinstance(value, Mapping):
        return {k: copy_tree(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [copy_tree(v) for v in value]
    return value


def merge(
    default_value: Any,
    custom_value: Any,
    default_defined: bool = True,
    custom_defined: bool = True,
    *,
    path: tuple[str, ...] = (),
) -> Any:
    """Merge one default value with one custom value.

    Args:
        default_value: Value from the default tree (ignored if undefined)
        custom_value: Value from the overlay (ignored if undefined)
        default_defined: Whether the default side exists at this path
        custom_defined: Whether the overlay side exists at this path
        path: Keys leading here, used in error messages

    Returns:
        A new value independent of both inputs

    Raises:
        MergeInputError: Neither side is defined
        TypeMismatchError: Both sides defined with different kinds
    """
    if not default_defined and not custom_defined:
        raise MergeInputError(".".join(path))
    if not custom_defined:
        return copy_tree(default_value)
    if not default_defined:
        return copy_tree(custom_value)

    default_kind = kind_of(default_value)
    custom_kind = kind_of(custom_value)
    if default_kind is not custom_kind:
        raise TypeMismatchError(
            ".".join(path), default_value, custom_value, default_kind, custom_kind
        )

    if default_kind is ValueKind.MAPPING:
        merged: dict[str, Any] = {}
        for key in default_value:
            merged[key] = merge(
                default_value[key],
                custom_value.get(key),
                True,
                key in custom_value,
                path=(*path, key),
            )
        for key in custom_value:
            if key not in default_value:
                merged[key] = copy_tree(custom_value[key])
        return merged

    return copy_tree(custom_value)


def merge_trees(default: Mapping[str, Any], custom: Mapping[str, Any]) -> dict[str, Any]:
    """Merge two whole trees; both roots must be mappings."""
    return merge(default, custom)


def find_conflicts(
    default: Any, custom: Any, *, path: tuple[str, ...] = ()
) -> list[TypeMismatchError]:
    """Collect every kind mismatch between two trees instead of stopping at the first.

    The CLI uses this to report every mismatch; ``merge`` itself is fail-fast.
    """
    default_kind = kind_of(default)
    custom_kind = kind_of(custom)
    if default_kind is not custom_kind:
        return [TypeMismatchError(".".join(path), default, custom, default_kind, custom_kind)]
    if default_kind is not ValueKind.MAPPING:
        return []
    conflicts: list[TypeMismatchError] = []
    for key in custom:
        if key in default:
            conflicts.extend(find_conflicts(default[key], custom[key], path=(*path, key)))
    return conflicts
