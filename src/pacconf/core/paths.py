"""Dot-delimited path addressing over nested mappings.

Paths are ASCII strings such as ``proxies.exceptions.ifHostProxied``.
There is no escaping for literal dots. Keys that themselves contain dots
(host names like ``youtube.com``) are still reachable: at every level the
walker prefers the longest run of segments whose dotted join is an existing
key, and only falls back to a single segment when no longer key exists.

Reads never mutate. ``writable_ref`` creates empty intermediate mappings in
the tree it walks (the overlay) and leaves the final key to the caller.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any

from pacconf.contracts.errors import (
    InvalidPathError,
    PathConflictError,
    PathNotFoundError,
)

_MISSING: Any = object()


def parse_path(path: str) -> tuple[str, ...]:
    """Split a path string into raw segments.

    Raises:
        InvalidPathError: If path is not a non-empty ASCII string of
            non-empty dot-separated segments
    """
    if not isinstance(path, str):
        raise InvalidPathError(path, "path must be a string")
    if not path:
        raise InvalidPathError(path, "path is empty")
    if not path.isascii():
        raise InvalidPathError(path, "path must be ASCII")
    segments = tuple(path.split("."))
    if any(not s or s.isspace() for s in segments):
        raise InvalidPathError(path, "empty segment")
    return segments


def _match_key(
    segments: tuple[str, ...], start: int, *candidates: Any
) -> tuple[str, int]:
    """Pick the key at segments[start:], longest existing dotted key first."""
    for end in range(len(segments), start + 1, -1):
        key = ".".join(segments[start:end])
        for node in candidates:
            if isinstance(node, Mapping) and key in node:
                return key, end
    return segments[start], start + 1


def read(
    tree: Mapping[str, Any],
    path: str,
    *,
    must_exist: bool = False,
    default: Any = None,
) -> Any:
    """Return the value at ``path`` without mutating ``tree``.

    Args:
        tree: Root mapping to walk
        path: Dotted path
        must_exist: Raise instead of returning ``default`` on a miss
        default: Value returned for a non-strict miss

    Raises:
        InvalidPathError: Malformed path
        PathNotFoundError: Missing segment and ``must_exist`` is true
        PathConflictError: An intermediate segment holds a non-mapping
    """
    segments = parse_path(path)
    node: Any = tree
    walked: list[str] = []
    i = 0
    while i < len(segments):
        if not isinstance(node, Mapping):
            raise PathConflictError(path, ".".join(walked), node)
        key, i = _match_key(segments, i, node)
        walked.append(key)
        if key not in node:
            if must_exist:
                raise PathNotFoundError(path, ".".join(walked))
            return default
        node = node[key]
    return node


def contains(tree: Mapping[str, Any], path: str) -> bool:
    """Whether ``path`` resolves to a value (JSON null counts as present)."""
    return read(tree, path, default=_MISSING) is not _MISSING


@dataclass(frozen=True)
class OverlayRef:
    """A writable slot: a parent mapping plus the final key.

    The key itself may not exist yet. Assignment is a single dict store,
    so it is atomic from the caller's perspective.
    """

    parent: MutableMapping[str, Any]
    key: str
    path: str

    @property
    def exists(self) -> bool:
        return self.key in self.parent

    @property
    def value(self) -> Any:
        """Current value; raises PathNotFoundError if unassigned."""
        try:
            return self.parent[self.key]
        except KeyError:
            raise PathNotFoundError(self.path, self.path) from None

    def get(self, default: Any = None) -> Any:
        return self.parent.get(self.key, default)

    def assign(self, value: Any) -> None:
        self.parent[self.key] = value

    def delete(self) -> bool:
        """Remove the key. Returns False if it was not present."""
        if self.key not in self.parent:
            return False
        del self.parent[self.key]
        return True


def writable_ref(
    tree: MutableMapping[str, Any],
    path: str,
    *,
    shape: Mapping[str, Any] | None = None,
) -> OverlayRef:
    """Walk ``tree`` creating absent intermediate mappings; leave the last key.

    Args:
        tree: Mutable tree to walk (the overlay, never the default)
        path: Dotted path
        shape: Optional read-only tree consulted only to recognise dotted
            keys that ``tree`` does not contain yet

    Raises:
        InvalidPathError: Malformed path
        PathConflictError: An intermediate segment in ``tree`` holds a
            non-mapping. Raised before anything is created.
    """
    segments = parse_path(path)
    node: MutableMapping[str, Any] = tree
    ref_node: Any = shape
    walked: list[str] = []
    i = 0
    while True:
        key, i = _match_key(segments, i, node, ref_node)
        if i == len(segments):
            return OverlayRef(parent=node, key=key, path=path)
        walked.append(key)
        child = node.get(key, _MISSING)
        if child is _MISSING:
            # Everything below a created node is new, so no conflict can
            # follow a creation.
            child = {}
            node[key] = child
        elif not isinstance(child, MutableMapping):
            raise PathConflictError(path, ".".join(walked), child)
        node = child
        ref_node = ref_node.get(key) if isinstance(ref_node, Mapping) else None


def delete(tree: MutableMapping[str, Any], path: str, *, prune: bool = True) -> bool:
    """Remove the value at ``path``.

    With ``prune``, intermediate mappings left empty by the removal are
    removed as well, keeping sparse trees sparse.

    Returns:
        True if a value was removed
    """
    segments = parse_path(path)
    trail: list[tuple[MutableMapping[str, Any], str]] = []
    node: Any = tree
    i = 0
    while i < len(segments):
        if not isinstance(node, MutableMapping):
            return False
        key, i = _match_key(segments, i, node)
        if key not in node:
            return False
        trail.append((node, key))
        node = node[key]

    parent, key = trail.pop()
    del parent[key]
    if prune:
        while trail:
            parent, key = trail.pop()
            if parent[key]:
                break
            del parent[key]
    return True
