"""ConfigStore: the default tree, the custom overlay, and their merged view.

State machine:

    CLEAN --set/unset/get_custom_ref/load_custom/replace_default--> DIRTY
    DIRTY --successful refresh (merge + validate + resolve versions)--> CLEAN

A failed refresh leaves the store DIRTY and the overlay untouched: the
attempted change is retained and the caller decides whether to fix it,
unset it, or retry.

Locking: every mutation and every refresh holds the store's RLock. A read
in the CLEAN state serves the cached snapshot without locking; the snapshot
is never mutated after it is produced and callers only receive copies.
"""

import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pacconf.contracts.enums import StoreState, ValidationPolicy
from pacconf.contracts.errors import format_error
from pacconf.contracts.results import SchemaViolation
from pacconf.core.canonical import stable_hash
from pacconf.core.config import StoreSettings
from pacconf.core.logging import get_logger
from pacconf.core.merge import copy_tree, kind_of, merge_trees
from pacconf.core.paths import OverlayRef, delete, read, writable_ref
from pacconf.plugins.descriptor import PluginDescriptor
from pacconf.plugins.registry import PluginRegistry
from pacconf.plugins.schemas import SchemaValidator

logger = get_logger(__name__)


def _json_tree(tree: Any, what: str) -> dict[str, Any]:
    """Deep-copy a root mapping, rejecting anything that is not JSON."""
    if not isinstance(tree, Mapping):
        raise TypeError(f"{what} must be a mapping, got {type(tree).__name__}")
    _check_json(tree)
    copied: dict[str, Any] = copy_tree(tree)
    return copied


def _check_json(value: Any) -> None:
    kind_of(value)
    if isinstance(value, Mapping):
        for key, child in value.items():
            if not isinstance(key, str):
                raise TypeError(f"mapping keys must be strings, got {key!r}")
            _check_json(child)
    elif isinstance(value, (list, tuple)):
        for child in value:
            _check_json(child)


@dataclass(frozen=True)
class CustomRef(OverlayRef):
    """An overlay slot whose writes go through the owning store.

    ``assign`` and ``delete`` take the store lock, check the value, and
    follow the store's validation policy exactly like ``set``/``unset``.
    """

    store: "ConfigStore" = field(repr=False, compare=False)

    def assign(self, value: Any) -> None:
        """Store a copy of ``value``.

        Raises:
            TypeError: value is not a JSON value (nothing changes)
            TypeMismatchError, SchemaValidationError, VersionIncompatibleError:
                Only under the eager policy
        """
        _check_json(value)
        with self.store._lock:
            super().assign(copy_tree(value))
            self.store._after_mutation()

    def delete(self) -> bool:
        with self.store._lock:
            removed = super().delete()
            if removed:
                self.store._after_mutation()
            return removed


class ConfigStore:
    """Path-addressed configuration over an immutable default and a mutable overlay.

    Example:
        store = ConfigStore.initialize(default_tree, [anticensorship])
        store.set("proxies.exceptions.ifHostProxied.youtube.com", True)
        store.get("proxies.exceptions.ifHostProxied")
    """

    def __init__(
        self,
        default_tree: Mapping[str, Any],
        validator: SchemaValidator,
        *,
        settings: StoreSettings | None = None,
    ) -> None:
        """Validate the default tree standalone and build the store.

        Args:
            default_tree: Baseline configuration; copied, never mutated
            validator: Explicitly constructed validator (with its registry)
            settings: Store behaviour; defaults to lazy validation

        Raises:
            TypeError: default_tree is not a JSON mapping
            SchemaValidationError: default_tree fails the schemas
            VersionIncompatibleError: a required plugin is missing or mismatched
        """
        self._validator = validator
        self._registry: PluginRegistry = validator.registry
        self._settings = settings or StoreSettings()
        self._lock = threading.RLock()

        default = _json_tree(default_tree, "default tree")
        self._validate_tree(default)

        self._default: dict[str, Any] = default
        self._custom: dict[str, Any] = {}
        # Empty overlay: the default alone is the merged view
        self._merged: dict[str, Any] = copy_tree(default)
        self._state = StoreState.CLEAN
        logger.debug(
            "config store initialized",
            plugins=self._registry.names(),
            policy=self._settings.validation_policy.value,
        )

    @classmethod
    def initialize(
        cls,
        default_tree: Mapping[str, Any],
        plugins: Iterable[PluginDescriptor] = (),
        *,
        settings: StoreSettings | None = None,
        root_schema: Mapping[str, Any] | None = None,
    ) -> "ConfigStore":
        """Build a registry and validator for ``plugins`` and a store on top.

        Raises:
            DuplicatePluginError: Two descriptors share a name
            SchemaValidationError, VersionIncompatibleError: default is invalid
        """
        registry = PluginRegistry()
        for descriptor in plugins:
            registry.register(descriptor)
        return cls(default_tree, SchemaValidator(registry, root_schema), settings=settings)

    # === State ===

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def is_dirty(self) -> bool:
        return self._state is StoreState.DIRTY

    @property
    def registry(self) -> PluginRegistry:
        return self._registry

    @property
    def settings(self) -> StoreSettings:
        return self._settings

    def mark_dirty(self) -> None:
        """Force recomputation on the next read.

        Call after editing nested values obtained through get_custom_ref().
        """
        with self._lock:
            self._state = StoreState.DIRTY

    def _validate_tree(self, tree: Mapping[str, Any]) -> None:
        self._validator.check(tree)
        self._registry.resolve_required(tree)

    def _checked_merge(self, default: Mapping[str, Any]) -> dict[str, Any]:
        """Merge the overlay onto ``default`` and validate. Caller holds the lock."""
        try:
            merged = merge_trees(default, self._custom)
            self._validate_tree(merged)
        except Exception as e:
            logger.warning("merged view rejected", error=format_error(e))
            raise
        return merged

    def _refresh(self) -> None:
        """Recompute and validate the merged view. Caller holds the lock."""
        self._merged = self._checked_merge(self._default)
        self._state = StoreState.CLEAN
        logger.debug("merged view recomputed")

    def _after_mutation(self) -> None:
        """Mark dirty and, under the eager policy, refresh now. Caller holds the lock."""
        self._state = StoreState.DIRTY
        if self._settings.validation_policy is ValidationPolicy.EAGER:
            self._refresh()

    def _snapshot(self) -> dict[str, Any]:
        if self._state is StoreState.CLEAN:
            return self._merged
        with self._lock:
            if self._state is StoreState.DIRTY:
                self._refresh()
            return self._merged

    # === Reads ===

    def get(self, path: str | None = None, *, strict: bool = False) -> Any:
        """Read from the merged view, refreshing it first if dirty.

        Args:
            path: Dotted path, or None for the whole merged view
            strict: Raise PathNotFoundError on a miss instead of returning None

        Returns:
            An independent copy of the value

        Raises:
            TypeMismatchError, SchemaValidationError, VersionIncompatibleError:
                The pending overlay does not produce a valid merged view
            InvalidPathError, PathNotFoundError, PathConflictError: Path errors
        """
        merged = self._snapshot()
        if path is None:
            return copy_tree(merged)
        return copy_tree(read(merged, path, must_exist=strict))

    def violations(self) -> list[SchemaViolation]:
        """Schema violations of the current merge, without raising or changing state.

        Raises:
            TypeMismatchError: The overlay cannot be merged at all
        """
        with self._lock:
            merged = merge_trees(self._default, self._custom)
        return self._validator.validate(merged)

    def fingerprint(self) -> str:
        """Canonical SHA-256 of the current merged view."""
        return stable_hash(self._snapshot())

    def default_tree(self) -> dict[str, Any]:
        """Copy of the default tree."""
        return copy_tree(self._default)

    def custom_tree(self) -> dict[str, Any]:
        """Copy of the overlay, e.g. for persistence."""
        with self._lock:
            return copy_tree(self._custom)

    # === Overlay mutation ===

    def get_custom_ref(self, path: str, *, must_exist: bool = False) -> CustomRef:
        """Direct reference into the overlay; never touches the default tree.

        With ``must_exist`` false, absent intermediate mappings are created but
        the final key is not. The store is marked dirty because the caller may
        write through the reference. ``assign``/``delete`` on the reference
        hold the store lock and follow the validation policy like ``set``.

        Raises:
            PathNotFoundError: ``must_exist`` and the overlay lacks the path
            PathConflictError: An overlay intermediate is not a mapping
        """
        with self._lock:
            if must_exist:
                read(self._custom, path, must_exist=True)
            ref = writable_ref(self._custom, path, shape=self._default)
            self._state = StoreState.DIRTY
            return CustomRef(parent=ref.parent, key=ref.key, path=ref.path, store=self)

    def set(self, path: str, value: Any) -> None:
        """Assign ``value`` in the overlay at ``path``.

        The overlay keeps the value even if the merged view then fails
        validation.

        Raises:
            TypeError: value is not a JSON value
            InvalidPathError, PathConflictError: Path errors (nothing changes)
            TypeMismatchError, SchemaValidationError, VersionIncompatibleError:
                Only under the eager policy
        """
        _check_json(value)
        with self._lock:
            ref = writable_ref(self._custom, path, shape=self._default)
            ref.assign(copy_tree(value))
            logger.debug("overlay value set", path=path)
            self._after_mutation()

    def unset(self, path: str) -> bool:
        """Discard the overlay value at ``path``; empty parents are pruned.

        Returns:
            True if something was removed
        """
        with self._lock:
            removed = delete(self._custom, path)
            if removed:
                logger.debug("overlay value removed", path=path)
                self._after_mutation()
            return removed

    def load_custom(self, tree: Mapping[str, Any]) -> None:
        """Replace the whole overlay, e.g. after reloading it from storage."""
        custom = _json_tree(tree, "custom tree")
        with self._lock:
            self._custom = custom
            self._after_mutation()

    def replace_default(self, new_tree: Mapping[str, Any]) -> None:
        """Swap in a new default tree after validating it standalone.

        Under the eager policy the overlay is also merged onto the new tree
        and validated before the swap. Under the lazy policy overlay conflicts
        with the new tree surface on the next read. On failure nothing changes.

        Raises:
            TypeError, SchemaValidationError, VersionIncompatibleError
            TypeMismatchError: Only under the eager policy
        """
        default = _json_tree(new_tree, "default tree")
        with self._lock:
            self._validate_tree(default)
            if self._settings.validation_policy is ValidationPolicy.EAGER:
                merged = self._checked_merge(default)
                self._default = default
                self._merged = merged
                self._state = StoreState.CLEAN
            else:
                self._default = default
                self._state = StoreState.DIRTY
            logger.info("default tree replaced")
