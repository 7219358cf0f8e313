"""Plugin registry: named, versioned configuration modules.

Uses pluggy for hook-based registration alongside direct registration.
The reserved ``plugins`` entry describing the registry itself is always
present.
"""

from collections.abc import Mapping
from typing import Any

import pluggy

from pacconf.contracts.errors import DuplicatePluginError, VersionIncompatibleError
from pacconf.contracts.results import VersionMismatch
from pacconf.core.logging import get_logger
from pacconf.plugins.descriptor import PluginDescriptor
from pacconf.plugins.hookspecs import PROJECT_NAME, PacconfPluginSpec
from pacconf.plugins.versions import is_version_supported

logger = get_logger(__name__)

REGISTRY_PLUGIN_NAME = "plugins"
REGISTRY_PLUGIN_VERSION = "0.0.0.1"

REGISTRY_DESCRIPTOR = PluginDescriptor(
    name=REGISTRY_PLUGIN_NAME,
    version=REGISTRY_PLUGIN_VERSION,
    schema={
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "title": REGISTRY_PLUGIN_NAME,
        "type": "object",
        "required": [REGISTRY_PLUGIN_NAME],
        "properties": {
            REGISTRY_PLUGIN_NAME: {
                "type": "object",
                "required": [REGISTRY_PLUGIN_NAME],
            },
        },
    },
)


class PluginRegistry:
    """Holds plugin descriptors keyed by unique name.

    Usage:
        registry = PluginRegistry()
        registry.register(PluginDescriptor(name="anticensorship", ...))
        registry.register_hooks(SomePackagePlugins())

        registry.resolve_required(merged_view)
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(PacconfPluginSpec)

        # Directly registered descriptors survive hook refreshes
        self._direct: dict[str, PluginDescriptor] = {
            REGISTRY_PLUGIN_NAME: REGISTRY_DESCRIPTOR,
        }
        self._descriptors: dict[str, PluginDescriptor] = dict(self._direct)

    def register(self, descriptor: PluginDescriptor) -> None:
        """Register a single descriptor.

        Raises:
            DuplicatePluginError: If the name is already registered
        """
        if descriptor.name in self._descriptors:
            raise DuplicatePluginError(descriptor.name)
        self._direct[descriptor.name] = descriptor
        self._descriptors[descriptor.name] = descriptor
        logger.debug("plugin registered", plugin=descriptor.name, version=descriptor.version)

    def register_hooks(self, plugin: Any) -> None:
        """Register an object implementing ``pacconf_get_plugins``.

        All-or-nothing: if any contributed name collides, the object is
        unregistered again and nothing changes.

        Raises:
            DuplicatePluginError: If a contributed name is already registered
        """
        self._pm.register(plugin)
        try:
            self._refresh_caches()
        except DuplicatePluginError:
            self._pm.unregister(plugin)
            raise

    def _refresh_caches(self) -> None:
        """Rebuild the descriptor map from direct registrations and hooks.

        Raises:
            DuplicatePluginError: If two sources contribute the same name
        """
        new_descriptors = dict(self._direct)
        for descriptors in self._pm.hook.pacconf_get_plugins():
            for descriptor in descriptors:
                if descriptor.name in new_descriptors:
                    raise DuplicatePluginError(descriptor.name)
                new_descriptors[descriptor.name] = descriptor

        added = sorted(set(new_descriptors) - set(self._descriptors))
        # All validated, update cache
        self._descriptors = new_descriptors
        if added:
            logger.debug("plugins registered from hooks", plugins=added)

    # === Lookup ===

    def get(self, name: str) -> PluginDescriptor | None:
        """Get descriptor by name."""
        return self._descriptors.get(name)

    def names(self) -> list[str]:
        """Registered names, sorted."""
        return sorted(self._descriptors)

    def descriptors(self) -> list[PluginDescriptor]:
        """Registered descriptors, sorted by name."""
        return [self._descriptors[name] for name in self.names()]

    def required(self) -> list[PluginDescriptor]:
        """Descriptors whose presence in the merged view is mandatory."""
        return [d for d in self.descriptors() if d.required]

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)

    # === Version resolution ===

    @staticmethod
    def is_version_supported(declared: Any, supported: Any) -> bool:
        """Exact match of normalized dotted-decimal tokens."""
        return is_version_supported(declared, supported)

    def resolve_required(self, merged_view: Mapping[str, Any]) -> None:
        """Check every required plugin is declared with a supported version.

        Entries under ``plugins`` that the registry does not know are
        ignored; the root schema decides whether they are acceptable.

        Raises:
            VersionIncompatibleError: Listing every failing plugin
        """
        section = merged_view.get(REGISTRY_PLUGIN_NAME)
        mismatches: list[VersionMismatch] = []
        for descriptor in self.required():
            entry = section.get(descriptor.name) if isinstance(section, Mapping) else None
            declared = entry.get("version") if isinstance(entry, Mapping) else None
            if not self.is_version_supported(declared, descriptor.version):
                mismatches.append(
                    VersionMismatch(
                        plugin=descriptor.name,
                        required=descriptor.version,
                        declared=declared,
                    )
                )
        if mismatches:
            raise VersionIncompatibleError(mismatches)
