"""Plugin system: versioned schema fragments registered directly or via pluggy.

- Descriptor: name, version, schema, required flag
- Registry: unique names, version resolution against a merged view
- Schemas: root envelope schema and the SchemaValidator
- Hookspecs: pluggy hook definitions
"""

from pacconf.plugins.descriptor import PluginConfigError, PluginDescriptor
from pacconf.plugins.hookspecs import hookimpl, hookspec
from pacconf.plugins.registry import (
    REGISTRY_PLUGIN_NAME,
    REGISTRY_PLUGIN_VERSION,
    PluginRegistry,
)
from pacconf.plugins.schemas import ROOT_SCHEMA, SchemaValidator
from pacconf.plugins.versions import is_version_supported, normalize_version

__all__ = [
    "REGISTRY_PLUGIN_NAME",
    "REGISTRY_PLUGIN_VERSION",
    "ROOT_SCHEMA",
    "PluginConfigError",
    "PluginDescriptor",
    "PluginRegistry",
    "SchemaValidator",
    "hookimpl",
    "hookspec",
    "is_version_supported",
    "normalize_version",
]
