"""pacconf: modular, versioned configuration overlays for PAC scripts.

A host script ships a default configuration tree; clients layer a sparse
custom overlay on top. The merged view is validated against a root schema
and one JSON Schema per plugin.
"""

__version__ = "0.1.0"

from pacconf.core.store import ConfigStore  # noqa: E402
from pacconf.plugins.descriptor import PluginDescriptor  # noqa: E402
from pacconf.plugins.registry import PluginRegistry  # noqa: E402
from pacconf.plugins.schemas import SchemaValidator  # noqa: E402

__all__ = [
    "ConfigStore",
    "PluginDescriptor",
    "PluginRegistry",
    "SchemaValidator",
    "__version__",
]
