"""pluggy hook specifications for pacconf plugins.

Packages that ship configuration modules implement these hooks to contribute
descriptors to a PluginRegistry.

Usage (implementing a plugin):
    from pacconf.plugins.hookspecs import hookimpl

    class AntiCensorship:
        @hookimpl  # NOT @hookspec - that's for defining specs
        def pacconf_get_plugins(self):
            return [ANTICENSORSHIP_DESCRIPTOR]
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from pacconf.plugins.descriptor import PluginDescriptor

# Project name for pluggy
PROJECT_NAME = "pacconf"

# Hook specification marker
hookspec = pluggy.HookspecMarker(PROJECT_NAME)

# Hook implementation marker (for plugins to use)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class PacconfPluginSpec:
    """Hook specifications for configuration plugins."""

    @hookspec
    def pacconf_get_plugins(self) -> list["PluginDescriptor"]:  # type: ignore[empty-body]
        """Return plugin descriptors.

        Returns:
            List of PluginDescriptor instances
        """
