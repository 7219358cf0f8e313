"""Core infrastructure: paths, merge, store, settings, logging, storage.

Submodules are imported directly (``from pacconf.core.store import
ConfigStore``); this package does not re-export them because the plugin
registry depends on ``pacconf.core.logging``.
"""
