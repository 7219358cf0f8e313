# tests/conftest.py
"""Shared test fixtures and helpers.

This module provides reusable default trees and plugin descriptors shaped
like the configuration a PAC script ships.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/core/test_merge.py
"""

import os
from collections.abc import Iterator
from typing import Any

import pytest
import structlog
from hypothesis import Phase, Verbosity, settings

# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


ANTICENSORSHIP_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "anticensorship",
    "type": "object",
    "required": ["anticensorship"],
    "properties": {
        "anticensorship": {
            "type": "object",
            "required": ["enabled"],
            "properties": {
                "enabled": {"type": "boolean"},
                "mirrors": {"type": "array", "items": {"type": "string"}},
            },
        },
    },
}


def make_default_tree(**sections: Any) -> dict[str, Any]:
    """Default tree declaring the registry entry, plus extra sections."""
    tree: dict[str, Any] = {"plugins": {"plugins": {"version": "0.0.0.1"}}}
    tree.update(sections)
    return tree


@pytest.fixture
def proxies_default() -> dict[str, Any]:
    """Default tree with a dotted host-name key under the proxies section."""
    return make_default_tree(
        proxies={"exceptions": {"ifHostProxied": {"youtube.com": False}}},
    )


@pytest.fixture
def anticensorship_descriptor() -> Any:
    from pacconf.plugins.descriptor import PluginDescriptor

    return PluginDescriptor(
        name="anticensorship",
        version="0.0.0.15",
        schema=ANTICENSORSHIP_SCHEMA,
    )


@pytest.fixture
def anticensorship_default() -> dict[str, Any]:
    """Default tree that satisfies the anticensorship plugin."""
    tree = make_default_tree(
        anticensorship={"enabled": True, "mirrors": ["a.example", "b.example"]},
    )
    tree["plugins"]["anticensorship"] = {"version": "0.0.0.15"}
    return tree


@pytest.fixture
def base_default() -> dict[str, Any]:
    """Smallest default tree the root and registry schemas accept."""
    return make_default_tree()


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Drop logging configuration that points at a stream a test has closed."""
    yield
    structlog.reset_defaults()
