"""
Overlay storage for persisting the custom overlay between sessions.

The overlay engine never persists anything itself. Callers load the overlay
through an OverlayStorage, hand it to ConfigStore.load_custom(), and save
ConfigStore.custom_tree() back when they decide a change is final.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class OverlayStorage(Protocol):
    """Protocol for overlay storage backends."""

    def load(self) -> dict[str, Any]:
        """Load the stored overlay.

        Returns:
            The overlay tree, or an empty dict if nothing is stored yet
        """
        ...

    def save(self, tree: dict[str, Any]) -> None:
        """Replace the stored overlay with ``tree``."""
        ...

    def exists(self) -> bool:
        """Whether an overlay has been stored."""
        ...


class MemoryOverlayStorage:
    """In-process storage; keeps a JSON round-tripped copy."""

    def __init__(self, tree: dict[str, Any] | None = None) -> None:
        self._data: str | None = json.dumps(tree) if tree is not None else None

    def load(self) -> dict[str, Any]:
        if self._data is None:
            return {}
        loaded: dict[str, Any] = json.loads(self._data)
        return loaded

    def save(self, tree: dict[str, Any]) -> None:
        self._data = json.dumps(tree)

    def exists(self) -> bool:
        return self._data is not None


class FilesystemOverlayStorage:
    """Stores the overlay as a single JSON document.

    Writes go to a temporary file in the same directory and are moved into
    place with os.replace, so readers never observe a half-written file.
    """

    def __init__(self, path: Path) -> None:
        """Initialize filesystem storage.

        Args:
            path: JSON file holding the overlay
        """
        self.path = path

    def load(self) -> dict[str, Any]:
        """Load the overlay; a missing file is an empty overlay.

        Raises:
            ValueError: If the file does not hold a JSON object
        """
        if not self.path.exists():
            return {}
        tree = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(tree, dict):
            raise ValueError(
                f"Overlay file {self.path} must hold a JSON object, got {type(tree).__name__}"
            )
        return tree

    def save(self, tree: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(tree, fh, indent=2, ensure_ascii=False)
                fh.write("\n")
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def exists(self) -> bool:
        return self.path.exists()
