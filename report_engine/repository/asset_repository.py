"""
Asset Repository – abstracts access to logo and image files.

Assets are looked up by name inside one base directory; names that try to
escape it are rejected.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

_ASSETS_ROOT = Path(os.getenv("REPORT_ASSETS_DIR", "assets"))


class AssetRepository:
    """Read-only view of the report asset directory."""

    def __init__(self, root: Path | str | None = None) -> None:
        self.root = Path(root) if root is not None else _ASSETS_ROOT

    def path_for(self, name: str) -> Path:
        base = self.root.resolve()
        path = (base / name).resolve()
        if base not in path.parents:
            raise ValueError(f"Asset name escapes the asset directory: {name!r}")
        return path

    def exists(self, name: str) -> bool:
        try:
            return self.path_for(name).is_file()
        except ValueError:
            return False

    def read_bytes(self, name: str) -> bytes:
        """Raw bytes of asset *name*; ``FileNotFoundError`` when missing."""
        return self.path_for(name).read_bytes()

    def load_optional(self, name: str | None) -> bytes | None:
        """Bytes of *name*, or None when unset or missing (logged)."""
        if not name:
            return None
        if not self.exists(name):
            logger.warning("Asset %r not found under %s", name, self.root)
            return None
        return self.read_bytes(name)

    def list_assets(self) -> list[str]:
        if not self.root.is_dir():
            return []
        return sorted(p.name for p in self.root.iterdir() if p.is_file())
