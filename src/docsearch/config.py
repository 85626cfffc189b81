"""Application configuration defaults."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

APP_NAME = "docsearch"


def _get_config_dir() -> Path:
    """Get the per-user configuration directory for the current platform."""
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA", os.path.expanduser("~"))
        return Path(appdata) / APP_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / APP_NAME


def _get_default_index_dir() -> Path:
    # Only one logical index exists at a time.
    return _get_config_dir() / "indexes" / "default"


@dataclass(slots=True)
class AppConfig:
    index_dir: Path | None = None
    enable_pdf: bool = False
    max_file_size: int | None = None
    exclude_patterns: Tuple[str, ...] = ()
    writer_limit_mb: int = 128
    default_limit: int = 50

    def __post_init__(self) -> None:
        if self.index_dir is None:
            self.index_dir = _get_default_index_dir()
        self.exclude_patterns = tuple(self.exclude_patterns)

    def resolve_index_dir(self, base_dir: Path | None = None) -> Path:
        if self.index_dir is None:
            self.index_dir = _get_default_index_dir()
        if Path(self.index_dir).is_absolute() or base_dir is None:
            return Path(self.index_dir)
        return base_dir / self.index_dir
