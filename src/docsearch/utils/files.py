"""Utility helpers for working with files."""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from docsearch.models import DirectoryConfig

LOGGER = logging.getLogger(__name__)


def file_type_of(path: Path) -> str:
    """Lowercased extension without the dot, ``""`` when there is none."""
    return path.suffix[1:].lower() if path.suffix else ""


def _is_excluded(name: str, relative: str, patterns: Sequence[str]) -> bool:
    """Match globs against the entry name and its posix path under the root."""
    return any(
        fnmatch.fnmatch(name, pattern) or fnmatch.fnmatch(relative, pattern)
        for pattern in patterns
    )


def _is_excluded_dir(name: str, relative: str, patterns: Sequence[str]) -> bool:
    # "node_modules/*" also matches "node_modules/", which prunes the subtree.
    return _is_excluded(name, relative, patterns) or _is_excluded(
        f"{name}/", f"{relative}/", patterns
    )


def _is_regular_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def _log_walk_error(error: OSError) -> None:
    LOGGER.debug("Skipping unreadable entry %s: %s", error.filename, error)


def iter_directory_files(
    root: Path, *, recursive: bool, exclude_patterns: Sequence[str] = ()
) -> Iterator[Path]:
    """Yield regular files under ``root``, one level deep unless ``recursive``."""
    if recursive:
        for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
            base = Path(dirpath).relative_to(root)
            dirnames[:] = sorted(
                name
                for name in dirnames
                if not _is_excluded_dir(name, (base / name).as_posix(), exclude_patterns)
            )
            for name in sorted(filenames):
                if _is_excluded(name, (base / name).as_posix(), exclude_patterns):
                    continue
                candidate = Path(dirpath) / name
                if _is_regular_file(candidate):
                    yield candidate
        return

    try:
        entries = sorted(os.scandir(root), key=lambda entry: entry.name)
    except OSError as exc:
        _log_walk_error(exc)
        return
    for entry in entries:
        if _is_excluded(entry.name, entry.name, exclude_patterns):
            continue
        candidate = Path(entry.path)
        if _is_regular_file(candidate):
            yield candidate


def collect_files(
    directories: Iterable[DirectoryConfig], exclude_patterns: Sequence[str] = ()
) -> list[Path]:
    """Enumerate every file under the enabled directory configs."""
    files: list[Path] = []
    for directory in directories:
        if not directory.enabled:
            continue
        root = Path(directory.path).expanduser()
        files.extend(
            iter_directory_files(
                root, recursive=directory.recursive, exclude_patterns=exclude_patterns
            )
        )
    return files
