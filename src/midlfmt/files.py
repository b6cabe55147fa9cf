"""Discovery of MIDL source files for command-line runs."""

from __future__ import annotations

import os
from pathlib import Path

from .config import FilesConfig


def discover_files(paths: list[Path], files_config: FilesConfig) -> list[Path]:
    """
    Expand the given paths into the MIDL files to format.

    Explicit file arguments are always kept. Directories are walked for
    files with a configured extension, skipping excluded paths. The result
    is sorted and free of duplicates.

    Args:
        paths: Files and/or directories
        files_config: Extension and exclude settings

    Returns:
        Files to format
    """
    found: list[Path] = []
    seen: set[Path] = set()

    def _add(p: Path) -> None:
        key = p.resolve()
        if key not in seen:
            seen.add(key)
            found.append(p)

    for path in paths:
        if path.is_dir():
            for root, dirnames, filenames in os.walk(path):
                root_path = Path(root)
                rel_root = root_path.relative_to(path)
                # Prune excluded directories in place
                dirnames[:] = sorted(
                    d for d in dirnames if not files_config.is_excluded(rel_root / d)
                )
                for filename in sorted(filenames):
                    candidate = root_path / filename
                    if not files_config.matches_extension(candidate):
                        continue
                    if files_config.is_excluded(rel_root / filename):
                        continue
                    _add(candidate)
        else:
            _add(path)

    return sorted(found)
