"""Filesystem helpers shared by the workspace and the index."""

import os
from collections.abc import Iterator
from pathlib import Path


def is_hidden(name: str) -> bool:
    """Dot-prefixed names are hidden."""
    return name.startswith(".")


def iter_workspace_files(root: Path) -> Iterator[Path]:
    """Yield every regular file under ``root``, never descending into hidden directories.

    Symlinked directories are not followed.
    """
    for dirpath, dirnames, filenames in os.walk(root):
        # Prune in place so os.walk skips them
        dirnames[:] = sorted(d for d in dirnames if not is_hidden(d))
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if path.is_file():
                yield path


def to_posix_relative(path: Path, root: Path) -> str:
    """``path`` relative to ``root`` with forward slashes."""
    return path.relative_to(root).as_posix()
