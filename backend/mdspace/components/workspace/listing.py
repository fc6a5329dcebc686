"""File listing backends.

Two interchangeable ways to list a workspace:

- WalkFileLister: walks the directory tree on disk
- IndexedFileLister: asks the markdown index for the workspace folder

Both skip hidden directories. Selected by settings.file_listing_backend.

Usage:
    lister = build_file_lister("walk")
    entries = lister.list_files(workspace_root, "user-alice")
"""

from pathlib import Path
from typing import Protocol

from mdspace.components.indexer import IndexerProtocol
from mdspace.components.workspace.models import FileEntry
from mdspace.exceptions import IndexerUnavailableError
from mdspace.utils import get_logger
from mdspace.utils.fs import iter_workspace_files, to_posix_relative

logger = get_logger(__name__)


class FileLister(Protocol):
    """Protocol defining the file listing interface."""

    # True when list_files queries the markdown index (bounded by indexer_timeout)
    needs_index: bool

    def list_files(self, root: Path, folder: str) -> list[FileEntry]: ...


class WalkFileLister:
    """List files by walking the workspace directory."""

    needs_index = False

    def list_files(self, root: Path, folder: str) -> list[FileEntry]:
        if not root.is_dir():
            return []
        return [
            FileEntry(file_path=to_posix_relative(path, root), name=path.name)
            for path in iter_workspace_files(root)
        ]


class IndexedFileLister:
    """List files recorded in the markdown index for the workspace folder."""

    needs_index = True

    def __init__(self, index: IndexerProtocol | None):
        self._index = index

    def list_files(self, root: Path, folder: str) -> list[FileEntry]:
        if self._index is None or not self._index.is_ready:
            raise IndexerUnavailableError("Markdown index not ready")
        return [
            FileEntry(file_path=f.file_path, name=f.name)
            for f in self._index.get_files(folder=folder)
        ]


def build_file_lister(backend: str, index: IndexerProtocol | None = None) -> FileLister:
    """Create the lister for a backend name ("walk" or "index").

    Raises:
        ValueError: Unknown backend name
    """
    if backend == "walk":
        lister: FileLister = WalkFileLister()
    elif backend == "index":
        lister = IndexedFileLister(index)
    else:
        raise ValueError(f"Unknown file listing backend: {backend}")

    logger.info(f"File listing backend: {backend}")
    return lister
