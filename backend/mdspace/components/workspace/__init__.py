"""Workspace Management Module.

Per-user workspace directories used as the sandbox for file operations and
as the working directory of the assistant.

Components:
- models.py: FileEntry, UploadedFile
- listing.py: file listing backends (directory walk / markdown index)
- manager.py: WorkspaceManager (ensure, resolve, list, read, write, search)

Usage:
    from mdspace.components.workspace import WorkspaceManager

    manager = WorkspaceManager.from_settings(settings, index=index)
    root = await manager.ensure("alice")
    content = await manager.read_file("alice", "README.md")
"""

from mdspace.components.workspace.listing import (
    FileLister,
    IndexedFileLister,
    WalkFileLister,
    build_file_lister,
)
from mdspace.components.workspace.manager import (
    README_TEMPLATE,
    WorkspaceManager,
    render_readme,
    validate_user_id,
)
from mdspace.components.workspace.models import FileEntry, UploadedFile

__all__ = [
    # Models
    "FileEntry",
    "UploadedFile",
    # Listing
    "FileLister",
    "WalkFileLister",
    "IndexedFileLister",
    "build_file_lister",
    # Manager
    "WorkspaceManager",
    "README_TEMPLATE",
    "render_readme",
    "validate_user_id",
]
