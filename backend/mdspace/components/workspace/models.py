"""Workspace data models.

- FileEntry: one file found in a workspace (relative path + name)
- UploadedFile: result of storing an upload under uploads/
"""

from pydantic import BaseModel


class FileEntry(BaseModel):
    """A file inside a workspace.

    ``file_path`` is relative to the workspace root, POSIX separators.
    """

    file_path: str
    name: str


class UploadedFile(BaseModel):
    """A stored upload.

    ``filename`` is the on-disk name (``<epoch-ms>-<original name>``),
    ``path`` the absolute path on the server.
    """

    filename: str
    originalName: str
    path: str
    size: int
