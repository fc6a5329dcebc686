"""Markdown index data models.

- IndexedFile: one indexed workspace file as returned by queries
"""

from typing import Any

from pydantic import BaseModel, Field


class IndexedFile(BaseModel):
    """An indexed file.

    ``file_path`` is relative to the workspace root; ``folder`` is the
    workspace directory name (``user-<id>``).
    """

    id: str
    folder: str
    file_path: str
    url_path: str | None = None
    extension: str = ""
    filetype: str | None = None
    content: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    indexed_at: int

    @property
    def name(self) -> str:
        """File name without directories."""
        return self.file_path.rsplit("/", 1)[-1]

    @property
    def title(self) -> str | None:
        title = self.metadata.get("title")
        return str(title) if title is not None else None
