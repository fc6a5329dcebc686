"""SQLAlchemy ORM models for the markdown index.

Entity Hierarchy:
    File (one row per indexed workspace file) -> FileTag
"""

from sqlalchemy import (
    JSON,
    BigInteger,
    Column,
    ForeignKey,
    Index,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class FileModel(Base):
    """An indexed file inside one workspace folder.

    ``folder`` is the workspace directory name (``user-<id>``) and
    ``file_path`` is relative to it, POSIX separators.
    """

    __tablename__ = "files"

    id = Column(String(64), primary_key=True)
    folder = Column(String(255), nullable=False)
    file_path = Column(Text, nullable=False)
    url_path = Column(Text, nullable=True)
    extension = Column(String(32), nullable=False, default="")
    filetype = Column(String(64), nullable=True)  # frontmatter "type"
    content = Column(Text, nullable=True)  # markdown files only
    metadata_json = Column(JSON, nullable=True)
    indexed_at = Column(BigInteger, nullable=False)

    # Relationships
    tags = relationship("FileTagModel", back_populates="file", cascade="all, delete-orphan")

    # Indexes
    __table_args__ = (
        Index("idx_files_folder", "folder"),
        Index("idx_files_extension", "extension"),
    )

    def __repr__(self) -> str:
        return f"<File(folder={self.folder}, file_path={self.file_path})>"


class FileTagModel(Base):
    """Tag attached to a file through its frontmatter."""

    __tablename__ = "file_tags"

    file_id = Column(String(64), ForeignKey("files.id", ondelete="CASCADE"), primary_key=True)
    tag = Column(String(255), primary_key=True)

    file = relationship("FileModel", back_populates="tags")

    __table_args__ = (Index("idx_file_tags_tag", "tag"),)

    def __repr__(self) -> str:
        return f"<FileTag(file_id={self.file_id}, tag={self.tag})>"
