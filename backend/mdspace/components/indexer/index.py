"""Markdown index backed by SQLAlchemy.

Scans a workspace folder, stores one row per file (content, frontmatter
metadata and tags for markdown files) and answers folder/tag queries.

Lifecycle:
1. MarkdownIndex(database_url).init()   -> creates engine and tables
2. index_folder(path, folder)           -> (re)index a workspace
3. get_files(folder, tags) / get_tags() -> queries
4. shutdown()                           -> disposes the engine

All methods are synchronous; async callers run them in a worker thread.
"""

import hashlib
import threading
from pathlib import Path
from typing import Protocol

from sqlalchemy import delete, select
from sqlalchemy.orm import selectinload

from mdspace.components.indexer.models import IndexedFile
from mdspace.components.indexer.parser import is_markdown, parse_markdown
from mdspace.db import (
    Base,
    FileModel,
    FileTagModel,
    check_connection,
    create_index_engine,
    create_session_factory,
    session_scope,
)
from mdspace.exceptions import IndexerUnavailableError
from mdspace.utils import get_logger, get_timestamp_ms
from mdspace.utils.fs import iter_workspace_files, to_posix_relative

logger = get_logger(__name__)


class IndexerProtocol(Protocol):
    """Interface the workspace manager needs from an index."""

    @property
    def is_ready(self) -> bool: ...

    def init(self) -> None: ...
    def shutdown(self) -> None: ...

    def index_folder(self, folder_path: Path, folder: str | None = None) -> int: ...
    def get_files(
        self,
        folder: str | None = None,
        tags: list[str] | None = None,
        extensions: list[str] | None = None,
    ) -> list[IndexedFile]: ...
    def get_tags(self, folder: str | None = None) -> list[str]: ...


def make_file_id(folder: str, file_path: str) -> str:
    """Stable id for a file: sha1 of ``folder/file_path``."""
    return hashlib.sha1(f"{folder}/{file_path}".encode()).hexdigest()


def compute_url_path(file_path: str, extension: str) -> str:
    """URL path of a file.

    Markdown files lose their extension and ``index`` pages collapse onto
    their directory; other files keep their path.

    Examples:
        compute_url_path("docs/intro.md", "md") -> "docs/intro"
        compute_url_path("docs/index.md", "md") -> "docs"
        compute_url_path("project/app.py", "py") -> "project/app.py"
    """
    if not is_markdown(extension):
        return file_path

    stem = file_path[: -(len(extension) + 1)]
    if stem == "index":
        return ""
    if stem.endswith("/index"):
        return stem[: -len("/index")]
    return stem


class MarkdownIndex:
    """SQLite-backed index of workspace files.

    Thread-safe: a reentrant lock serializes every database operation so a
    shared in-memory database behaves under concurrent requests.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.echo = echo
        self._engine = None
        self._session_factory = None
        self._lock = threading.RLock()

    @property
    def is_ready(self) -> bool:
        return self._session_factory is not None

    def init(self) -> None:
        """Create the engine and tables. Idempotent."""
        with self._lock:
            if self.is_ready:
                return
            engine = create_index_engine(self.database_url, echo=self.echo)
            Base.metadata.create_all(bind=engine)
            if not check_connection(engine):
                engine.dispose()
                raise IndexerUnavailableError("Markdown index database is not reachable")
            self._engine = engine
            self._session_factory = create_session_factory(engine)
            logger.info("Markdown index initialized")

    def shutdown(self) -> None:
        """Dispose the engine. Safe to call when not initialized."""
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
                logger.info("Markdown index closed")
            self._engine = None
            self._session_factory = None

    def _require_ready(self) -> None:
        if not self.is_ready:
            raise IndexerUnavailableError("Markdown index not ready")

    # ==================== Indexing ====================

    def index_folder(self, folder_path: Path, folder: str | None = None) -> int:
        """Replace the index rows of one folder with a fresh scan.

        Args:
            folder_path: Directory to scan
            folder: Key stored with each row (default: directory name)

        Returns:
            Number of files indexed
        """
        self._require_ready()

        root = Path(folder_path).resolve()
        folder = folder or root.name
        now = get_timestamp_ms()

        records: list[FileModel] = []
        if root.is_dir():
            for path in iter_workspace_files(root):
                record = self._build_record(path, root, folder, now)
                if record is not None:
                    records.append(record)

        with self._lock, session_scope(self._session_factory) as db:
            folder_ids = select(FileModel.id).where(FileModel.folder == folder)
            db.execute(delete(FileTagModel).where(FileTagModel.file_id.in_(folder_ids)))
            db.execute(delete(FileModel).where(FileModel.folder == folder))
            db.add_all(records)

        logger.debug(f"Indexed folder {folder}: {len(records)} files")
        return len(records)

    def _build_record(self, path: Path, root: Path, folder: str, now: int) -> FileModel | None:
        file_path = to_posix_relative(path, root)
        extension = path.suffix[1:].lower() if path.suffix else ""

        record = FileModel(
            id=make_file_id(folder, file_path),
            folder=folder,
            file_path=file_path,
            url_path=compute_url_path(file_path, extension),
            extension=extension,
            indexed_at=now,
        )

        if is_markdown(extension):
            try:
                text = path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                # Deleted or unreadable between the walk and the read
                logger.warning(f"Skipping {path} while indexing: {e}")
                return None
            parsed = parse_markdown(text)
            record.content = text
            record.metadata_json = parsed.metadata
            record.filetype = parsed.filetype
            record.tags = [FileTagModel(tag=tag) for tag in parsed.tags]

        return record

    # ==================== Queries ====================

    def get_files(
        self,
        folder: str | None = None,
        tags: list[str] | None = None,
        extensions: list[str] | None = None,
    ) -> list[IndexedFile]:
        """Query indexed files.

        Args:
            folder: Only files of this folder
            tags: Files carrying at least one of these tags
            extensions: Only these extensions (without dot)

        Returns:
            Matching files ordered by folder and path
        """
        self._require_ready()

        stmt = select(FileModel).options(selectinload(FileModel.tags))
        if folder:
            stmt = stmt.where(FileModel.folder == folder)
        if tags:
            tagged = select(FileTagModel.file_id).where(FileTagModel.tag.in_(tags))
            stmt = stmt.where(FileModel.id.in_(tagged))
        if extensions:
            stmt = stmt.where(FileModel.extension.in_([e.lower().lstrip(".") for e in extensions]))
        stmt = stmt.order_by(FileModel.folder, FileModel.file_path)

        with self._lock, session_scope(self._session_factory) as db:
            rows = db.execute(stmt).scalars().all()
            return [self._to_indexed_file(row) for row in rows]

    def get_tags(self, folder: str | None = None) -> list[str]:
        """Distinct tags, optionally limited to one folder."""
        self._require_ready()

        stmt = select(FileTagModel.tag).distinct()
        if folder:
            stmt = stmt.join(FileModel, FileModel.id == FileTagModel.file_id).where(FileModel.folder == folder)
        stmt = stmt.order_by(FileTagModel.tag)

        with self._lock, session_scope(self._session_factory) as db:
            return list(db.execute(stmt).scalars().all())

    @staticmethod
    def _to_indexed_file(row: FileModel) -> IndexedFile:
        return IndexedFile(
            id=row.id,
            folder=row.folder,
            file_path=row.file_path,
            url_path=row.url_path,
            extension=row.extension or "",
            filetype=row.filetype,
            content=row.content,
            metadata=dict(row.metadata_json or {}),
            tags=sorted(t.tag for t in row.tags),
            indexed_at=row.indexed_at,
        )
