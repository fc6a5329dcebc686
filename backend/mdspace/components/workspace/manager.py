"""Per-user workspace management.

Every API request resolves to a workspace through this manager:

{workspaces_root}/
└── user-{user_id}/
    ├── README.md      (seeded once, never overwritten)
    ├── project/
    ├── docs/
    ├── notes/
    └── uploads/

Responsibilities:
- Create the directory skeleton lazily and idempotently (``ensure``)
- Keep every file path inside its workspace (``resolve``)
- List, read and write workspace files
- Register workspaces with the markdown index and search it

Blocking disk and index work runs in worker threads so the event loop keeps
serving other requests; index calls are bounded by ``indexer_timeout``.
"""

import asyncio
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar
from urllib.parse import unquote

from sqlalchemy.exc import SQLAlchemyError

from mdspace.components.indexer import IndexedFile, IndexerProtocol
from mdspace.components.workspace.listing import FileLister, WalkFileLister, build_file_lister
from mdspace.components.workspace.models import FileEntry, UploadedFile
from mdspace.exceptions import (
    AccessDeniedError,
    IndexerUnavailableError,
    InvalidUserIdError,
    RequestValidationError,
    WorkspaceFileNotFoundError,
    WorkspaceUnavailableError,
)
from mdspace.settings import (
    README_NAME,
    UPLOADS_SUBDIR,
    WORKSPACE_DIR_PREFIX,
    WORKSPACE_SUBDIRS,
    Settings,
)
from mdspace.utils import get_logger, get_timestamp_ms

logger = get_logger(__name__)

T = TypeVar("T")

README_TEMPLATE = """# Workspace for User {user_id}

Welcome to your personal development workspace!

## Folders
- `project/` - Your code files
- `docs/` - Documentation
- `notes/` - Personal notes
- `uploads/` - Uploaded files

## Getting Started
Start chatting with Claude to build your application!
"""


def validate_user_id(user_id: str | None) -> str:
    """Reject user ids that are blank or could leave the workspaces directory.

    Raises:
        InvalidUserIdError: Empty id, or id containing a path separator or NUL
    """
    if user_id is None or not str(user_id).strip():
        raise InvalidUserIdError("userId is required")
    if any(ch in user_id for ch in ("/", "\\", "\x00")):
        raise InvalidUserIdError(f"Invalid userId: {user_id}")
    return user_id


def render_readme(user_id: str) -> str:
    """Seed README content for a new workspace."""
    return README_TEMPLATE.format(user_id=user_id)


class WorkspaceManager:
    """Creates, resolves and queries per-user workspaces."""

    def __init__(
        self,
        workspaces_root: Path,
        index: IndexerProtocol | None = None,
        file_lister: FileLister | None = None,
        indexer_timeout: float = 30,
    ):
        self.workspaces_root = Path(workspaces_root)
        self.index = index
        self.file_lister = file_lister or WalkFileLister()
        self.indexer_timeout = indexer_timeout

    @classmethod
    def from_settings(cls, cfg: Settings, index: IndexerProtocol | None = None) -> "WorkspaceManager":
        """Build a manager wired the way ``cfg`` describes."""
        return cls(
            workspaces_root=cfg.get_workspaces_root(),
            index=index,
            file_lister=build_file_lister(cfg.file_listing_backend, index),
            indexer_timeout=cfg.indexer_timeout,
        )

    # ==================== Paths ====================

    @staticmethod
    def folder_name(user_id: str) -> str:
        """Directory name (and index folder key) of a user's workspace."""
        return f"{WORKSPACE_DIR_PREFIX}{validate_user_id(user_id)}"

    def workspace_root(self, user_id: str) -> Path:
        """Deterministic workspace path for a user (not created)."""
        return self.workspaces_root / self.folder_name(user_id)

    def resolve(self, user_id: str, relative_path: str | None) -> Path:
        """Resolve a path inside a user's workspace.

        The path is used exactly as given (callers pass already-decoded
        strings), joined onto the workspace root and canonicalized (symlinks
        followed, ``..`` collapsed) before the containment check. Its
        percent-decoded form must stay inside the workspace as well, but is
        never used to touch the disk.

        Raises:
            RequestValidationError: Empty path
            AccessDeniedError: Result is not a strict descendant of the root
        """
        if relative_path is None or not relative_path.strip():
            raise RequestValidationError("path is required")

        root = self.workspace_root(user_id).resolve()
        target = self._contained(root, user_id, relative_path)
        self._contained(root, user_id, unquote(relative_path))
        return target

    @staticmethod
    def _contained(root: Path, user_id: str, relative_path: str) -> Path:
        """Canonical ``root / relative_path``, which must lie strictly below root."""
        if "\x00" in relative_path:
            raise AccessDeniedError()

        target = (root / relative_path).resolve(strict=False)
        try:
            target.relative_to(root)
        except ValueError:
            logger.warning(f"Path escapes workspace for user {user_id}: {relative_path!r}")
            raise AccessDeniedError() from None

        if target == root:
            raise AccessDeniedError()
        return target

    # ==================== Lifecycle ====================

    async def ensure(self, user_id: str) -> Path:
        """Make sure the workspace skeleton exists and is indexed.

        Safe to call on every request: directories are created with
        ``exist_ok`` and the README is only written when absent.

        Returns:
            Workspace root path

        Raises:
            InvalidUserIdError: Bad user id
            WorkspaceUnavailableError: Storage failure
        """
        root = self.workspace_root(user_id)

        try:
            created = await asyncio.to_thread(self._create_skeleton, root, user_id)
        except OSError as e:
            logger.error(f"Failed to prepare workspace {root}: {e}")
            raise WorkspaceUnavailableError(f"Workspace storage unavailable: {e}") from e

        if created:
            logger.info(f"Created workspace for user {user_id}: {root}")

        await self._index_workspace(root, user_id)
        return root

    @staticmethod
    def _create_skeleton(root: Path, user_id: str) -> bool:
        """Create subdirectories and seed README. Returns True if README was new."""
        for subdir in WORKSPACE_SUBDIRS:
            (root / subdir).mkdir(parents=True, exist_ok=True)

        readme_path = root / README_NAME
        try:
            # "x" never clobbers a README written by a concurrent request
            with readme_path.open("x", encoding="utf-8") as f:
                f.write(render_readme(user_id))
        except FileExistsError:
            return False
        return True

    async def _index_workspace(self, root: Path, user_id: str) -> None:
        """(Re)register the workspace with the index, when one is ready.

        Index failures are logged, not raised: the workspace itself is usable
        without the index.
        """
        if self.index is None or not self.index.is_ready:
            return

        try:
            count = await self._run_index_call(self.index.index_folder, root, self.folder_name(user_id))
        except (IndexerUnavailableError, SQLAlchemyError, OSError) as e:
            logger.error(f"Error indexing workspace {root}: {e}")
            return
        logger.debug(f"Workspace {root.name} indexed ({count} files)")

    # ==================== Files ====================

    async def list_files(self, user_id: str) -> list[FileEntry]:
        """All files of a workspace (hidden directories skipped)."""
        root = await self.ensure(user_id)
        folder = self.folder_name(user_id)

        if self.file_lister.needs_index:
            return await self._run_index_call(self.file_lister.list_files, root, folder)
        return await asyncio.to_thread(self.file_lister.list_files, root, folder)

    async def read_file(self, user_id: str, relative_path: str) -> str:
        """Read a workspace file as UTF-8 text.

        Raises:
            AccessDeniedError: Path escapes the workspace
            WorkspaceFileNotFoundError: No such file
        """
        await self.ensure(user_id)
        target = self.resolve(user_id, relative_path)

        try:
            return await asyncio.to_thread(self._read_text, target, relative_path)
        except UnicodeDecodeError as e:
            raise RequestValidationError(f"File is not UTF-8 text: {relative_path}") from e

    @staticmethod
    def _read_text(target: Path, relative_path: str) -> str:
        if not target.is_file():
            raise WorkspaceFileNotFoundError(f"File not found: {relative_path}")
        try:
            return target.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise WorkspaceFileNotFoundError(f"File not found: {relative_path}") from e

    async def write_file(self, user_id: str, relative_path: str, content: str | bytes) -> int:
        """Write a workspace file atomically.

        Returns:
            File size in bytes
        """
        await self.ensure(user_id)
        target = self.resolve(user_id, relative_path)
        return await self._store(target, content)

    async def _store(self, target: Path, content: str | bytes) -> int:
        try:
            return await asyncio.to_thread(self._write_file_atomic, target, content)
        except OSError as e:
            logger.error(f"Failed to write {target}: {e}")
            raise WorkspaceUnavailableError(f"Workspace storage unavailable: {e}") from e

    @staticmethod
    def _write_file_atomic(path: Path, content: str | bytes, encoding: str = "utf-8") -> int:
        """Write via temp file + rename so readers never see a partial file."""
        path.parent.mkdir(parents=True, exist_ok=True)

        fd = None
        tmp_path = None
        try:
            fd, tmp_path_str = tempfile.mkstemp(
                dir=path.parent,
                suffix=".tmp",
                prefix=f".{path.name}.",
            )
            tmp_path = Path(tmp_path_str)

            os.write(fd, content.encode(encoding) if isinstance(content, str) else content)
            os.close(fd)
            fd = None

            tmp_path.replace(path)
            return path.stat().st_size
        except OSError:
            if fd is not None:
                os.close(fd)
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise

    async def save_upload(self, user_id: str, original_name: str | None, data: bytes) -> UploadedFile:
        """Store an uploaded file under ``uploads/<epoch-ms>-<name>``.

        Only the base name of the client-supplied file name is kept, stored
        verbatim (no percent-decoding).

        Raises:
            RequestValidationError: No usable file name
            AccessDeniedError: Target would land outside uploads/
        """
        safe_name = Path((original_name or "").replace("\\", "/")).name
        if not safe_name or safe_name in (".", "..") or "\x00" in safe_name:
            raise RequestValidationError("No file uploaded")

        root = await self.ensure(user_id)
        uploads_dir = (root / UPLOADS_SUBDIR).resolve()
        filename = f"{get_timestamp_ms()}-{safe_name}"
        target = uploads_dir / filename
        if target.parent != uploads_dir:
            raise AccessDeniedError()

        size = await self._store(target, data)

        logger.info(f"Stored upload for user {user_id}: {filename} ({size} bytes)")
        return UploadedFile(
            filename=filename,
            originalName=original_name or safe_name,
            path=str(target),
            size=size,
        )

    # ==================== Index queries ====================

    async def search(
        self,
        user_id: str,
        query: str | None = None,
        tags: list[str] | None = None,
    ) -> list[IndexedFile]:
        """Search a workspace through the index.

        The index filters by workspace folder and tags (any match); a free
        text query then keeps files whose content or title contains it,
        case-insensitively. Results are not ranked.

        Raises:
            IndexerUnavailableError: Index missing, not ready or timed out
        """
        index = self._require_index()
        await self.ensure(user_id)

        files = await self._run_index_call(
            index.get_files,
            folder=self.folder_name(user_id),
            tags=tags or None,
        )

        if not query:
            return files

        needle = query.lower()
        return [
            f for f in files
            if (f.content and needle in f.content.lower())
            or (f.title and needle in f.title.lower())
        ]

    async def list_tags(self, user_id: str) -> list[str]:
        """Distinct tags used in a workspace."""
        index = self._require_index()
        await self.ensure(user_id)
        return await self._run_index_call(index.get_tags, folder=self.folder_name(user_id))

    def _require_index(self) -> IndexerProtocol:
        if self.index is None or not self.index.is_ready:
            raise IndexerUnavailableError("Markdown index not ready")
        return self.index

    async def _run_index_call(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a blocking index call in a thread, bounded by ``indexer_timeout``."""
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(func, *args, **kwargs),
                timeout=self.indexer_timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Index call {getattr(func, '__name__', func)} timed out after {self.indexer_timeout}s")
            raise IndexerUnavailableError("Markdown index timed out") from e
