"""Tests for the file listing backends."""

import time
from pathlib import Path

import pytest

from conftest import FakeIndex, make_indexed_file
from mdspace.components.indexer import MarkdownIndex
from mdspace.components.workspace import (
    FileEntry,
    IndexedFileLister,
    WalkFileLister,
    WorkspaceManager,
    build_file_lister,
)
from mdspace.exceptions import IndexerUnavailableError


def _populate(root: Path) -> None:
    for rel in ("README.md", "docs/a.md", "project/src/main.py", ".hidden/secret.md", "notes/.trash/old.md"):
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(rel)


class TestWalkFileLister:
    """Directory walk backend."""

    def test_lists_relative_paths(self, tmp_path: Path):
        _populate(tmp_path)

        entries = WalkFileLister().list_files(tmp_path, "user-x")

        assert sorted(e.file_path for e in entries) == ["README.md", "docs/a.md", "project/src/main.py"]
        assert {e.name for e in entries} == {"README.md", "a.md", "main.py"}

    def test_missing_root(self, tmp_path: Path):
        assert WalkFileLister().list_files(tmp_path / "missing", "user-x") == []


class TestIndexedFileLister:
    """Markdown index backend."""

    def test_lists_index_rows_for_folder(self, tmp_path: Path):
        index = FakeIndex(
            files=[
                make_indexed_file("user-x", "docs/a.md"),
                make_indexed_file("user-y", "docs/b.md"),
            ]
        )

        entries = IndexedFileLister(index).list_files(tmp_path, "user-x")

        assert [e.model_dump() for e in entries] == [{"file_path": "docs/a.md", "name": "a.md"}]

    @pytest.mark.parametrize("index", [None, FakeIndex(ready=False)])
    def test_unavailable_index(self, tmp_path: Path, index):
        with pytest.raises(IndexerUnavailableError):
            IndexedFileLister(index).list_files(tmp_path, "user-x")


class TestBackendsAgree:
    """Both backends see the same workspace the same way."""

    @pytest.mark.asyncio
    async def test_walk_and_index_match(self, workspaces_root: Path, markdown_index: MarkdownIndex):
        walk_manager = WorkspaceManager(workspaces_root, index=markdown_index, file_lister=WalkFileLister())
        index_manager = WorkspaceManager(
            workspaces_root, index=markdown_index, file_lister=IndexedFileLister(markdown_index)
        )
        root = await walk_manager.ensure("alice")
        _populate(root)

        walked = sorted(e.file_path for e in await walk_manager.list_files("alice"))
        indexed = sorted(e.file_path for e in await index_manager.list_files("alice"))

        assert walked == indexed
        assert "notes/.trash/old.md" not in indexed


def test_build_file_lister():
    assert isinstance(build_file_lister("walk"), WalkFileLister)
    assert isinstance(build_file_lister("index", FakeIndex()), IndexedFileLister)
    with pytest.raises(ValueError):
        build_file_lister("ftp")


class _SlowLister:
    """Lister that blocks longer than the manager's index timeout."""

    def __init__(self, needs_index: bool):
        self.needs_index = needs_index

    def list_files(self, root: Path, folder: str) -> list[FileEntry]:
        time.sleep(0.3)
        return [FileEntry(file_path="README.md", name="README.md")]


class TestListingTimeout:
    """The lister declares whether its calls are bounded by indexer_timeout."""

    @pytest.mark.asyncio
    async def test_index_backed_lister_times_out(self, workspaces_root: Path):
        manager = WorkspaceManager(workspaces_root, file_lister=_SlowLister(needs_index=True), indexer_timeout=0.05)

        with pytest.raises(IndexerUnavailableError):
            await manager.list_files("alice")

    @pytest.mark.asyncio
    async def test_disk_lister_not_bounded(self, workspaces_root: Path):
        manager = WorkspaceManager(workspaces_root, file_lister=_SlowLister(needs_index=False), indexer_timeout=0.05)

        entries = await manager.list_files("alice")

        assert [e.file_path for e in entries] == ["README.md"]
