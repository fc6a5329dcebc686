"""Tests for MarkdownIndex.

Covers:
- Lifecycle (init / shutdown / not-ready errors)
- Folder indexing (replacement, hidden directories, url paths)
- Queries by folder, tags and extension
"""

from pathlib import Path

import pytest

from mdspace.components.indexer import MarkdownIndex, compute_url_path, make_file_id
from mdspace.exceptions import IndexerUnavailableError


def _write(root: Path, rel: str, text: str) -> None:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def folder(tmp_path: Path) -> Path:
    root = tmp_path / "user-alice"
    _write(root, "README.md", "# Workspace for User alice\n")
    _write(root, "docs/guide.md", "---\ntitle: Guide\ntags: [howto, python]\n---\nSteps.\n")
    _write(root, "docs/index.md", "# Docs home\n")
    _write(root, "notes/todo.md", "---\ntags: todo\n---\n- [ ] write tests\n")
    _write(root, "project/app.py", "print('hello')\n")
    _write(root, ".git/HEAD", "ref: refs/heads/main\n")
    _write(root, "project/.venv/lib.md", "# hidden\n")
    return root


class TestLifecycle:
    """init / shutdown."""

    def test_not_ready_before_init(self):
        index = MarkdownIndex("sqlite:///:memory:")
        assert not index.is_ready
        with pytest.raises(IndexerUnavailableError):
            index.get_files()

    def test_init_is_idempotent(self):
        index = MarkdownIndex("sqlite:///:memory:")
        index.init()
        index.init()
        assert index.is_ready
        index.shutdown()
        assert not index.is_ready

    def test_shutdown_without_init(self):
        MarkdownIndex("sqlite:///:memory:").shutdown()

    def test_file_database_persists(self, tmp_path: Path, folder: Path):
        """Rows survive a restart when the database is a file."""
        url = f"sqlite:///{tmp_path / 'index.db'}"
        index = MarkdownIndex(url)
        index.init()
        index.index_folder(folder, "user-alice")
        index.shutdown()

        reopened = MarkdownIndex(url)
        reopened.init()
        try:
            assert len(reopened.get_files(folder="user-alice")) == 5
        finally:
            reopened.shutdown()


class TestIndexFolder:
    """Indexing a workspace folder."""

    def test_indexes_visible_files(self, markdown_index: MarkdownIndex, folder: Path):
        count = markdown_index.index_folder(folder, "user-alice")

        paths = [f.file_path for f in markdown_index.get_files(folder="user-alice")]
        assert count == 5
        assert paths == ["README.md", "docs/guide.md", "docs/index.md", "notes/todo.md", "project/app.py"]

    def test_folder_defaults_to_directory_name(self, markdown_index: MarkdownIndex, folder: Path):
        markdown_index.index_folder(folder)
        assert markdown_index.get_files(folder="user-alice")

    def test_markdown_metadata_and_content(self, markdown_index: MarkdownIndex, folder: Path):
        markdown_index.index_folder(folder, "user-alice")
        files = {f.file_path: f for f in markdown_index.get_files(folder="user-alice")}

        guide = files["docs/guide.md"]
        assert guide.title == "Guide"
        assert guide.tags == ["howto", "python"]
        assert "Steps." in guide.content
        assert guide.url_path == "docs/guide"
        assert guide.id == make_file_id("user-alice", "docs/guide.md")

        assert files["docs/index.md"].url_path == "docs"
        assert files["README.md"].title == "Workspace for User alice"

    def test_non_markdown_has_no_content(self, markdown_index: MarkdownIndex, folder: Path):
        markdown_index.index_folder(folder, "user-alice")
        app = next(f for f in markdown_index.get_files(folder="user-alice") if f.file_path == "project/app.py")

        assert app.extension == "py"
        assert app.content is None
        assert app.metadata == {}

    def test_reindex_replaces_rows(self, markdown_index: MarkdownIndex, folder: Path):
        """Deleted files disappear and edits show up after re-indexing."""
        markdown_index.index_folder(folder, "user-alice")
        (folder / "notes" / "todo.md").unlink()
        _write(folder, "docs/guide.md", "---\ntags: [rewritten]\n---\n")

        markdown_index.index_folder(folder, "user-alice")

        files = {f.file_path: f for f in markdown_index.get_files(folder="user-alice")}
        assert "notes/todo.md" not in files
        assert files["docs/guide.md"].tags == ["rewritten"]
        assert markdown_index.get_tags(folder="user-alice") == ["rewritten"]

    def test_folders_are_isolated(self, markdown_index: MarkdownIndex, folder: Path, tmp_path: Path):
        other = tmp_path / "user-bob"
        _write(other, "README.md", "# bob\n")

        markdown_index.index_folder(folder, "user-alice")
        markdown_index.index_folder(other, "user-bob")
        markdown_index.index_folder(other, "user-bob")

        assert len(markdown_index.get_files(folder="user-alice")) == 5
        assert [f.file_path for f in markdown_index.get_files(folder="user-bob")] == ["README.md"]

    def test_missing_folder_clears_rows(self, markdown_index: MarkdownIndex, folder: Path, tmp_path: Path):
        markdown_index.index_folder(folder, "user-alice")
        assert markdown_index.index_folder(tmp_path / "gone", "user-alice") == 0
        assert markdown_index.get_files(folder="user-alice") == []


class TestQueries:
    """get_files / get_tags filters."""

    def test_filter_by_any_tag(self, markdown_index: MarkdownIndex, folder: Path):
        markdown_index.index_folder(folder, "user-alice")

        files = markdown_index.get_files(folder="user-alice", tags=["todo", "python"])

        assert [f.file_path for f in files] == ["docs/guide.md", "notes/todo.md"]

    def test_filter_by_extension(self, markdown_index: MarkdownIndex, folder: Path):
        markdown_index.index_folder(folder, "user-alice")

        files = markdown_index.get_files(folder="user-alice", extensions=[".py"])

        assert [f.file_path for f in files] == ["project/app.py"]

    def test_get_tags(self, markdown_index: MarkdownIndex, folder: Path):
        markdown_index.index_folder(folder, "user-alice")
        assert markdown_index.get_tags(folder="user-alice") == ["howto", "python", "todo"]
        assert markdown_index.get_tags(folder="user-nobody") == []


@pytest.mark.parametrize(
    "file_path, extension, expected",
    [
        ("docs/intro.md", "md", "docs/intro"),
        ("docs/index.md", "md", "docs"),
        ("index.md", "md", ""),
        ("project/app.py", "py", "project/app.py"),
        ("notes/page.mdx", "mdx", "notes/page"),
    ],
)
def test_compute_url_path(file_path, extension, expected):
    assert compute_url_path(file_path, extension) == expected
