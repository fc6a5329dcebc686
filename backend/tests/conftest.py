#!/usr/bin/env python
"""
pytest configuration file

This file contains shared fixtures for all tests.
"""

import os
import tempfile
from pathlib import Path

# Must run before mdspace is imported: the global settings (used by logging)
# read these at import time.
_TEST_DATA_DIR = tempfile.mkdtemp(prefix="mdspace-test-")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATA_DIR", _TEST_DATA_DIR)
os.environ.setdefault("WORKSPACES_DIR", str(Path(_TEST_DATA_DIR) / "workspaces"))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from mdspace.components.assistant import MockAssistantClient  # noqa: E402
from mdspace.components.indexer import IndexedFile, MarkdownIndex  # noqa: E402
from mdspace.components.workspace import WorkspaceManager  # noqa: E402
from mdspace.exceptions import IndexerUnavailableError  # noqa: E402
from mdspace.main import create_app  # noqa: E402
from mdspace.settings import Settings  # noqa: E402


class FakeIndex:
    """In-memory stand-in for MarkdownIndex.

    Records index_folder calls and serves preset files.
    """

    def __init__(self, files: list[IndexedFile] | None = None, ready: bool = True):
        self.files = files or []
        self.ready = ready
        self.indexed: list[tuple[Path, str | None]] = []
        self.init_calls = 0
        self.shutdown_calls = 0

    @property
    def is_ready(self) -> bool:
        return self.ready

    def init(self) -> None:
        self.init_calls += 1

    def shutdown(self) -> None:
        self.shutdown_calls += 1

    def index_folder(self, folder_path: Path, folder: str | None = None) -> int:
        if not self.ready:
            raise IndexerUnavailableError("Markdown index not ready")
        self.indexed.append((Path(folder_path), folder))
        return 0

    def get_files(self, folder=None, tags=None, extensions=None) -> list[IndexedFile]:
        if not self.ready:
            raise IndexerUnavailableError("Markdown index not ready")
        files = [f for f in self.files if folder is None or f.folder == folder]
        if tags:
            files = [f for f in files if set(f.tags) & set(tags)]
        return files

    def get_tags(self, folder=None) -> list[str]:
        return sorted({t for f in self.get_files(folder=folder) for t in f.tags})


def make_indexed_file(folder: str, file_path: str, content: str | None = None, **kwargs) -> IndexedFile:
    """Build an IndexedFile for FakeIndex."""
    return IndexedFile(
        id=f"{folder}/{file_path}",
        folder=folder,
        file_path=file_path,
        content=content,
        indexed_at=0,
        **kwargs,
    )


@pytest.fixture
def workspaces_root(tmp_path: Path) -> Path:
    """Empty workspaces directory."""
    root = tmp_path / "workspaces"
    root.mkdir()
    return root


@pytest.fixture
def test_settings(tmp_path: Path, workspaces_root: Path) -> Settings:
    """Settings isolated from the environment and .env file."""
    return Settings(
        _env_file=None,
        environment="test",
        workspaces_dir=str(workspaces_root),
        data_dir=str(tmp_path / "data"),
        index_database_url="sqlite:///:memory:",
        anthropic_api_key="test-api-key",
        assistant_backend="mock",
        assistant_timeout=5,
        indexer_timeout=5,
    )


@pytest.fixture
def markdown_index():
    """Initialized in-memory markdown index."""
    index = MarkdownIndex("sqlite:///:memory:")
    index.init()
    yield index
    index.shutdown()


@pytest.fixture
def fake_index() -> FakeIndex:
    return FakeIndex()


@pytest.fixture
def manager(workspaces_root: Path, markdown_index: MarkdownIndex) -> WorkspaceManager:
    """WorkspaceManager over a temp directory with a real in-memory index."""
    return WorkspaceManager(workspaces_root, index=markdown_index, indexer_timeout=5)


@pytest.fixture
def mock_assistant() -> MockAssistantClient:
    return MockAssistantClient()


@pytest.fixture
def client(test_settings: Settings, mock_assistant: MockAssistantClient):
    """TestClient running the app lifespan with isolated settings."""
    app = create_app(
        app_settings=test_settings,
        assistant_client=mock_assistant,
        write_env_example=False,
    )
    with TestClient(app) as test_client:
        yield test_client
