"""
Application Settings Management

All runtime configuration (API credential, ports, workspace paths, index
database, assistant limits) lives here.

IMPORTANT:
- Secrets must come from environment variables or the .env file, never from code
- Create a .env file (based on .env.example) for local development: cp .env.example .env
- Production deployments should use real environment variables
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

# backend/mdspace/settings.py -> backend/mdspace/ -> backend/ -> project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

ENV_FILE = PROJECT_ROOT / ".env"
ENV_EXAMPLE_FILE = PROJECT_ROOT / ".env.example"

# Workspace layout
WORKSPACE_DIR_PREFIX = "user-"
WORKSPACE_SUBDIRS = ("project", "docs", "notes", "uploads")
UPLOADS_SUBDIR = "uploads"
README_NAME = "README.md"

# Tools the assistant may use inside a workspace
DEFAULT_ALLOWED_TOOLS = ["Read", "Write", "Edit", "Bash", "Grep", "Glob"]

ENV_EXAMPLE_CONTENT = """# Anthropic API Key
ANTHROPIC_API_KEY=your_api_key_here

# Server Port
PORT=3001"""


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ==================== Environment ====================
    # "local-dev" | "test" | "production"
    environment: str = "local-dev"

    # ==================== Server ====================
    host: str = "0.0.0.0"
    port: int = 3001
    debug: bool = False

    # ==================== Frontend (used to build CORS origins) ====================
    frontend_host: str = "localhost"
    frontend_port: int = 3000

    # ==================== API ====================
    api_prefix: str = "/api"

    # ==================== Assistant ====================
    # Read from ANTHROPIC_API_KEY
    anthropic_api_key: str = ""

    # "cli": run the Claude Code CLI
    # "mock": canned replies, no network (tests / offline development)
    assistant_backend: Literal["cli", "mock"] = "cli"
    assistant_cli_path: str = "claude"
    assistant_max_turns: int = 5
    assistant_allowed_tools: list[str] = Field(default_factory=lambda: list(DEFAULT_ALLOWED_TOOLS))

    # ==================== Timeouts (seconds) ====================
    assistant_timeout: float = 300
    indexer_timeout: float = 30

    # ==================== Paths ====================
    # Empty means "derive from PROJECT_ROOT"
    workspaces_dir: str = ""
    data_dir: str = ""
    logs_subdir: str = "logs"

    # ==================== Markdown index ====================
    # Explicit SQLAlchemy URL; empty means sqlite file in data_dir
    index_database_url: str = ""
    index_database_name: str = "workspaces.db"

    # "walk": list files by walking the workspace directory
    # "index": list files from the markdown index
    file_listing_backend: Literal["walk", "index"] = "walk"

    # ==================== Logging ====================
    log_max_bytes: int = 20 * 1024 * 1024  # 20MB
    log_backup_count: int = 5

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==================== Computed ====================

    @computed_field  # type: ignore[misc]
    @property
    def cors_origins(self) -> list[str]:
        """
        Build CORS origins from the frontend host/port.

        Returns:
            List of CORS origin URLs
        """
        frontend_url = f"http://{self.frontend_host}:{self.frontend_port}"
        return [
            frontend_url,
            f"http://127.0.0.1:{self.frontend_port}",
            f"http://localhost:{self.frontend_port}",
        ]

    # ==================== Validation ====================

    def validate_configuration(self) -> None:
        """
        Validate configuration settings

        Raises:
            ValueError: If configuration is invalid
        """
        if self.port == self.frontend_port:
            raise ValueError(
                f"Port conflict: Backend port {self.port} conflicts with "
                f"frontend port {self.frontend_port}"
            )
        if self.assistant_max_turns < 1:
            raise ValueError("assistant_max_turns must be at least 1")

    def is_assistant_configured(self) -> bool:
        """Check whether the assistant credential is set."""
        return bool(self.anthropic_api_key.strip())

    # ==================== Paths ====================

    @classmethod
    def get_project_root(cls) -> Path:
        """Absolute path of the project root (where .env lives)."""
        return PROJECT_ROOT

    def get_workspaces_root(self) -> Path:
        """
        Root directory holding every user workspace.

        - default: {project_root}/workspaces/
        """
        if self.workspaces_dir:
            return Path(self.workspaces_dir).expanduser().resolve()
        return self.get_project_root() / "workspaces"

    def get_data_root(self) -> Path:
        """Directory for the index database (default: project root)."""
        if self.data_dir:
            return Path(self.data_dir).expanduser().resolve()
        return self.get_project_root()

    def get_logs_root(self) -> Path:
        """Log directory: {data_root}/logs/"""
        return self.get_data_root() / self.logs_subdir

    def get_index_database_url(self) -> str:
        """SQLAlchemy URL of the markdown index.

        - test: sqlite in-memory database
        - otherwise: sqlite:///{data_root}/workspaces.db
        """
        if self.index_database_url:
            return self.index_database_url
        if self.environment == "test":
            return "sqlite:///:memory:"
        return f"sqlite:///{self.get_data_root() / self.index_database_name}"


# Global settings instance
settings = Settings()
