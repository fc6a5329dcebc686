"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError as FastAPIValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mdspace.api.v1.api import api_router
from mdspace.components.assistant import AssistantClient, build_assistant_client
from mdspace.components.indexer import IndexerProtocol, MarkdownIndex
from mdspace.components.workspace import WorkspaceManager
from mdspace.exceptions import MdspaceError
from mdspace.settings import ENV_EXAMPLE_CONTENT, ENV_EXAMPLE_FILE, ENV_FILE, Settings, settings
from mdspace.utils import get_logger, setup_logging

logger = get_logger(__name__)

SERVICE_NAME = "Claude + MarkdownDB Platform"
SERVICE_VERSION = "0.1.0"


def create_example_env() -> None:
    """Write .env.example when no .env exists yet."""
    if ENV_FILE.exists():
        return
    try:
        ENV_EXAMPLE_FILE.write_text(ENV_EXAMPLE_CONTENT, encoding="utf-8")
    except OSError as e:
        logger.warning(f"Could not write {ENV_EXAMPLE_FILE}: {e}")
        return
    logger.info(f"Created {ENV_EXAMPLE_FILE.name} file")


def create_app(
    app_settings: Settings | None = None,
    index: IndexerProtocol | None = None,
    assistant_client: AssistantClient | None = None,
    write_env_example: bool = True,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        app_settings: Settings to use (default: global settings)
        index: Markdown index to use instead of the configured SQLite one
        assistant_client: Assistant client to use instead of the configured one
        write_env_example: Create .env.example on startup when .env is missing
    """
    cfg = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(cfg=cfg)
        cfg.validate_configuration()

        workspaces_root = cfg.get_workspaces_root()
        workspaces_root.mkdir(parents=True, exist_ok=True)

        markdown_index = index if index is not None else MarkdownIndex(cfg.get_index_database_url())
        try:
            markdown_index.init()
        except Exception:
            # Keep serving; index-backed routes answer 503 until restart
            logger.exception("Markdown index init error")

        app.state.settings = cfg
        app.state.markdown_index = markdown_index
        app.state.workspace_manager = WorkspaceManager.from_settings(cfg, index=markdown_index)
        app.state.assistant_client = assistant_client or build_assistant_client(cfg)

        logger.info(f"{SERVICE_NAME} running on port {cfg.port}")
        logger.info(f"Workspaces directory: {workspaces_root}")
        if not cfg.is_assistant_configured():
            logger.warning("ANTHROPIC_API_KEY not set in .env file")
        if write_env_example:
            create_example_env()

        try:
            yield
        finally:
            markdown_index.shutdown()

    app = FastAPI(
        title="mdspace API",
        description="Per-user markdown workspaces with Claude Code chat",
        version=SERVICE_VERSION,
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(api_router, prefix=cfg.api_prefix)

    @app.get("/")
    async def root():
        """Service status."""
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
        }

    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Render errors as ``{"success": false, "error": ...}``.

    Unexpected exceptions are logged with their traceback; the client only
    gets a generic message.
    """

    @app.exception_handler(MdspaceError)
    async def handle_mdspace_error(request: Request, exc: MdspaceError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        body: dict = {"success": False, "error": exc.message}
        if exc.details:
            body["details"] = exc.details
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(FastAPIValidationError)
    async def handle_validation_error(request: Request, exc: FastAPIValidationError):
        errors = exc.errors()
        message = "Invalid request"
        if errors:
            location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
            message = f"Invalid request: {location} {errors[0].get('msg', '')}".strip()
        return JSONResponse(status_code=400, content={"success": False, "error": message})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception(f"{request.method} {request.url.path} crashed")
        return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "mdspace.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
