"""Application error types.

Every error the service raises on purpose derives from ``MdspaceError`` and
carries the HTTP status it maps to. The exception handlers in
``mdspace.main`` turn them into ``{"success": false, "error": ...}`` bodies.
"""


class MdspaceError(Exception):
    """Base class for expected, user-facing errors."""

    status_code: int = 500

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


# ==================== 4xx ====================


class RequestValidationError(MdspaceError):
    """A required request field is missing or malformed."""

    status_code = 400


class InvalidUserIdError(RequestValidationError):
    """User id is empty or would escape the workspaces directory."""


class AccessDeniedError(MdspaceError):
    """Path resolves outside the owning workspace."""

    status_code = 403

    def __init__(self, message: str = "Access denied", details: str | None = None):
        super().__init__(message, details)


class WorkspaceFileNotFoundError(MdspaceError):
    """Requested file does not exist in the workspace."""

    status_code = 404


# ==================== 5xx ====================


class AssistantNotConfiguredError(MdspaceError):
    """The assistant credential is not set."""

    status_code = 500


class AssistantError(MdspaceError):
    """The assistant process failed or returned garbage."""

    status_code = 502


class IndexerUnavailableError(MdspaceError):
    """The markdown index is not initialized (or timed out)."""

    status_code = 503


class WorkspaceUnavailableError(MdspaceError):
    """Workspace storage failed (disk full, permission denied, ...)."""

    status_code = 503


class AssistantTimeoutError(AssistantError):
    """The assistant did not answer within the configured timeout."""

    status_code = 504
