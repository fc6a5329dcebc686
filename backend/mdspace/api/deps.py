"""FastAPI dependencies.

Long-lived collaborators are created in the application lifespan and
stored on ``app.state``; endpoints receive them through these functions,
which tests can replace with ``app.dependency_overrides``.
"""

from fastapi import Request

from mdspace.components.assistant import AssistantClient
from mdspace.components.workspace import WorkspaceManager
from mdspace.settings import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_workspace_manager(request: Request) -> WorkspaceManager:
    return request.app.state.workspace_manager


def get_assistant_client(request: Request) -> AssistantClient:
    return request.app.state.assistant_client
