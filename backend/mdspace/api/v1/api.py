"""API v1 Router Aggregator.

Aggregates all API endpoints into a single router, mounted under
settings.api_prefix ("/api").
"""

from fastapi import APIRouter

from mdspace.api.v1.endpoints import chat, health, workspace

api_router = APIRouter()

# Mount endpoint routers
api_router.include_router(health.router, prefix="/health", tags=["Health"])
api_router.include_router(workspace.router, prefix="/workspace", tags=["Workspace"])
api_router.include_router(chat.router, prefix="/chat", tags=["Chat"])
