"""Pydantic models for API request bodies.

Field names match the JSON the frontend sends (camelCase). Required fields
are optional here and checked in the endpoints, so a missing field yields
a 400 with a readable message instead of a schema dump.
"""

from pydantic import BaseModel


class InitWorkspaceRequest(BaseModel):
    userId: str | None = None


class ChatRequest(BaseModel):
    userId: str | None = None
    message: str | None = None
    sessionId: str | None = None
