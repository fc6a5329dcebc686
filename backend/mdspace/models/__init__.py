from .schemas import ChatRequest, InitWorkspaceRequest

__all__ = [
    "ChatRequest",
    "InitWorkspaceRequest",
]
