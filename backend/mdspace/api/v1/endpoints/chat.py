"""Chat API endpoint.

Forwards a user's message to Claude Code running inside that user's
workspace. Conversations continue by passing back the returned sessionId.
"""

from fastapi import APIRouter, Depends

from mdspace.api.deps import get_assistant_client, get_settings, get_workspace_manager
from mdspace.components.assistant import AssistantClient, run_chat
from mdspace.components.workspace import WorkspaceManager
from mdspace.exceptions import RequestValidationError
from mdspace.models import ChatRequest
from mdspace.settings import Settings

router = APIRouter(tags=["Chat"])


@router.post("")
async def chat(
    request: ChatRequest,
    manager: WorkspaceManager = Depends(get_workspace_manager),
    client: AssistantClient = Depends(get_assistant_client),
    cfg: Settings = Depends(get_settings),
):
    """Run one assistant turn.

    Args:
        request: userId, message and optional sessionId to resume

    Returns:
        The assistant result (including the new sessionId) and the workspace path
    """
    if not request.userId:
        raise RequestValidationError("userId is required")
    if not request.message or not request.message.strip():
        raise RequestValidationError("message is required")

    outcome = await run_chat(
        manager,
        client,
        cfg,
        user_id=request.userId,
        message=request.message,
        session_id=request.sessionId,
    )

    return {
        "success": True,
        "result": outcome.result.to_dict(),
        "workspacePath": str(outcome.workspace),
    }
