"""Chat orchestration.

run_chat() is the whole chat flow:
1. Refuse early when the assistant credential is missing
2. ensure() the user's workspace
3. Run one assistant turn inside it, bounded by settings.assistant_timeout

The assistant client is chosen by settings.assistant_backend:
- "cli": ClaudeCodeClient (Claude Code CLI subprocess)
- "mock": MockAssistantClient (no network)
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path

from mdspace.components.assistant.client import (
    AssistantClient,
    AssistantRequest,
    AssistantResult,
    ClaudeCodeClient,
)
from mdspace.components.assistant.mock import MockAssistantClient
from mdspace.components.workspace import WorkspaceManager
from mdspace.exceptions import AssistantNotConfiguredError, AssistantTimeoutError
from mdspace.settings import Settings
from mdspace.utils import get_logger

logger = get_logger(__name__)

# Longest message prefix written to the log
_LOG_MESSAGE_PREVIEW = 200


@dataclass
class ChatOutcome:
    """Assistant result plus the workspace it ran in."""

    result: AssistantResult
    workspace: Path


def build_assistant_client(cfg: Settings) -> AssistantClient:
    """Create the assistant client configured by ``cfg``."""
    if cfg.assistant_backend == "mock":
        logger.info("Assistant: using mock client")
        return MockAssistantClient()

    logger.info(f"Assistant: using Claude Code CLI ({cfg.assistant_cli_path})")
    return ClaudeCodeClient(api_key=cfg.anthropic_api_key, cli_path=cfg.assistant_cli_path)


async def run_chat(
    manager: WorkspaceManager,
    client: AssistantClient,
    cfg: Settings,
    user_id: str,
    message: str,
    session_id: str | None = None,
) -> ChatOutcome:
    """Run one chat turn for a user inside their workspace.

    Raises:
        AssistantNotConfiguredError: ANTHROPIC_API_KEY is not set
        AssistantTimeoutError: No answer within cfg.assistant_timeout
        AssistantError: The assistant failed
    """
    if not cfg.is_assistant_configured():
        raise AssistantNotConfiguredError(
            "ANTHROPIC_API_KEY not configured",
            details="Please set the ANTHROPIC_API_KEY environment variable",
        )

    workspace = await manager.ensure(user_id)
    logger.info(f"Processing chat for user {user_id}: {message[:_LOG_MESSAGE_PREVIEW]}")

    request = AssistantRequest(
        prompt=message,
        cwd=workspace,
        session_id=session_id or None,
        allowed_tools=list(cfg.assistant_allowed_tools),
        max_turns=cfg.assistant_max_turns,
    )

    try:
        result = await asyncio.wait_for(client.run(request), timeout=cfg.assistant_timeout)
    except asyncio.TimeoutError as e:
        logger.error(f"Assistant timed out after {cfg.assistant_timeout}s for user {user_id}")
        raise AssistantTimeoutError(f"Assistant did not respond within {cfg.assistant_timeout:g} seconds") from e

    logger.info(
        f"Chat finished for user {user_id} (session={result.session_id}, turns={result.num_turns}, "
        f"error={result.is_error})"
    )
    return ChatOutcome(result=result, workspace=workspace)
