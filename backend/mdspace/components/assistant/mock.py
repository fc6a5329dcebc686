"""Mock assistant for running without the Claude Code CLI.

Mirrors the ClaudeCodeClient interface: takes an AssistantRequest and
returns an AssistantResult. Replies describe the request instead of doing
any work, so tests can assert on what the API forwarded.
"""

import asyncio
import os
import uuid

from mdspace.components.assistant.client import AssistantRequest, AssistantResult
from mdspace.utils import get_logger

logger = get_logger(__name__)

MOCK_DELAY = float(os.getenv("MOCK_ASSISTANT_DELAY", "0"))


class MockAssistantClient:
    """Deterministic stand-in for ClaudeCodeClient."""

    def __init__(self, delay: float = MOCK_DELAY, reply: str | None = None):
        self.delay = delay
        self.reply = reply
        self.requests: list[AssistantRequest] = []

    async def run(self, request: AssistantRequest) -> AssistantResult:
        self.requests.append(request)
        if self.delay > 0:
            await asyncio.sleep(self.delay)

        session_id = request.session_id or f"mock-session-{uuid.uuid4().hex[:12]}"
        text = self.reply if self.reply is not None else f"[mock] {request.prompt}"
        logger.debug(f"Mock assistant reply for session {session_id}")

        return AssistantResult(
            result=text,
            session_id=session_id,
            is_error=False,
            subtype="success",
            num_turns=1,
            duration_ms=int(self.delay * 1000),
            total_cost_usd=0.0,
        )
