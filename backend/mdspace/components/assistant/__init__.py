"""Assistant Integration Module.

Forwards chat messages to Claude Code running inside a user's workspace.

Components:
- client.py: AssistantRequest/AssistantResult, ClaudeCodeClient (CLI subprocess)
- mock.py: MockAssistantClient (mirrors the real client, no network)
- service.py: build_assistant_client(), run_chat()

Usage:
    from mdspace.components.assistant import build_assistant_client, run_chat

    client = build_assistant_client(settings)
    outcome = await run_chat(manager, client, settings, "alice", "Add a README section")
    print(outcome.result.result, outcome.result.session_id)
"""

from mdspace.components.assistant.client import (
    AssistantClient,
    AssistantRequest,
    AssistantResult,
    ClaudeCodeClient,
    parse_cli_output,
)
from mdspace.components.assistant.mock import MockAssistantClient
from mdspace.components.assistant.service import (
    ChatOutcome,
    build_assistant_client,
    run_chat,
)

__all__ = [
    # Client classes
    "AssistantClient",
    "ClaudeCodeClient",
    "MockAssistantClient",
    # Models
    "AssistantRequest",
    "AssistantResult",
    "ChatOutcome",
    # Services
    "build_assistant_client",
    "run_chat",
    # Utils
    "parse_cli_output",
]
