"""Claude Code client for workspace chat.

Runs the Claude Code CLI non-interactively inside a user's workspace:

    claude --print --output-format json --max-turns N \
           --allowedTools Read,Write,... [--resume <session_id>]

The prompt is written to stdin; stdout carries a single JSON result object
(``type: "result"``) holding the reply text and the session id that
resumes the conversation next time. Only that final object is kept.

Timeouts are enforced by the caller (``run_chat``); on cancellation the
subprocess is killed so no orphan keeps working in the workspace.
"""

import asyncio
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from mdspace.exceptions import AssistantError
from mdspace.utils import get_logger

logger = get_logger(__name__)

# Env vars that make the CLI believe it runs nested inside another session
_NESTED_SESSION_ENV_VARS = {"CLAUDECODE", "CLAUDE_CODE_ENTRYPOINT"}

# Lines of stderr kept for error messages
_STDERR_TAIL_LINES = 20


@dataclass
class AssistantRequest:
    """One chat turn sent to the assistant."""

    prompt: str
    cwd: Path
    session_id: str | None = None
    allowed_tools: list[str] = field(default_factory=list)
    max_turns: int = 5


@dataclass
class AssistantResult:
    """Final result of one assistant invocation."""

    result: str
    session_id: str | None = None
    is_error: bool = False
    subtype: str | None = None
    num_turns: int | None = None
    duration_ms: int | None = None
    total_cost_usd: float | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    def to_dict(self) -> dict:
        """Convert to the JSON shape returned by the chat API."""
        return {
            "type": "result",
            "subtype": self.subtype,
            "result": self.result,
            "sessionId": self.session_id,
            "isError": self.is_error,
            "numTurns": self.num_turns,
            "durationMs": self.duration_ms,
            "totalCostUsd": self.total_cost_usd,
        }

    @classmethod
    def from_cli_payload(cls, payload: dict) -> "AssistantResult":
        """Build from the CLI's ``--output-format json`` object."""
        return cls(
            result=str(payload.get("result") or ""),
            session_id=payload.get("session_id"),
            is_error=bool(payload.get("is_error", False)),
            subtype=payload.get("subtype"),
            num_turns=payload.get("num_turns"),
            duration_ms=payload.get("duration_ms"),
            total_cost_usd=payload.get("total_cost_usd"),
            raw=payload,
        )


class AssistantClient(Protocol):
    """Interface shared by the real and mock assistant clients."""

    async def run(self, request: AssistantRequest) -> AssistantResult: ...


def parse_cli_output(stdout: str) -> dict | None:
    """Return the last JSON result object in the CLI output, if any.

    The CLI prints one object for ``--output-format json``; scanning from the
    end also tolerates stray log lines before it.
    """
    text = stdout.strip()
    if not text:
        return None

    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        payload = None

    if isinstance(payload, list):
        # stream-style array: keep the final result entry
        results = [item for item in payload if isinstance(item, dict) and item.get("type") == "result"]
        return results[-1] if results else None
    if isinstance(payload, dict):
        return payload

    for line in reversed(text.splitlines()):
        line = line.strip()
        if not line:
            continue
        try:
            candidate = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(candidate, dict) and candidate.get("type") == "result":
            return candidate
    return None


class ClaudeCodeClient:
    """Runs one Claude Code CLI process per chat turn."""

    def __init__(self, api_key: str, cli_path: str = "claude"):
        self.api_key = api_key
        self.cli_path = cli_path

    def build_command(self, request: AssistantRequest) -> list[str]:
        """CLI arguments for ``request`` (the prompt goes to stdin)."""
        cmd = [
            self.cli_path,
            "--print",
            "--output-format", "json",
            "--max-turns", str(request.max_turns),
        ]
        if request.allowed_tools:
            cmd.extend(["--allowedTools", ",".join(request.allowed_tools)])
        if request.session_id:
            cmd.extend(["--resume", request.session_id])
        return cmd

    def build_env(self) -> dict[str, str]:
        """Child environment: current env plus the API key."""
        env = {k: v for k, v in os.environ.items() if k not in _NESTED_SESSION_ENV_VARS}
        env["ANTHROPIC_API_KEY"] = self.api_key
        return env

    async def run(self, request: AssistantRequest) -> AssistantResult:
        """Run one chat turn.

        Raises:
            AssistantError: CLI missing, crashed, or printed no result
        """
        cmd = self.build_command(request)
        logger.debug(f"Starting Claude Code in {request.cwd} (resume={request.session_id})")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=str(request.cwd),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self.build_env(),
            )
        except FileNotFoundError as e:
            raise AssistantError(
                "Claude Code CLI not found",
                details=f"Install it with: npm install -g @anthropic-ai/claude-code ({e})",
            ) from e

        try:
            stdout_bytes, stderr_bytes = await process.communicate(request.prompt.encode("utf-8"))
        except asyncio.CancelledError:
            # Timed out or client went away
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")
        payload = parse_cli_output(stdout)

        if payload is None:
            stderr_tail = "\n".join(stderr.strip().splitlines()[-_STDERR_TAIL_LINES:])
            logger.error(f"Claude Code exited with {process.returncode} and no result: {stderr_tail}")
            raise AssistantError(
                f"Claude Code exited with code {process.returncode} without a result",
                details=stderr_tail or None,
            )

        result = AssistantResult.from_cli_payload(payload)
        if process.returncode != 0 or result.is_error:
            logger.warning(
                f"Claude Code finished with error (code={process.returncode}, subtype={result.subtype})"
            )
        return result
