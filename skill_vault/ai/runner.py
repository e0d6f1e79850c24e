"""Headless invocation of the Claude CLI.

The CLI is run as a plain argv list (never through a shell) with all of its
built-in tools disabled, no session persistence and a JSON schema for the
structured output. The process is reached through a `ProcessRunner` so that
tests can substitute canned results for a real process.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

from skill_vault.ai.schema import change_set_json_schema
from skill_vault.config import RunnerSettings

logger = logging.getLogger(__name__)

PROMPT_MAX_LENGTH = 8192
STRUCTURED_OUTPUT_KEY = "structured_output"

SYSTEM_PROMPT = """You are a Skill editor for the Skill Vault system.
You MUST output ONLY a valid JSON object matching the provided json-schema.
Do NOT output any extra text, markdown fences, or explanation outside the JSON.

Rules:
- Only modify fields in skillPatch that need changing. Omit unchanged fields.
- fileOps paths MUST be relative, starting with one of: references/, examples/, scripts/, assets/, templates/
- NEVER use absolute paths, "..", or backslashes in paths
- NEVER create or modify SKILL.md (it is auto-generated from skillPatch fields)
- steps: 3-7 items, imperative voice
- triggers: at least 3 items
- tests: at least 1 test case
- guardrails.escalation must be REVIEW, BLOCK, or ASK_HUMAN
- guardrails.stop_conditions: at least 1 item
- content_text for files must be under 200KB
- Write in a concise, protocol-card style: imperative, executable, with guardrails + tests"""


@dataclass(frozen=True)
class ProcessResult:
    returncode: int
    stdout: str
    stderr: str


class ProcessRunner(Protocol):
    """Runs one process to completion.

    Implementations raise `subprocess.TimeoutExpired` when ``timeout``
    elapses (after killing the process) and `OSError` when the program
    cannot be started. `ValueError` from argv the OS rejects is treated
    the same way.
    """

    def run(self, argv: Sequence[str], *, timeout: float) -> ProcessResult:
        ...


class SubprocessRunner:
    """`ProcessRunner` backed by `subprocess.run` with ``shell=False``."""

    def __init__(self, cwd: Optional[str] = None):
        self.cwd = cwd

    def run(self, argv: Sequence[str], *, timeout: float) -> ProcessResult:
        # subprocess.run kills the child before re-raising TimeoutExpired.
        result = subprocess.run(
            list(argv),
            cwd=self.cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            shell=False,
            check=False,
        )
        return ProcessResult(result.returncode, result.stdout or "", result.stderr or "")


@dataclass
class ClaudeRunResult:
    """Outcome of one CLI invocation.

    ``kind`` names the failure class (``prompt``, ``spawn``, ``timeout``,
    ``exit`` or ``parse``) and is None on success.
    """

    ok: bool
    structured_output: Optional[Dict[str, Any]] = None
    raw_json: Optional[Dict[str, Any]] = None
    usage: Optional[Dict[str, Any]] = None
    errors: List[str] = field(default_factory=list)
    kind: Optional[str] = None


def _format_number(value: float) -> str:
    return f"{value:g}"


def build_claude_args(
    prompt: str,
    json_schema: str,
    model: Optional[str] = None,
    max_turns: int = 3,
    max_budget_usd: float = 1,
) -> List[str]:
    """Build the CLI argument list (without the executable).

    Args:
        prompt: User prompt passed with ``-p``
        json_schema: Schema for the structured output, as a JSON string
        model: Optional model name
        max_turns: Agentic turn limit
        max_budget_usd: Spend limit for the call

    Returns:
        List of arguments; every value is its own element
    """
    args = [
        "-p", prompt,
        "--output-format", "json",
        "--json-schema", json_schema,
        "--tools", "",
        "--no-session-persistence",
        "--max-turns", str(int(max_turns)),
        "--max-budget-usd", _format_number(max_budget_usd),
        "--system-prompt", SYSTEM_PROMPT,
    ]
    if model:
        args.extend(["--model", model])
    return args


def parse_headless_json(raw: str) -> ClaudeRunResult:
    """Extract the structured output from the CLI's ``--output-format json``."""
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return ClaudeRunResult(ok=False, errors=["Failed to parse Claude output as JSON"], kind="parse")

    if not isinstance(parsed, dict):
        return ClaudeRunResult(ok=False, errors=["Claude output is not a JSON object"], kind="parse")

    usage = parsed.get("usage") if isinstance(parsed.get("usage"), dict) else None
    structured = parsed.get(STRUCTURED_OUTPUT_KEY)
    if not isinstance(structured, dict):
        return ClaudeRunResult(
            ok=False,
            raw_json=parsed,
            usage=usage,
            errors=[f"{STRUCTURED_OUTPUT_KEY} missing or not an object in Claude response"],
            kind="parse",
        )

    return ClaudeRunResult(ok=True, structured_output=structured, raw_json=parsed, usage=usage)


def run_claude(
    prompt: str,
    *,
    json_schema: Optional[str] = None,
    model: Optional[str] = None,
    max_turns: Optional[int] = None,
    max_budget_usd: Optional[float] = None,
    timeout_s: Optional[float] = None,
    runner: Optional[ProcessRunner] = None,
    settings: Optional[RunnerSettings] = None,
) -> ClaudeRunResult:
    """Run the CLI once and return its structured output.

    Explicit arguments win over ``settings`` (default: read from the
    environment). Failures are returned, never raised, and never retried.
    The structured output is untrusted until it passes
    `skill_vault.ai.changeset.validate_change_set`.
    """
    if len(prompt) > PROMPT_MAX_LENGTH:
        return ClaudeRunResult(
            ok=False, errors=[f"Prompt exceeds {PROMPT_MAX_LENGTH} character limit"], kind="prompt"
        )
    # argv elements cannot carry NUL bytes.
    if "\x00" in prompt:
        return ClaudeRunResult(ok=False, errors=["Prompt must not contain NUL characters"], kind="prompt")

    settings = settings or RunnerSettings.from_env()
    runner = runner or SubprocessRunner()
    timeout = timeout_s or settings.timeout_s

    argv = list(settings.command) + build_claude_args(
        prompt,
        json_schema or change_set_json_schema(),
        model=model or settings.model,
        max_turns=max_turns or settings.max_turns,
        max_budget_usd=max_budget_usd or settings.max_budget_usd,
    )

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Spawning %s: prompt_chars=%d timeout=%ss model=%s",
            argv[0],
            len(prompt),
            timeout,
            model or settings.model,
        )

    try:
        result = runner.run(argv, timeout=timeout)
    except subprocess.TimeoutExpired:
        logger.warning("Claude CLI timed out after %ss", timeout)
        return ClaudeRunResult(ok=False, errors=[f"Claude timed out after {timeout:g}s"], kind="timeout")
    except (OSError, ValueError) as e:
        logger.error("Failed to spawn %s: %s", argv[0], e)
        return ClaudeRunResult(ok=False, errors=[f"Failed to spawn claude: {e}"], kind="spawn")

    if result.returncode != 0:
        logger.warning("Claude CLI exited with code %s", result.returncode)
        errors = [f"Claude exited with code {result.returncode}"]
        if result.stderr.strip():
            errors.append(result.stderr.strip())
        return ClaudeRunResult(ok=False, errors=errors, kind="exit")

    parsed = parse_headless_json(result.stdout)
    if not parsed.ok:
        logger.warning("Unusable Claude output: %s", "; ".join(parsed.errors))
    return parsed
