"""Runtime settings for the Claude CLI runner, read from the environment.

Variables are read when `RunnerSettings.from_env()` is called, not at
import time, so tests can monkeypatch them.
"""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_BIN = "claude"
DEFAULT_TIMEOUT_MS = 60_000
DEFAULT_MAX_TURNS = 3
DEFAULT_MAX_BUDGET_USD = 1.0


def _env_number(name: str, default: float) -> float:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        number = float(value)
    except ValueError:
        return default
    return number if number > 0 else default


def _env_str(name: str) -> Optional[str]:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


@dataclass(frozen=True)
class RunnerSettings:
    """How to invoke the CLI.

    Attributes:
        command: Executable plus any fixed leading arguments
            (``CLAUDE_BIN`` may be e.g. ``"node cli.js"``)
        timeout_s: Seconds before the process is killed
        max_turns: Passed as ``--max-turns``
        max_budget_usd: Passed as ``--max-budget-usd``
        model: Passed as ``--model`` when set
    """

    command: List[str] = field(default_factory=lambda: [DEFAULT_BIN])
    timeout_s: float = DEFAULT_TIMEOUT_MS / 1000
    max_turns: int = DEFAULT_MAX_TURNS
    max_budget_usd: float = DEFAULT_MAX_BUDGET_USD
    model: Optional[str] = None

    @classmethod
    def from_env(cls) -> "RunnerSettings":
        command = shlex.split(_env_str("CLAUDE_BIN") or DEFAULT_BIN)
        return cls(
            command=command,
            timeout_s=_env_number("CLAUDE_TIMEOUT_MS", DEFAULT_TIMEOUT_MS) / 1000,
            max_turns=int(_env_number("CLAUDE_MAX_TURNS", DEFAULT_MAX_TURNS)),
            max_budget_usd=_env_number("CLAUDE_MAX_BUDGET_USD", DEFAULT_MAX_BUDGET_USD),
            model=_env_str("CLAUDE_MODEL"),
        )
