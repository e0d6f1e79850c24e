"""Ask the Claude CLI for a change-set and gate what comes back."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import ValidationError

from skill_vault.ai.changeset import (
    ChangeSet,
    apply_skill_patch,
    path_preview,
    validate_change_set,
)
from skill_vault.ai.runner import ProcessRunner, run_claude
from skill_vault.config import RunnerSettings
from skill_vault.skills.lint import lint_skill
from skill_vault.skills.models import FileEntry, LintResult, SkillRecord

logger = logging.getLogger(__name__)


class AiAction(str, Enum):
    UPDATE_SKILL = "update-skill"
    FIX_LINT = "fix-lint"
    CREATE_SUPPORTING_FILES = "create-supporting-files"


class ProposalError(RuntimeError):
    """A proposal could not be produced. Terminal for that invocation."""

    def __init__(self, message: str, errors: Sequence[str], kind: str):
        super().__init__(message)
        self.errors = list(errors)
        self.kind = kind


@dataclass
class Proposal:
    """A validated change-set plus previews for the user.

    Attributes:
        change_set: Change-set that passed the gate
        lint_preview: Lint of the record with the patch merged in
        path_preview: ``op``/``path``/``size`` per file operation
        usage: Token usage reported by the CLI, if any
    """

    change_set: ChangeSet
    lint_preview: LintResult
    path_preview: List[Dict[str, Any]] = field(default_factory=list)
    usage: Optional[Dict[str, Any]] = None


def _coerce_action(action: Union[AiAction, str]) -> AiAction:
    try:
        return AiAction(action)
    except ValueError:
        valid = ", ".join(a.value for a in AiAction)
        raise ValueError(f"action must be one of: {valid}") from None


def files_index(files: Sequence[FileEntry]) -> List[Dict[str, Any]]:
    return [{"path": f.path, "mime": f.mime, "size": f.size_bytes} for f in files]


def build_prompt(
    skill: SkillRecord,
    action: Union[AiAction, str],
    instruction: Optional[str] = None,
    files: Sequence[FileEntry] = (),
) -> str:
    """Assemble the user prompt for one proposal.

    Contains the action, the record as JSON, the supporting file index,
    the current lint errors (``fix-lint`` only) and the user's instruction.
    """
    action = _coerce_action(action)
    parts = [
        f"Action: {action.value}",
        f"Current skill (JSON): {json.dumps(skill.model_dump(), indent=2, ensure_ascii=False)}",
        f"Supporting files index: {json.dumps(files_index(files), ensure_ascii=False)}",
    ]

    if action is AiAction.FIX_LINT:
        errors = [f"{e.field}: {e.message}" for e in lint_skill(skill).errors]
        if errors:
            parts.append("Current lint errors:\n" + "\n".join(errors))

    if instruction:
        parts.append(f"User instruction: {instruction}")

    return "\n\n".join(parts)


def propose_change_set(
    skill: SkillRecord,
    action: Union[AiAction, str],
    instruction: Optional[str] = None,
    *,
    files: Sequence[FileEntry] = (),
    runner: Optional[ProcessRunner] = None,
    settings: Optional[RunnerSettings] = None,
) -> Proposal:
    """Generate a change-set for ``skill`` with the Claude CLI.

    The CLI output goes through `validate_change_set` before it is parsed
    into a `ChangeSet`; nothing is applied.

    Args:
        skill: Current record
        action: One of `AiAction`
        instruction: Optional free-text instruction from the user
        files: Current supporting files (only the index is sent)
        runner: Process runner, defaults to a real subprocess
        settings: CLI settings, defaults to the environment

    Returns:
        Proposal with the change-set and previews

    Raises:
        ValueError: If ``action`` is unknown
        ProposalError: If the CLI fails or its output is rejected
    """
    prompt = build_prompt(skill, action, instruction, files)
    result = run_claude(prompt, runner=runner, settings=settings)
    if not result.ok:
        raise ProposalError("Claude CLI failed", result.errors, result.kind or "exit")

    verdict = validate_change_set(result.structured_output)
    if not verdict.valid:
        raise ProposalError("Invalid changeSet", verdict.errors, "invalid")

    try:
        change_set = ChangeSet.model_validate(result.structured_output)
    except ValidationError as e:
        errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise ProposalError("Invalid changeSet", errors, "invalid") from e

    merged = apply_skill_patch(skill, change_set.skill_patch)
    proposal = Proposal(
        change_set=change_set,
        lint_preview=lint_skill(merged),
        path_preview=path_preview(change_set),
        usage=result.usage,
    )
    logger.info(
        "Proposal ready: action=%s file_ops=%d lint_valid=%s",
        _coerce_action(action).value,
        len(change_set.file_ops),
        proposal.lint_preview.valid,
    )
    return proposal
