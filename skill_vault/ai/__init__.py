"""AI-assisted editing: change-sets, their gate and the Claude CLI runner."""

from skill_vault.ai.changeset import (
    ChangeSet,
    ChangeSetValidation,
    FileOp,
    SkillPatch,
    apply_skill_patch,
    validate_change_set,
)
from skill_vault.ai.propose import AiAction, Proposal, ProposalError, build_prompt, propose_change_set
from skill_vault.ai.runner import (
    ClaudeRunResult,
    ProcessResult,
    ProcessRunner,
    SubprocessRunner,
    build_claude_args,
    parse_headless_json,
    run_claude,
)
from skill_vault.ai.schema import CHANGE_SET_JSON_SCHEMA, change_set_json_schema

__all__ = [
    # Change-sets
    "ChangeSet",
    "ChangeSetValidation",
    "FileOp",
    "SkillPatch",
    "apply_skill_patch",
    "validate_change_set",
    # Proposals
    "AiAction",
    "Proposal",
    "ProposalError",
    "build_prompt",
    "propose_change_set",
    # CLI runner
    "ClaudeRunResult",
    "ProcessResult",
    "ProcessRunner",
    "SubprocessRunner",
    "build_claude_args",
    "parse_headless_json",
    "run_claude",
    "CHANGE_SET_JSON_SCHEMA",
    "change_set_json_schema",
]
