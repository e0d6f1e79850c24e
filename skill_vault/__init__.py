"""skill-vault: compile structured skills into SKILL.md packages.

Skills are authored as structured records (summary, steps, triggers,
guardrails, tests) and compiled into a SKILL.md that follows the Agent Skills
format (https://agentskills.io/), plus a bundle of supporting files.

The package provides:
1. The compiler (render_skill_markdown) and its description builder
2. Lint gates for a record (lint_skill) and a record plus files (lint_skill_package)
3. Gates for file paths and AI-proposed change-sets
4. A hardened runner for the Claude CLI that proposes change-sets
"""

from skill_vault.ai.changeset import ChangeSet, validate_change_set
from skill_vault.ai.propose import AiAction, ProposalError, propose_change_set
from skill_vault.skills.files import validate_skill_file_path
from skill_vault.skills.lint import lint_skill, lint_skill_package
from skill_vault.skills.markdown import build_description, extract_relative_links, render_skill_markdown
from skill_vault.skills.models import LintResult, SkillRecord
from skill_vault.tools import get_skill_tools, SKILL_TOOLS

__version__ = "0.1.0"
__all__ = [
    "SkillRecord",
    "LintResult",
    # Compiler
    "build_description",
    "render_skill_markdown",
    "extract_relative_links",
    # Lint
    "lint_skill",
    "lint_skill_package",
    # Gates
    "validate_skill_file_path",
    "validate_change_set",
    "ChangeSet",
    # AI proposals
    "AiAction",
    "ProposalError",
    "propose_change_set",
    # Agent tools
    "get_skill_tools",
    "SKILL_TOOLS",
]
