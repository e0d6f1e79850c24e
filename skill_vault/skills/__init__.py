"""Skill records and the SKILL.md compiler, lint and path gate."""

from skill_vault.skills.files import (
    ALLOWED_DIRS,
    PathValidation,
    validate_skill_file_path,
)
from skill_vault.skills.lint import lint_skill, lint_skill_package
from skill_vault.skills.markdown import (
    build_description,
    extract_relative_links,
    render_skill_markdown,
)
from skill_vault.skills.models import (
    Escalation,
    FileEntry,
    Guardrails,
    LintError,
    LintResult,
    SkillRecord,
    SkillTestCase,
)
from skill_vault.skills.parser import parse_skill_document, validate_skill_document
from skill_vault.skills.slug import slugify

__all__ = [
    "ALLOWED_DIRS",
    "PathValidation",
    "validate_skill_file_path",
    "lint_skill",
    "lint_skill_package",
    "build_description",
    "extract_relative_links",
    "render_skill_markdown",
    "Escalation",
    "FileEntry",
    "Guardrails",
    "LintError",
    "LintResult",
    "SkillRecord",
    "SkillTestCase",
    "parse_skill_document",
    "validate_skill_document",
    "slugify",
]
