"""Skill compiler functions exposed as LangChain tools.

Lets an agent lint, render and gate skills through tool calls. Every tool
takes and returns JSON strings; malformed input is reported as an error
string instead of raising into the agent loop.

Available tools:
- lint_skill_tool: lint a record, optionally with its supporting file paths
- render_skill_tool: compile a record into SKILL.md
- validate_change_set_tool: run the change-set gate
"""

import json
from typing import List, Optional

from langchain_core.tools import tool
from pydantic import ValidationError

from skill_vault.ai.changeset import validate_change_set
from skill_vault.skills.lint import lint_skill, lint_skill_package
from skill_vault.skills.markdown import render_skill_markdown
from skill_vault.skills.models import SkillRecord


def _load_skill(skill_json: str) -> SkillRecord:
    return SkillRecord.model_validate_json(skill_json)


@tool
def lint_skill_tool(skill_json: str, file_paths: Optional[List[str]] = None) -> str:
    """Check a skill against the export rules.

    Args:
        skill_json: The skill record as a JSON object
        file_paths: Supporting file paths; when given the whole package is checked

    Returns:
        JSON with "valid" and a list of {"field", "message"} errors
    """
    try:
        skill = _load_skill(skill_json)
    except ValidationError as e:
        return f"Error: invalid skill JSON: {e}"

    if file_paths is None:
        result = lint_skill(skill)
    else:
        result = lint_skill_package(skill, file_paths)
    return json.dumps(result.to_dict(), ensure_ascii=False)


@tool
def render_skill_tool(skill_json: str, file_paths: Optional[List[str]] = None) -> str:
    """Compile a skill record into its SKILL.md text.

    Args:
        skill_json: The skill record as a JSON object
        file_paths: Supporting file paths listed in the document

    Returns:
        SKILL.md content, or an error message
    """
    try:
        skill = _load_skill(skill_json)
    except ValidationError as e:
        return f"Error: invalid skill JSON: {e}"
    return render_skill_markdown(skill, file_paths)


@tool
def validate_change_set_tool(change_set_json: str) -> str:
    """Check a proposed change-set (skillPatch + fileOps) before it is applied.

    Args:
        change_set_json: The change-set as a JSON object

    Returns:
        JSON with "valid" and a list of error strings
    """
    try:
        data = json.loads(change_set_json)
    except json.JSONDecodeError as e:
        return f"Error: invalid JSON: {e}"

    verdict = validate_change_set(data)
    return json.dumps({"valid": verdict.valid, "errors": verdict.errors}, ensure_ascii=False)


SKILL_TOOLS = {
    "lint_skill_tool": lint_skill_tool,
    "render_skill_tool": render_skill_tool,
    "validate_change_set_tool": validate_change_set_tool,
}


def get_skill_tools() -> List:
    """Get all skill compiler tools."""
    return list(SKILL_TOOLS.values())


def get_tools_by_names(names: List[str]) -> List:
    """Get tools by name, skipping unknown names."""
    return [SKILL_TOOLS[name] for name in names if name in SKILL_TOOLS]
