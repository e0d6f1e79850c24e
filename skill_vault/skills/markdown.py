"""SKILL.md compiler.

Turns a `SkillRecord` into the canonical SKILL.md text: YAML frontmatter
(written with `python-frontmatter`, import name: `frontmatter`) followed by a
fixed sequence of Markdown sections. Output is a pure function of the record
and the supporting file list.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from frontmatter.default_handlers import YAMLHandler

from skill_vault.skills.models import SkillRecord

DESCRIPTION_MAX = 2048
# Must fit a C int for libyaml's emitter; keeps every value on one line.
YAML_LINE_WIDTH = 2**31 - 1
DESCRIPTION_PREFIX = "This skill should be used when"
FALLBACK_SUMMARY = "the user needs this capability"

_WHITESPACE_RE = re.compile(r"\s+")
_TRAILING_PUNCT_RE = re.compile(r"[.。!?！？]+$")
_LINK_RE = re.compile(r"\[([^\]]*)\]\(([^)]+)\)")


def normalize_sentence(text: Optional[str]) -> str:
    value = _WHITESPACE_RE.sub(" ", text or "").strip()
    value = _TRAILING_PUNCT_RE.sub("", value)
    return value or FALLBACK_SUMMARY


def normalize_triggers(triggers: Optional[Iterable[str]]) -> List[str]:
    """Collapse whitespace, drop empties and exact duplicates (first wins)."""
    seen = set()
    result = []
    for trigger in triggers or []:
        value = _WHITESPACE_RE.sub(" ", trigger or "").strip()
        if not value or value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result


def _with_triggers(base: str, triggers: Sequence[str]) -> str:
    quoted = ", ".join(f'"{t}"' for t in triggers)
    return f"{base} Trigger phrases include: {quoted}."


def build_description_candidate(summary: Optional[str], triggers: Optional[Iterable[str]]) -> str:
    """Description with every trigger included and no length cap applied."""
    base = f"{DESCRIPTION_PREFIX} {normalize_sentence(summary)}."
    normalized = normalize_triggers(triggers)
    if not normalized:
        return base
    return _with_triggers(base, normalized)


def build_description(
    summary: Optional[str],
    triggers: Optional[Iterable[str]],
    max_length: int = DESCRIPTION_MAX,
) -> str:
    """Build the frontmatter description.

    Triggers are quoted and appended to the summary sentence. When the
    result is longer than ``max_length`` the last trigger is dropped and the
    sentence rebuilt, until it fits or no triggers are left; in that case the
    bare sentence is cut to ``max_length``.

    Args:
        summary: Free-text summary of the skill
        triggers: Trigger phrases in priority order
        max_length: Maximum description length in characters

    Returns:
        Description string, never longer than ``max_length``
    """
    base = f"{DESCRIPTION_PREFIX} {normalize_sentence(summary)}."
    selected = normalize_triggers(triggers)

    while selected:
        description = _with_triggers(base, selected)
        if len(description) <= max_length:
            return description
        selected = selected[:-1]

    return base[:max_length]


def extract_relative_links(markdown: str) -> List[str]:
    """Return ``[label](target)`` targets that are not http(s) URLs.

    Targets keep first-seen order and appear once.
    """
    links: List[str] = []
    for match in _LINK_RE.finditer(markdown or ""):
        href = match.group(2)
        if href.startswith("http://") or href.startswith("https://"):
            continue
        if href not in links:
            links.append(href)
    return links


def frontmatter_fields(skill: SkillRecord) -> List[Tuple[str, Any, bool]]:
    """Ordered ``(key, value, include)`` triples for the SKILL.md header."""
    guardrails = skill.guardrails
    return [
        ("name", skill.slug or "", True),
        ("description", build_description(skill.summary, skill.triggers), True),
        ("allowed-tools", list(guardrails.allowed_tools), bool(guardrails.allowed_tools)),
        ("disable-model-invocation", bool(guardrails.disable_model_invocation), True),
        ("user-invocable", bool(guardrails.user_invocable), True),
    ]


def _frontmatter_metadata(skill: SkillRecord) -> Dict[str, Any]:
    return {key: value for key, value, include in frontmatter_fields(skill) if include}


def _guardrails_section(skill: SkillRecord) -> str:
    g = skill.guardrails
    lines = [
        f"- Escalation policy: {g.escalation}",
        f"- Allowed tools: {', '.join(g.allowed_tools) if g.allowed_tools else 'None'}",
        f"- User invocable: {'true' if g.user_invocable else 'false'}",
        f"- Disable model invocation: {'true' if g.disable_model_invocation else 'false'}",
        "- Stop conditions:",
    ]
    lines.extend(f"  - {condition}" for condition in g.stop_conditions)
    return "## Guardrails\n\n" + "\n".join(lines)


def _tests_section(skill: SkillRecord) -> str:
    cases = [
        f"### Case {i}: {t.name}\n\n- Input: `{t.input}`\n- Expected: `{t.expected_output}`"
        for i, t in enumerate(skill.tests, start=1)
    ]
    return "## Tests\n\n" + "\n\n".join(cases)


def _supporting_files_section(files_index: Sequence[str]) -> str:
    grouped: Dict[str, List[str]] = {}
    for path in files_index:
        grouped.setdefault(path.split("/")[0], []).append(path)

    lines: List[str] = []
    for directory in sorted(grouped):
        lines.append(f"### {directory}")
        lines.append("")
        lines.extend(f"- [{p}]({p})" for p in sorted(grouped[directory]))
        lines.append("")

    return (
        "## Supporting files\n\n"
        "The following files are bundled with this skill:\n\n"
        + "\n".join(lines).strip()
    )


def render_skill_body(skill: SkillRecord, files_index: Optional[Sequence[str]] = None) -> str:
    """Render the Markdown body (everything after the frontmatter)."""
    sections = [
        f"## Purpose\n\n{skill.summary}",
        f"## Inputs\n\n{skill.inputs}",
        f"## Outputs\n\n{skill.outputs}",
    ]

    trigger_lines = [f'- "{t}"' for t in normalize_triggers(skill.triggers)]
    if trigger_lines:
        sections.append("## Trigger phrases\n\n" + "\n".join(trigger_lines))

    steps = "\n".join(f"{i}. {step}" for i, step in enumerate(skill.steps, start=1))
    sections.append(f"## Workflow\n\n{steps}")
    sections.append(f"## Pitfalls\n\n{skill.risks}")
    sections.append(_guardrails_section(skill))
    sections.append(_tests_section(skill))

    if files_index:
        sections.append(_supporting_files_section(files_index))

    return f"# {skill.title}\n\n" + "\n\n".join(sections)


def render_skill_markdown(skill: SkillRecord, files_index: Optional[Sequence[str]] = None) -> str:
    """Render the complete SKILL.md for a skill.

    Args:
        skill: Skill record to compile
        files_index: Optional supporting file paths; when non-empty a
            "Supporting files" section linking each path is appended

    Returns:
        SKILL.md text; the body is appended unstripped plus one newline
    """
    handler = YAMLHandler()
    header = handler.export(
        _frontmatter_metadata(skill),
        sort_keys=False,
        width=YAML_LINE_WIDTH,
        allow_unicode=True,
        default_flow_style=False,
    )
    return (
        f"{handler.START_DELIMITER}\n{header}\n{handler.END_DELIMITER}\n\n"
        f"{render_skill_body(skill, files_index)}\n"
    )
