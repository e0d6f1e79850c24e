"""Lint gate for skills.

`lint_skill` checks a record against the export rules of the Agent Skills
format. `lint_skill_package` additionally checks the supporting file bundle
and that every relative link in the compiled SKILL.md resolves to a bundled
file.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from skill_vault.skills.files import validate_skill_file_path
from skill_vault.skills.markdown import (
    DESCRIPTION_MAX,
    build_description_candidate,
    extract_relative_links,
    render_skill_markdown,
)
from skill_vault.skills.models import VALID_ESCALATIONS, LintError, LintResult, SkillRecord

SLUG_RE = re.compile(r"[a-z0-9-]{1,64}")
MIN_TRIGGERS = 3
MIN_STEPS = 3
MAX_STEPS = 7

Rule = Callable[[SkillRecord], Optional[LintError]]


def check_slug(skill: SkillRecord) -> Optional[LintError]:
    if skill.slug and SLUG_RE.fullmatch(skill.slug):
        return None
    return LintError(
        "slug",
        f'name (slug) must match ^[a-z0-9-]{{1,64}}$, got: "{skill.slug or ""}"',
    )


def check_triggers(skill: SkillRecord) -> Optional[LintError]:
    if len(skill.triggers) >= MIN_TRIGGERS:
        return None
    return LintError(
        "triggers", f"triggers must have >= {MIN_TRIGGERS} items, got: {len(skill.triggers)}"
    )


def check_description(skill: SkillRecord) -> Optional[LintError]:
    # Measured before the builder drops triggers to make it fit.
    if len(skill.triggers) < MIN_TRIGGERS:
        return None
    length = len(build_description_candidate(skill.summary, skill.triggers))
    if length <= DESCRIPTION_MAX:
        return None
    return LintError(
        "description",
        f"generated description exceeds {DESCRIPTION_MAX} characters ({length})",
    )


def check_steps(skill: SkillRecord) -> Optional[LintError]:
    if MIN_STEPS <= len(skill.steps) <= MAX_STEPS:
        return None
    return LintError(
        "steps", f"steps must have {MIN_STEPS}~{MAX_STEPS} items, got: {len(skill.steps)}"
    )


def check_tests(skill: SkillRecord) -> Optional[LintError]:
    if any(t.is_complete for t in skill.tests):
        return None
    return LintError("tests", "tests must have >= 1 test case with name, input and expected_output")


def check_stop_conditions(skill: SkillRecord) -> Optional[LintError]:
    if skill.guardrails.stop_conditions:
        return None
    return LintError("guardrails.stop_conditions", "stop_conditions must have >= 1 item")


def check_escalation(skill: SkillRecord) -> Optional[LintError]:
    escalation = skill.guardrails.escalation
    if escalation in VALID_ESCALATIONS:
        return None
    return LintError(
        "guardrails.escalation",
        f'escalation must be one of {", ".join(VALID_ESCALATIONS)}, got: "{escalation}"',
    )


# Evaluated in this order; every rule runs regardless of earlier failures.
RULES: Tuple[Rule, ...] = (
    check_slug,
    check_triggers,
    check_description,
    check_steps,
    check_tests,
    check_stop_conditions,
    check_escalation,
)


def _run_rules(skill: SkillRecord, rules: Iterable[Rule]) -> List[LintError]:
    return [error for error in (rule(skill) for rule in rules) if error is not None]


def lint_skill(skill: SkillRecord) -> LintResult:
    """Validate a skill record.

    Args:
        skill: Record to check; it is not modified

    Returns:
        LintResult whose errors follow the rule declaration order
    """
    return LintResult(_run_rules(skill, RULES))


def lint_skill_package(skill: SkillRecord, file_paths: Sequence[str]) -> LintResult:
    """Validate a skill record together with its supporting files.

    1. Record rules (`lint_skill`)
    2. Path gate for every bundled file
    3. Every relative link in the rendered SKILL.md must name a bundled file

    Links in the generated "Supporting files" section always resolve, so
    only links typed by the author into free-text fields can fail step 3.
    """
    paths = list(file_paths)
    errors = list(lint_skill(skill).errors)

    for path in paths:
        verdict = validate_skill_file_path(path)
        if not verdict.valid:
            errors.append(
                LintError("files", f"invalid path: {path} ({'; '.join(verdict.errors)})")
            )

    bundled = set(paths)
    for link in extract_relative_links(render_skill_markdown(skill, paths)):
        if link not in bundled:
            errors.append(LintError("files", f"missing file: {link}"))

    return LintResult(errors)
