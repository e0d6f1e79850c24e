"""Turn lint errors into messages an end user can act on."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from skill_vault.skills.models import LintError

FIELD_LABELS = {
    "slug": "Name",
    "title": "Title",
    "summary": "Summary",
    "triggers": "Trigger phrases",
    "steps": "Steps",
    "tests": "Tests",
    "description": "Description",
    "files": "Supporting files",
    "guardrails.stop_conditions": "Stop conditions",
    "guardrails.escalation": "Escalation policy",
    "guardrails": "Guardrails",
}

_PATH_HINTS = (
    ("path must not start with /", "Use a relative path, not one starting with /."),
    ("path must not contain ..", "Paths must not climb out of the skill with '..'."),
    ("path must not contain backslash", "Use / as the path separator, not \\."),
    (
        "path must start with one of",
        "Files must live under references/, examples/, scripts/, assets/ or templates/.",
    ),
    ("filename must not be empty", "The file name must not be empty."),
    ("SKILL.md is auto-generated", "SKILL.md is generated from the skill and cannot be uploaded."),
    ("path must not be empty", "The file path must not be empty."),
)


@dataclass(frozen=True)
class FriendlyIssue:
    field: str
    field_label: str
    message: str
    suggestion: Optional[str] = None


def _count(pattern: str, message: str) -> Optional[int]:
    match = re.search(pattern, message)
    return int(match.group(1)) if match else None


def path_hint(detail: str) -> str:
    for needle, hint in _PATH_HINTS:
        if needle in detail:
            return hint
    return "Check the directory and file name of this path."


def to_friendly_issue(error: LintError) -> FriendlyIssue:
    label = FIELD_LABELS.get(error.field, "Setting")
    raw = error.message or ""

    if error.field == "slug":
        return FriendlyIssue(
            error.field,
            label,
            "Add a title so a valid skill name can be generated.",
            "Names use lowercase letters, digits and hyphens, at most 64 characters.",
        )

    if error.field in ("triggers", "steps"):
        count = _count(r"got:\s*(\d+)", raw)
        current = f" (currently {count})" if count is not None else ""
        if error.field == "triggers":
            return FriendlyIssue(
                error.field,
                label,
                f"Add at least 3 trigger phrases{current}.",
                "Write them the way a user would actually ask.",
            )
        return FriendlyIssue(
            error.field,
            label,
            f"A skill needs 3 to 7 steps{current}.",
            "Make every step a concrete action.",
        )

    if error.field == "tests":
        return FriendlyIssue(
            error.field,
            label,
            "Add at least one complete test case.",
            "Fill in the name, input and expected output.",
        )

    if error.field == "guardrails.stop_conditions":
        return FriendlyIssue(
            error.field,
            label,
            "Add at least one stop condition.",
            "Say when the skill must stop before things go wrong.",
        )

    if error.field == "guardrails.escalation":
        return FriendlyIssue(
            error.field, label, "The escalation policy is not set.", "Pick REVIEW, BLOCK or ASK_HUMAN."
        )

    if error.field == "description":
        count = _count(r"\((\d+)\)", raw)
        current = f" (currently {count} characters)" if count is not None else ""
        return FriendlyIssue(
            error.field,
            label,
            f"The generated description is too long{current}.",
            "Shorten the summary or the trigger phrases.",
        )

    if error.field == "files" and raw.startswith("missing file:"):
        path = raw[len("missing file:"):].strip()
        return FriendlyIssue(
            error.field,
            label,
            f"Linked file does not exist: {path}.",
            "Create the file or remove the link from the skill text.",
        )

    if error.field == "files" and raw.startswith("invalid path:"):
        rest = raw[len("invalid path:"):].strip()
        path, _, detail = rest.partition(" (")
        return FriendlyIssue(error.field, label, f"Invalid file path: {path}", path_hint(detail))

    return FriendlyIssue(error.field, label, raw or f"{label} needs attention.")


def to_friendly_issues(errors: Iterable[LintError]) -> List[FriendlyIssue]:
    return [to_friendly_issue(e) for e in errors]


def to_friendly_summary(errors: Iterable[LintError], limit: int = 3) -> str:
    issues = to_friendly_issues(errors)
    if not issues:
        return "Validation failed, please review and try again."
    return "\n".join(f"{i}. {issue.message}" for i, issue in enumerate(issues[:limit], start=1))
