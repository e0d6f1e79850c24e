from __future__ import annotations

from skill_vault.skills.lint import lint_skill, lint_skill_package
from skill_vault.skills.friendly import path_hint, to_friendly_issues, to_friendly_summary
from skill_vault.skills.models import LintError


def test_friendly_messages_for_record_rules(make_skill) -> None:
    skill = make_skill(slug=None, triggers=["a"], steps=[], tests=[])
    issues = to_friendly_issues(lint_skill(skill).errors)

    assert [i.field_label for i in issues] == ["Name", "Trigger phrases", "Steps", "Tests"]
    assert issues[1].message == "Add at least 3 trigger phrases (currently 1)."
    assert issues[2].message == "A skill needs 3 to 7 steps (currently 0)."
    assert all(i.suggestion for i in issues)


def test_friendly_file_messages(valid_skill) -> None:
    skill = valid_skill.model_copy(update={"inputs": "[x](references/x.md)"})
    issues = to_friendly_issues(lint_skill_package(skill, ["/abs.md"]).errors)

    assert issues[0].message == "Invalid file path: /abs.md"
    assert issues[0].suggestion == "Use a relative path, not one starting with /."
    assert issues[1].message == "Linked file does not exist: references/x.md."


def test_description_message_carries_length() -> None:
    issues = to_friendly_issues(
        [LintError("description", "generated description exceeds 2048 characters (2500)")]
    )
    assert issues[0].message == "The generated description is too long (currently 2500 characters)."


def test_unknown_field_falls_back_to_raw_message() -> None:
    issue = to_friendly_issues([LintError("other", "something odd")])[0]
    assert issue.field_label == "Setting"
    assert issue.message == "something odd"
    assert issue.suggestion is None


def test_summary_is_limited() -> None:
    errors = [LintError("tests", "x")] * 5
    summary = to_friendly_summary(errors)
    assert summary.splitlines() == [
        "1. Add at least one complete test case.",
        "2. Add at least one complete test case.",
        "3. Add at least one complete test case.",
    ]
    assert to_friendly_summary([]) == "Validation failed, please review and try again."


def test_path_hint_default() -> None:
    assert path_hint("something else") == "Check the directory and file name of this path."
