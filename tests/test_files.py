from __future__ import annotations

import pytest

from skill_vault.skills.files import (
    ALLOWED_DIRS,
    is_safe_skill_file_path,
    validate_skill_file_path,
)


@pytest.mark.parametrize(
    "path",
    [
        "references/rules.md",
        "examples/input.json",
        "scripts/nested/deep/run.py",
        "assets/logo.png",
        "templates/report.md",
        "references/skill.md.bak",
    ],
)
def test_accepts_paths_under_allowed_dirs(path: str) -> None:
    verdict = validate_skill_file_path(path)
    assert verdict.valid
    assert verdict.errors == []
    assert is_safe_skill_file_path(path)


@pytest.mark.parametrize(
    "path, reason",
    [
        ("/abs/path.md", "path must not start with /"),
        ("references/../etc/passwd", "path must not contain .."),
        ("references\\rules.md", "path must not contain backslash"),
        ("foo/bar.md", "path must start with one of"),
        ("rules.md", "path must start with one of"),
        ("references/", "filename must not be empty"),
        ("a/../../b", "path must not contain .."),
        ("other/x.md", "path must start with one of"),
    ],
)
def test_rejects_unsafe_paths(path: str, reason: str) -> None:
    verdict = validate_skill_file_path(path)
    assert not verdict.valid
    assert any(reason in e for e in verdict.errors)
    assert not is_safe_skill_file_path(path)


def test_reasons_accumulate() -> None:
    errors = validate_skill_file_path("/../x\\").errors
    assert "path must not start with /" in errors
    assert "path must not contain .." in errors
    assert "path must not contain backslash" in errors
    assert f"path must start with one of: {', '.join(ALLOWED_DIRS)}" in errors


@pytest.mark.parametrize("path", ["SKILL.md", "skill.md", "references/SKILL.md", "scripts/Skill.MD"])
def test_skill_md_is_reserved(path: str) -> None:
    assert validate_skill_file_path(path).errors == [
        "SKILL.md is auto-generated and cannot be created as a file"
    ]


@pytest.mark.parametrize("path", ["", "   ", None, 42])
def test_empty_or_non_string_path(path) -> None:
    assert validate_skill_file_path(path).errors == ["path must not be empty"]
