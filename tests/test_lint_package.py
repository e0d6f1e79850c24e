from __future__ import annotations

from skill_vault.skills.lint import lint_skill_package


def test_linked_file_must_be_bundled(make_skill) -> None:
    skill = make_skill(inputs="See [cfg](references/cfg.json) for the format.")

    result = lint_skill_package(skill, ["references/rules.md"])
    assert [e.message for e in result.errors] == ["missing file: references/cfg.json"]
    assert result.errors[0].field == "files"

    result = lint_skill_package(skill, ["references/rules.md", "references/cfg.json"])
    assert result.valid


def test_http_links_are_ignored(make_skill) -> None:
    skill = make_skill(risks="Read [the docs](https://example.com/docs) first.")
    assert lint_skill_package(skill, []).valid


def test_generated_supporting_links_always_resolve(valid_skill) -> None:
    files = ["references/a.md", "scripts/run.py", "templates/report.md"]
    assert lint_skill_package(valid_skill, files).valid


def test_invalid_bundle_paths_are_reported(valid_skill) -> None:
    result = lint_skill_package(valid_skill, ["foo/bar.md", "references/ok.md"])

    messages = [e.message for e in result.errors]
    assert len(messages) >= 1
    assert messages[0].startswith("invalid path: foo/bar.md (path must start with one of")
    assert all(e.field == "files" for e in result.errors)


def test_skill_md_in_bundle_is_rejected(valid_skill) -> None:
    result = lint_skill_package(valid_skill, ["SKILL.md"])
    assert result.errors[0].message == (
        "invalid path: SKILL.md (SKILL.md is auto-generated and cannot be created as a file)"
    )


def test_record_errors_come_first(make_skill) -> None:
    skill = make_skill(triggers=["one"], summary="uses [x](references/x.md)")
    result = lint_skill_package(skill, ["/abs.md"])

    fields = [e.field for e in result.errors]
    assert fields[0] == "triggers"
    assert fields[1:] == ["files"] * (len(fields) - 1)
    messages = [e.message for e in result.errors]
    assert messages[1].startswith("invalid path: /abs.md (")
    assert "missing file: references/x.md" in messages


def test_package_lint_without_files_matches_record_lint(valid_skill) -> None:
    assert lint_skill_package(valid_skill, []).valid
