from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

import pytest

from skill_vault.ai.changeset import ChangeSet
from skill_vault.ai.propose import AiAction
from skill_vault.ai.runner import ProcessResult
from skill_vault.config import RunnerSettings
from skill_vault.skills.markdown import render_skill_markdown
from skill_vault.store import (
    LocalSkillStore,
    SecurityError,
    apply_validated_change_set,
    lint_stored_skill,
    propose_for_record,
)

PNG = b"\x89PNG\r\n\x1a\n\x00\x00"


def _write_bundle(skill_dir: Path) -> None:
    (skill_dir / "references").mkdir(parents=True, exist_ok=True)
    (skill_dir / "scripts").mkdir(parents=True, exist_ok=True)
    (skill_dir / "assets").mkdir(parents=True, exist_ok=True)
    (skill_dir / "references" / "rules.md").write_text("# Rules\n", encoding="utf-8")
    (skill_dir / "references" / ".hidden").write_text("x", encoding="utf-8")
    (skill_dir / "references" / "SKILL.md").write_text("x", encoding="utf-8")
    (skill_dir / "scripts" / "run.py").write_text("print('hi')\n", encoding="utf-8")
    (skill_dir / "assets" / "logo.png").write_bytes(PNG)
    (skill_dir / "notes.txt").write_text("not bundled", encoding="utf-8")


@pytest.fixture
def store(tmp_path: Path) -> LocalSkillStore:
    _write_bundle(tmp_path / "skills" / "skill-a")
    (tmp_path / "secret.txt").write_text("NO", encoding="utf-8")
    return LocalSkillStore(skills_dir=tmp_path / "skills")


class RecordingSink:
    def __init__(self):
        self.applied = []

    def apply_change_set(self, record_id, change_set: ChangeSet) -> None:
        self.applied.append((record_id, change_set))


def test_file_index(store: LocalSkillStore) -> None:
    entries = store.get_file_index("skill-a")

    assert [e.path for e in entries] == ["references/rules.md", "scripts/run.py", "assets/logo.png"]
    rules = entries[0]
    assert rules.is_binary is False
    assert rules.content == "# Rules\n"
    assert rules.size_bytes == 8

    logo = entries[2]
    assert logo.is_binary is True
    assert logo.content == PNG
    assert logo.mime == "image/png"


def test_file_index_unknown_skill(store: LocalSkillStore) -> None:
    with pytest.raises(FileNotFoundError):
        store.get_file_index("missing")


def test_read_file_allows_only_within_skill(store: LocalSkillStore) -> None:
    assert store.read_file_content("skill-a", "references/rules.md") == b"# Rules\n"

    with pytest.raises(SecurityError):
        store.read_file_content("skill-a", "../secret.txt")

    with pytest.raises(SecurityError):
        store.read_file_content("skill-a", "/etc/passwd")

    with pytest.raises(SecurityError):
        store.read_file_content("skill-a", "notes.txt")

    with pytest.raises(FileNotFoundError):
        store.read_file_content("skill-a", "references/none.md")


@pytest.mark.parametrize("name", ["", "../skills", "a/b", "a\\b"])
def test_invalid_skill_folder_name(store: LocalSkillStore, name: str) -> None:
    with pytest.raises(SecurityError):
        store.skill_dir(name)


def test_security_error_is_value_error() -> None:
    assert issubclass(SecurityError, ValueError)


def test_validate_skill_directory(store: LocalSkillStore, make_skill) -> None:
    skill = make_skill(slug="skill-a", inputs="See [cfg](references/cfg.json).")
    skill_md = render_skill_markdown(skill, ["references/rules.md"])
    (store.skills_dir / "skill-a" / "SKILL.md").write_text(skill_md, encoding="utf-8")

    check = store.validate_skill_directory("skill-a")
    assert check.errors == ["missing linked file: references/cfg.json"]
    assert check.metadata["name"] == "skill-a"


def test_lint_stored_skill(store: LocalSkillStore, make_skill) -> None:
    assert lint_stored_skill(store, "skill-a", make_skill(slug="skill-a")).valid

    skill = make_skill(slug="skill-a", risks="Read [cfg](references/cfg.json)")
    result = lint_stored_skill(store, "skill-a", skill)
    assert [e.message for e in result.errors] == ["missing file: references/cfg.json"]


def test_propose_for_record_sends_file_index(store: LocalSkillStore, valid_skill) -> None:
    prompts = []

    class Runner:
        def run(self, argv: Sequence[str], *, timeout: float) -> ProcessResult:
            prompts.append(argv[argv.index("-p") + 1])
            return ProcessResult(0, json.dumps({"structured_output": {"skillPatch": {}, "fileOps": []}}), "")

    proposal = propose_for_record(
        store,
        "skill-a",
        valid_skill,
        AiAction.CREATE_SUPPORTING_FILES,
        runner=Runner(),
        settings=RunnerSettings(),
    )
    assert proposal.change_set.file_ops == []
    assert '"path": "scripts/run.py"' in prompts[0]


def test_apply_validated_change_set() -> None:
    sink = RecordingSink()
    good = ChangeSet.model_validate(
        {"skillPatch": {}, "fileOps": [{"op": "delete", "path": "references/old.md"}]}
    )
    apply_validated_change_set(sink, "skill-a", good)
    assert sink.applied == [("skill-a", good)]

    bad = ChangeSet.model_validate(
        {"skillPatch": {}, "fileOps": [{"op": "upsert", "path": "SKILL.md", "content_text": "x"}]}
    )
    with pytest.raises(ValueError, match="Invalid changeSet"):
        apply_validated_change_set(sink, "skill-a", bad)
    assert len(sink.applied) == 1
