"""Store contracts and a directory-backed implementation.

The real store (records, versions, drafts, tags) lives outside this
package. It is reached through the small protocols below. `LocalSkillStore`
implements the read side for skill folders on disk:

    skills/
      my-skill/
        SKILL.md
        references/rules.md
        scripts/run.py
"""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import List, Optional, Protocol, Union

from skill_vault.ai.changeset import ChangeSet, validate_change_set
from skill_vault.ai.propose import AiAction, Proposal, propose_change_set
from skill_vault.skills.files import ALLOWED_DIRS, validate_skill_file_path
from skill_vault.skills.lint import lint_skill_package
from skill_vault.skills.markdown import extract_relative_links
from skill_vault.skills.models import FileEntry, LintResult, SkillRecord
from skill_vault.skills.parser import DocumentCheck, load_skill_document, validate_skill_document

logger = logging.getLogger(__name__)

RecordId = Union[int, str]


class SecurityError(ValueError):
    """Raised when a path attempts to escape a skill directory."""


class SkillFileSource(Protocol):
    def get_file_index(self, record_id: RecordId) -> List[FileEntry]:
        """Ordered snapshot of the record's supporting files."""
        ...

    def read_file_content(self, record_id: RecordId, path: str) -> bytes:
        ...


class ChangeSetSink(Protocol):
    def apply_change_set(self, record_id: RecordId, change_set: ChangeSet) -> None:
        """Apply record patch and file operations in one transaction."""
        ...


class LocalSkillStore:
    """Supporting files of skill folders below ``skills_dir``.

    The record id is the folder name.
    """

    def __init__(self, skills_dir: Union[str, Path] = "./skills"):
        self.skills_dir = Path(skills_dir)

    def skill_dir(self, record_id: RecordId) -> Path:
        name = str(record_id)
        if not name.strip() or "/" in name or "\\" in name or ".." in name:
            raise SecurityError(f"Invalid skill folder name: '{name}'")
        return self.skills_dir / name

    def get_file_index(self, record_id: RecordId) -> List[FileEntry]:
        skill_dir = self.skill_dir(record_id)
        if not skill_dir.is_dir():
            raise FileNotFoundError(f"Skill directory not found: {skill_dir}")

        entries = []
        for top in ALLOWED_DIRS:
            base = skill_dir / top
            if not base.is_dir():
                continue
            for file in sorted(base.rglob("*")):
                if not file.is_file() or file.name.startswith("."):
                    continue
                rel = file.relative_to(skill_dir).as_posix()
                if not validate_skill_file_path(rel).valid:
                    logger.warning("Skipping unsafe bundle path: %s", rel)
                    continue
                entries.append(self._entry(file, rel))
        return entries

    def _entry(self, file: Path, rel: str) -> FileEntry:
        data = file.read_bytes()
        try:
            content: Union[str, bytes] = data.decode("utf-8")
            is_binary = False
        except UnicodeDecodeError:
            content = data
            is_binary = True
        mime = mimetypes.guess_type(rel)[0] or ("application/octet-stream" if is_binary else "text/plain")
        return FileEntry(path=rel, is_binary=is_binary, size_bytes=len(data), mime=mime, content=content)

    def read_file_content(self, record_id: RecordId, path: str) -> bytes:
        """Read one supporting file with strict sandboxing."""
        skill_root = self.skill_dir(record_id).resolve()

        candidate = (skill_root / Path(path)).resolve()
        try:
            candidate.relative_to(skill_root)
        except ValueError as e:
            raise SecurityError(
                f"Access denied: '{path}' is outside skill '{record_id}'"
            ) from e

        if not validate_skill_file_path(path).valid:
            raise SecurityError(f"Access denied: '{path}' is not a supporting file path")

        if not candidate.is_file():
            raise FileNotFoundError(str(candidate))

        return candidate.read_bytes()

    def validate_skill_directory(self, record_id: RecordId) -> DocumentCheck:
        """Check the folder's SKILL.md and that its relative links exist on disk."""
        skill_dir = self.skill_dir(record_id)
        check = validate_skill_document(load_skill_document(skill_dir / "SKILL.md"), skill_dir.name)

        for link in extract_relative_links(check.body):
            if link.startswith("/") or ".." in link or "\\" in link:
                continue  # already reported as unsafe
            if not (skill_dir / link).exists():
                check.errors.append(f"missing linked file: {link}")
        return check


def lint_stored_skill(store: SkillFileSource, record_id: RecordId, skill: SkillRecord) -> LintResult:
    """Package lint against the store's current file index."""
    paths = [entry.path for entry in store.get_file_index(record_id)]
    return lint_skill_package(skill, paths)


def propose_for_record(
    store: SkillFileSource,
    record_id: RecordId,
    skill: SkillRecord,
    action: Union[AiAction, str],
    instruction: Optional[str] = None,
    **kwargs,
) -> Proposal:
    return propose_change_set(
        skill, action, instruction, files=store.get_file_index(record_id), **kwargs
    )


def apply_validated_change_set(sink: ChangeSetSink, record_id: RecordId, change_set: ChangeSet) -> None:
    """Hand ``change_set`` to the store only if it passes the gate.

    Raises:
        ValueError: If the change-set is rejected; nothing is applied
    """
    verdict = validate_change_set(change_set)
    if not verdict.valid:
        raise ValueError("Invalid changeSet: " + "; ".join(verdict.errors))
    sink.apply_change_set(record_id, change_set)
