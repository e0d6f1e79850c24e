"""Change-sets proposed by the AI editor and the gate they must pass.

A change-set is a patch for the skill record plus a list of file operations.
Nothing here applies it; the store does that, and only after
`validate_change_set` accepted it.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from skill_vault.skills.files import BINARY_MAX_BYTES, TEXT_MAX_BYTES, validate_skill_file_path
from skill_vault.skills.models import SkillRecord, SkillTestCase
from skill_vault.skills.slug import slugify

logger = logging.getLogger(__name__)

FILE_OPS = ("upsert", "delete")


class GuardrailsPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    allowed_tools: Optional[List[str]] = None
    disable_model_invocation: Optional[bool] = None
    user_invocable: Optional[bool] = None
    stop_conditions: Optional[List[str]] = None
    escalation: Optional[str] = None


class SkillPatch(BaseModel):
    """Fields to replace on the record. Omitted fields stay unchanged."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    summary: Optional[str] = None
    inputs: Optional[str] = None
    outputs: Optional[str] = None
    steps: Optional[List[str]] = None
    risks: Optional[str] = None
    triggers: Optional[List[str]] = None
    guardrails: Optional[GuardrailsPatch] = None
    tests: Optional[List[SkillTestCase]] = None
    tags: Optional[List[str]] = None


class FileOp(BaseModel):
    model_config = ConfigDict(extra="forbid")

    op: Literal["upsert", "delete"]
    path: str
    mime: Optional[str] = None
    content_text: Optional[str] = None
    content_base64: Optional[str] = None

    @property
    def is_binary(self) -> bool:
        return self.content_base64 is not None

    def content_bytes(self) -> bytes:
        if self.content_base64 is not None:
            return base64.b64decode(self.content_base64, validate=True)
        return (self.content_text or "").encode("utf-8")


class ChangeSet(BaseModel):
    """Proposed mutation. Wire names are ``skillPatch`` / ``fileOps``."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    skill_patch: SkillPatch = Field(alias="skillPatch")
    file_ops: List[FileOp] = Field(alias="fileOps")
    notes: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class ChangeSetValidation:
    errors: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def _decoded_size(value: str) -> Optional[int]:
    try:
        return len(base64.b64decode(value, validate=True))
    except (binascii.Error, ValueError):
        return None


def _check_file_op(index: int, fop: Any) -> List[str]:
    if not isinstance(fop, Mapping):
        return [f"fileOps[{index}] must be an object"]

    errors = []
    op = fop.get("op")
    path = fop.get("path")

    if op not in FILE_OPS:
        errors.append(f'fileOp.op must be "upsert" or "delete", got: "{op}"')

    verdict = validate_skill_file_path(path)
    if not verdict.valid:
        errors.append(f'fileOp path "{path}": {"; ".join(verdict.errors)}')

    if op != "upsert":
        return errors

    text = fop.get("content_text")
    encoded = fop.get("content_base64")
    has_text = isinstance(text, str)
    has_base64 = isinstance(encoded, str)

    if not has_text and not has_base64:
        errors.append(f'fileOp "{path}": upsert requires content_text or content_base64')
    if has_text and has_base64:
        errors.append(f'fileOp "{path}": provide only one of content_text or content_base64')

    if has_text and len(text.encode("utf-8")) > TEXT_MAX_BYTES:
        errors.append(f'fileOp "{path}": content_text exceeds 200KB limit')

    if has_base64:
        size = _decoded_size(encoded)
        if size is None:
            errors.append(f'fileOp "{path}": content_base64 is not valid base64')
        elif size > BINARY_MAX_BYTES:
            errors.append(f'fileOp "{path}": content_base64 exceeds 2MB limit')

    return errors


def validate_change_set(change_set: Union[ChangeSet, Mapping[str, Any], Any]) -> ChangeSetValidation:
    """Gate a change-set before anything trusts it.

    Accepts the raw structured output of the CLI (any JSON value) or a
    `ChangeSet`. Checks shape, the path gate for every file operation and
    the text/binary size ceilings. All violations are reported.

    Args:
        change_set: Candidate change-set

    Returns:
        ChangeSetValidation listing every violation
    """
    if isinstance(change_set, ChangeSet):
        change_set = change_set.to_wire()

    if not isinstance(change_set, Mapping):
        return ChangeSetValidation(["changeSet must be an object"])

    errors = []
    if not isinstance(change_set.get("skillPatch"), Mapping):
        errors.append("changeSet.skillPatch is required and must be an object")
    file_ops = change_set.get("fileOps")
    if not isinstance(file_ops, list):
        errors.append("changeSet.fileOps is required and must be an array")

    if not errors:
        for index, fop in enumerate(file_ops):
            errors.extend(_check_file_op(index, fop))

    if errors:
        logger.info("Rejected change-set with %d error(s)", len(errors))
    return ChangeSetValidation(errors)


def apply_skill_patch(skill: SkillRecord, patch: SkillPatch) -> SkillRecord:
    """Return a copy of ``skill`` with ``patch`` merged in.

    Guardrails are merged field by field. A new title also renames the
    slug. The input record is left untouched.
    """
    update: Dict[str, Any] = patch.model_dump(exclude_none=True, exclude={"guardrails", "tests"})
    if patch.tests is not None:
        update["tests"] = [t.model_copy() for t in patch.tests]
    if patch.guardrails is not None:
        update["guardrails"] = skill.guardrails.model_copy(
            update=patch.guardrails.model_dump(exclude_none=True)
        )
    if patch.title is not None:
        update["slug"] = slugify(patch.title)
    return skill.model_copy(update=update, deep=True)


def path_preview(change_set: ChangeSet) -> List[Dict[str, Any]]:
    """One row per file operation, for showing the user what will change.

    Sizes are decoded byte counts, so only call this on a change-set that
    passed `validate_change_set`.
    """
    return [
        {
            "op": fop.op,
            "path": fop.path,
            "binary": fop.is_binary,
            "size": len(fop.content_bytes()) if fop.op == "upsert" else 0,
        }
        for fop in change_set.file_ops
    ]
