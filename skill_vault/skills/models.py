"""Skill data models.

`SkillRecord` mirrors the record kept by the store. It is intentionally
lenient: every field has a default so that lint can report what is missing
instead of failing at construction time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field


class Escalation(str, Enum):
    """How a skill hands off to a human."""

    REVIEW = "REVIEW"
    BLOCK = "BLOCK"
    ASK_HUMAN = "ASK_HUMAN"


VALID_ESCALATIONS = tuple(e.value for e in Escalation)


class Guardrails(BaseModel):
    allowed_tools: List[str] = Field(default_factory=list)
    disable_model_invocation: bool = False
    user_invocable: bool = True
    stop_conditions: List[str] = Field(default_factory=list)
    # Plain string so that an unknown value reaches lint instead of failing here.
    escalation: str = ""


class SkillTestCase(BaseModel):
    name: str = ""
    input: str = ""
    expected_output: str = ""

    @property
    def is_complete(self) -> bool:
        return all(v.strip() for v in (self.name, self.input, self.expected_output))


class SkillRecord(BaseModel):
    """A structured skill as stored. Compilation only reads it."""

    title: str = ""
    slug: Optional[str] = None
    summary: str = ""
    inputs: str = ""
    outputs: str = ""
    steps: List[str] = Field(default_factory=list)
    risks: str = ""
    triggers: List[str] = Field(default_factory=list)
    guardrails: Guardrails = Field(default_factory=Guardrails)
    tests: List[SkillTestCase] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


@dataclass(frozen=True)
class FileEntry:
    """One supporting file of a skill bundle."""

    path: str
    is_binary: bool = False
    size_bytes: int = 0
    mime: str = "text/plain"
    content: Union[str, bytes, None] = None


@dataclass(frozen=True)
class LintError:
    field: str
    message: str


@dataclass(frozen=True)
class LintResult:
    errors: List[LintError] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "errors": [{"field": e.field, "message": e.message} for e in self.errors],
        }
