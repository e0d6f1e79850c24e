from __future__ import annotations

from typing import Callable

import pytest

from skill_vault.skills.models import SkillRecord


def _make_skill(**overrides) -> SkillRecord:
    data = {
        "title": "Test Skill",
        "slug": "test-skill",
        "summary": "a test skill for unit testing",
        "inputs": "test input",
        "outputs": "test output",
        "steps": ["step one", "step two", "step three"],
        "risks": "no risks",
        "triggers": ["trigger one", "trigger two", "trigger three"],
        "guardrails": {
            "allowed_tools": ["Read"],
            "disable_model_invocation": False,
            "user_invocable": True,
            "stop_conditions": ["stop if error"],
            "escalation": "ASK_HUMAN",
        },
        "tests": [{"name": "basic", "input": "hello", "expected_output": "world"}],
    }
    data.update(overrides)
    return SkillRecord.model_validate(data)


@pytest.fixture
def make_skill() -> Callable[..., SkillRecord]:
    """Build a lint-clean skill; keyword arguments replace top-level fields."""
    return _make_skill


@pytest.fixture
def valid_skill() -> SkillRecord:
    return _make_skill()
