"""JSON schema the CLI must follow for its structured output (`--json-schema`)."""

import json
from typing import Any, Dict

from skill_vault.skills.models import VALID_ESCALATIONS

_STRINGS = {"type": "array", "items": {"type": "string"}}

CHANGE_SET_JSON_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["skillPatch", "fileOps"],
    "additionalProperties": False,
    "properties": {
        "skillPatch": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "title": {"type": "string"},
                "summary": {"type": "string"},
                "inputs": {"type": "string"},
                "outputs": {"type": "string"},
                "steps": {**_STRINGS, "minItems": 3, "maxItems": 7},
                "risks": {"type": "string"},
                "triggers": {**_STRINGS, "minItems": 3},
                "guardrails": {
                    "type": "object",
                    "additionalProperties": False,
                    "properties": {
                        "allowed_tools": _STRINGS,
                        "disable_model_invocation": {"type": "boolean"},
                        "user_invocable": {"type": "boolean"},
                        "stop_conditions": _STRINGS,
                        "escalation": {"type": "string", "enum": list(VALID_ESCALATIONS)},
                    },
                },
                "tests": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["name", "input", "expected_output"],
                        "properties": {
                            "name": {"type": "string"},
                            "input": {"type": "string"},
                            "expected_output": {"type": "string"},
                        },
                    },
                },
                "tags": _STRINGS,
            },
        },
        "fileOps": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["op", "path"],
                "additionalProperties": False,
                "properties": {
                    "op": {"type": "string", "enum": ["upsert", "delete"]},
                    "path": {"type": "string"},
                    "mime": {"type": "string"},
                    "content_text": {"type": "string"},
                    "content_base64": {"type": "string"},
                },
            },
        },
        "notes": {"type": "string"},
    },
}


def change_set_json_schema() -> str:
    """Compact JSON encoding, suitable as a single argv element."""
    return json.dumps(CHANGE_SET_JSON_SCHEMA, separators=(",", ":"))
