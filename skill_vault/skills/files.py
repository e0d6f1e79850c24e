"""Supporting file path gate.

Bundled files may only live under a fixed set of top-level directories and
must be plain relative paths. The compiled SKILL.md is generated and can
never be supplied as a file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

ALLOWED_DIRS = ("references", "examples", "scripts", "assets", "templates")
RESERVED_FILENAME = "skill.md"

TEXT_MAX_BYTES = 200 * 1024
BINARY_MAX_BYTES = 2 * 1024 * 1024


@dataclass(frozen=True)
class PathValidation:
    errors: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def validate_skill_file_path(path: str) -> PathValidation:
    """Check a bundle-relative file path.

    Never raises. Empty paths and the reserved ``SKILL.md`` name are reported
    on their own; every other reason is accumulated.

    Args:
        path: Path relative to the skill root, e.g. ``references/rules.md``

    Returns:
        PathValidation with the reasons the path was rejected (if any)
    """
    if not isinstance(path, str) or not path.strip():
        return PathValidation(["path must not be empty"])

    lower = path.lower()
    if lower == RESERVED_FILENAME or lower.endswith("/" + RESERVED_FILENAME):
        return PathValidation(["SKILL.md is auto-generated and cannot be created as a file"])

    errors = []
    if path.startswith("/"):
        errors.append("path must not start with /")
    if ".." in path:
        errors.append("path must not contain ..")
    if "\\" in path:
        errors.append("path must not contain backslash")

    parts = path.split("/")
    if parts[0] not in ALLOWED_DIRS:
        errors.append(f"path must start with one of: {', '.join(ALLOWED_DIRS)}")

    if not parts[-1].strip():
        errors.append("filename must not be empty")

    return PathValidation(errors)


def is_safe_skill_file_path(path: str) -> bool:
    return validate_skill_file_path(path).valid
