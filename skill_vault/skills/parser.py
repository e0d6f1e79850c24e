"""Parser and checker for compiled SKILL.md documents.

Used to inspect a SKILL.md that already exists (exported, hand edited or
found in a local skill folder). Parsing is done via `python-frontmatter`
(import name: `frontmatter`).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import frontmatter
import yaml

from skill_vault.skills.lint import SLUG_RE
from skill_vault.skills.markdown import DESCRIPTION_MAX, DESCRIPTION_PREFIX, extract_relative_links

STANDARD_FIELDS = {
    "name",
    "description",
    "allowed-tools",
    "disable-model-invocation",
    "user-invocable",
    "metadata",
    "compatibility",
    "license",
}
RECOMMENDED_SECTIONS = (
    "## Purpose",
    "## Inputs",
    "## Outputs",
    "## Workflow",
    "## Guardrails",
    "## Tests",
)
_PLACEHOLDER_RE = re.compile(r"<[^>\n]+>")


@dataclass
class DocumentCheck:
    metadata: Dict[str, Any] = field(default_factory=dict)
    body: str = ""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def parse_skill_document(text: str) -> Tuple[Dict[str, Any], str]:
    """Split a SKILL.md into its frontmatter mapping and Markdown body.

    Raises:
        ValueError: If the frontmatter is missing, malformed or not a mapping
    """
    try:
        post = frontmatter.loads(text.replace("\r\n", "\n"))
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse frontmatter: {e}") from e

    metadata = post.metadata
    if not isinstance(metadata, dict) or not metadata:
        raise ValueError("SKILL.md frontmatter missing or malformed")

    return dict(metadata), post.content or ""


def _check_metadata(metadata: Dict[str, Any], dir_name: Optional[str], check: DocumentCheck) -> None:
    non_standard = sorted(set(metadata) - STANDARD_FIELDS)
    for key in non_standard:
        check.warnings.append(f"unexpected frontmatter key: {key}")

    name = metadata.get("name")
    if not isinstance(name, str) or not name.strip():
        check.errors.append("frontmatter.name is required")
    else:
        if not SLUG_RE.fullmatch(name):
            check.errors.append("frontmatter.name must match ^[a-z0-9-]{1,64}$")
        if dir_name is not None and name != dir_name:
            check.warnings.append(
                f"frontmatter.name ({name}) differs from folder name ({dir_name})"
            )

    description = metadata.get("description")
    if not isinstance(description, str) or not description.strip():
        check.errors.append("frontmatter.description is required")
    else:
        if len(description) > DESCRIPTION_MAX:
            check.errors.append(f"frontmatter.description must be <= {DESCRIPTION_MAX} chars")
        if not description.startswith(DESCRIPTION_PREFIX):
            check.warnings.append(f'description should start with: "{DESCRIPTION_PREFIX}"')

    tools = metadata.get("allowed-tools")
    if tools is not None and (
        not isinstance(tools, list) or any(not isinstance(t, str) for t in tools)
    ):
        check.errors.append("frontmatter.allowed-tools must be a list of strings")

    for key in ("disable-model-invocation", "user-invocable"):
        if key in metadata and not isinstance(metadata[key], bool):
            check.errors.append(f"frontmatter.{key} must be boolean")


def validate_skill_document(text: str, dir_name: Optional[str] = None) -> DocumentCheck:
    """Check a compiled SKILL.md.

    Errors make the document unusable; warnings flag things a reviewer
    should look at (missing sections, leftover ``<placeholders>``).

    Args:
        text: Full SKILL.md content
        dir_name: Folder the document lives in, compared against ``name``

    Returns:
        DocumentCheck with parsed metadata, body, errors and warnings
    """
    check = DocumentCheck()
    try:
        check.metadata, check.body = parse_skill_document(text)
    except ValueError as e:
        check.errors.append(str(e))
        return check

    _check_metadata(check.metadata, dir_name, check)

    for section in RECOMMENDED_SECTIONS:
        if section not in check.body:
            check.warnings.append(f"missing recommended section: {section}")

    if _PLACEHOLDER_RE.search(check.body):
        check.warnings.append("template placeholders detected in body (e.g., <...>)")

    for link in extract_relative_links(check.body):
        if link.startswith("/") or ".." in link or "\\" in link:
            check.errors.append(f"unsafe relative link path: {link}")

    return check


def load_skill_document(skill_file: Path) -> str:
    """Read a SKILL.md file.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    if not skill_file.exists():
        raise FileNotFoundError(f"SKILL.md not found: {skill_file}")

    return skill_file.read_text(encoding="utf-8")
