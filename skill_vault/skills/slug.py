"""Derive a skill name (slug) from a title."""

import re

SLUG_MAX = 64


def slugify(title: str) -> str:
    """Lowercase, hyphen-separated, at most 64 characters.

    Characters outside ``[a-z0-9-]`` (including non-ASCII letters) become
    hyphens, hyphen runs collapse and leading/trailing hyphens are removed.
    The result may be empty.
    """
    value = re.sub(r"[^a-z0-9-]", "-", (title or "").lower())
    value = re.sub(r"-{2,}", "-", value).strip("-")
    return value[:SLUG_MAX].rstrip("-")
