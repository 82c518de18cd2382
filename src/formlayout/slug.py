"""Form slug and preview URL helpers."""

from __future__ import annotations

import re

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")
PLACEHOLDER_SLUG = "form-slug"


def slugify(name: str) -> str:
    """Derive a URL-safe slug from a form name.

    Args:
        name (str): Human readable form name.

    Returns:
        str: Lower-case, hyphen-separated slug; empty when nothing usable remains.
    """
    return _NON_SLUG_CHARS.sub("-", name.lower()).strip("-")


def preview_url(host: str, slug: str) -> str:
    """Build the public preview address of a form.

    Args:
        host (str): Tenant host, e.g. `yourclub.raceyaclub.local`.
        slug (str): Form slug; a placeholder is used while it is blank.

    Returns:
        str: Preview URL without scheme.
    """
    return f"{host}/forms/{slug or PLACEHOLDER_SLUG}"
