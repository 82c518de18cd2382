from __future__ import annotations

import pytest

from formlayout.slug import preview_url, slugify


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Club Membership", "club-membership"),
        ("  --Summer  Camp 2025!--  ", "summer-camp-2025"),
        ("Été", "t"),
        ("!!!", ""),
    ],
)
def test_slugify(name: str, expected: str) -> None:
    assert slugify(name) == expected


def test_preview_url_uses_placeholder_for_blank_slug() -> None:
    assert preview_url("club.example", "") == "club.example/forms/form-slug"
    assert preview_url("club.example", "entry") == "club.example/forms/entry"
