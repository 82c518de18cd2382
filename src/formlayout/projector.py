"""Projection of a form document into the Vueform element schema."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from formlayout.typing.enums import FieldKind
from formlayout.typing.models import FULL_WIDTH, ChoiceAttributes, NumberAttributes, TextAttributes

if TYPE_CHECKING:
    from formlayout.typing.models import FormDocument, FormField

RENDERER_TYPES: dict[str, str] = {
    FieldKind.TEXT: "text",
    FieldKind.EMAIL: "text",
    FieldKind.NUMBER: "text",
    FieldKind.TEXTAREA: "textarea",
    FieldKind.SELECT: "select",
}
INPUT_TYPES: dict[str, str] = {
    FieldKind.EMAIL: "email",
    FieldKind.NUMBER: "number",
}


def element_key(position: int) -> str:
    """Return the schema key of the field at a 1-based traversal position."""
    return f"field_{position}"


def _rules(field: FormField) -> list[str]:
    rules: list[str] = []
    if field.required:
        rules.append("required")

    attributes = field.attributes
    if isinstance(attributes, TextAttributes):
        if attributes.min_length:
            rules.append(f"min:{attributes.min_length}")
        if attributes.max_length:
            rules.append(f"max:{attributes.max_length}")
    elif isinstance(attributes, NumberAttributes):
        if attributes.min_value is not None:
            rules.append(f"min:{attributes.min_value}")
        if attributes.max_value is not None:
            rules.append(f"max:{attributes.max_value}")

    if field.kind == FieldKind.EMAIL:
        rules.append("email")
    return rules


def _items(attributes: ChoiceAttributes) -> list[dict[str, Any]]:
    items: list[dict[str, Any]] = []
    for option in attributes.options:
        item: dict[str, Any] = {"value": option.value, "label": option.label}
        if option.price > 0:
            item["price"] = option.price
        items.append(item)
    return items


def project_field(field: FormField) -> dict[str, Any]:
    """Build the schema element of one field.

    Args:
        field (FormField): Field to project.

    Returns:
        dict[str, Any]: Element config; unset attributes are left out, never emitted as None.
    """
    element: dict[str, Any] = {
        "type": RENDERER_TYPES.get(field.kind, field.kind),
        "inputType": INPUT_TYPES.get(field.kind),
        "label": field.label or None,
        "placeholder": field.placeholder or None,
        "description": field.description or None,
        "columns": field.columns if field.columns < FULL_WIDTH else None,
    }
    rules = _rules(field)
    if rules:
        element["rules"] = "|".join(rules)
    if isinstance(field.attributes, ChoiceAttributes):
        element["items"] = _items(field.attributes)
    if field.disabled_after_submission:
        element["disabled"] = {"afterSubmission": True}
    return {key: value for key, value in element.items() if value is not None}


def project(document: FormDocument) -> dict[str, dict[str, Any]]:
    """Project a document into the renderer's element schema.

    Keys follow traversal order (pages, rows, then columns), so reordering
    fields changes their keys on the next projection.

    Args:
        document (FormDocument): Document to project.

    Returns:
        dict[str, dict[str, Any]]: Schema keyed by `field_<n>`.
    """
    return {
        element_key(position): project_field(field)
        for position, field in enumerate(document.ordered_fields(), start=1)
    }


def project_steps(document: FormDocument) -> dict[str, dict[str, Any]]:
    """Build the wizard steps grouping projected elements by page.

    Args:
        document (FormDocument): Document to project.

    Returns:
        dict[str, dict[str, Any]]: Steps keyed by `page_<n>` with their element keys.
    """
    steps: dict[str, dict[str, Any]] = {}
    position = 0
    for page_number, page in enumerate(document.ordered_pages(), start=1):
        elements: list[str] = []
        for row in document.page_rows(page.id):
            for _ in row.field_ids:
                position += 1
                elements.append(element_key(position))
        step: dict[str, Any] = {"label": page.title, "elements": elements}
        if page.description:
            step["description"] = page.description
        steps[f"page_{page_number}"] = step
    return steps


def schema_json(document: FormDocument, *, with_steps: bool = False) -> str:
    """Render the projected schema as indented JSON.

    Args:
        document (FormDocument): Document to project.
        with_steps (bool): Wrap elements and steps in one object.

    Returns:
        str: JSON text.
    """
    payload: dict[str, Any] = project(document)
    if with_steps:
        payload = {"schema": payload, "steps": project_steps(document)}
    return json.dumps(payload, indent=2, ensure_ascii=False)
