"""Core domain model exports."""

from formlayout.typing.models.field import (
    FULL_WIDTH,
    HALF_WIDTH,
    ChoiceAttributes,
    FieldAttributes,
    FieldTypeDescriptor,
    FormField,
    NumberAttributes,
    SelectOption,
    TextAttributes,
)
from formlayout.typing.models.layout import (
    ROW_CAPACITY,
    FieldLocation,
    FormDocument,
    FormPage,
    FormRow,
    column_width,
)

__all__ = [
    "FULL_WIDTH",
    "HALF_WIDTH",
    "ROW_CAPACITY",
    "ChoiceAttributes",
    "FieldAttributes",
    "FieldLocation",
    "FieldTypeDescriptor",
    "FormDocument",
    "FormField",
    "FormPage",
    "FormRow",
    "NumberAttributes",
    "SelectOption",
    "TextAttributes",
    "column_width",
]
