"""Typing-centric domain modules."""

from formlayout.typing.enums import ErrorKind, FieldKind, Side
from formlayout.typing.models import (
    ChoiceAttributes,
    FieldLocation,
    FieldTypeDescriptor,
    FormDocument,
    FormField,
    FormPage,
    FormRow,
    NumberAttributes,
    SelectOption,
    TextAttributes,
)
from formlayout.typing.protocol import FormPayload, IdFactory, PersistenceAdapter

__all__ = [
    "ChoiceAttributes",
    "ErrorKind",
    "FieldKind",
    "FieldLocation",
    "FieldTypeDescriptor",
    "FormDocument",
    "FormField",
    "FormPage",
    "FormPayload",
    "FormRow",
    "IdFactory",
    "NumberAttributes",
    "PersistenceAdapter",
    "SelectOption",
    "Side",
    "TextAttributes",
]
