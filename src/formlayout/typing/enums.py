"""Project enums."""

from __future__ import annotations

from enum import StrEnum


class _EnumMixin(StrEnum):
    """Shared conversion helpers for user-facing enums."""

    @classmethod
    def from_str(cls, value: str) -> _EnumMixin:
        """Parse enum from string.

        Args:
            value: Raw string value.

        Raises:
            ValueError: If the value is not supported.

        Returns:
            _EnumMixin: Parsed enum value.
        """
        try:
            return cls(value)
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            message = f"Unsupported {cls.__name__} value '{value}'. Expected one of: {supported}"
            raise ValueError(message) from exc

    def to_str(self) -> str:
        """Return string representation.

        Returns:
            str: Enum string value.
        """
        return self.value


class FieldKind(_EnumMixin):
    """Field kinds shipped in the default registry."""

    TEXT = "text"
    EMAIL = "email"
    NUMBER = "number"
    TEXTAREA = "textarea"
    SELECT = "select"


class Side(_EnumMixin):
    """Drop position relative to a row or an anchor field."""

    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"


class ErrorKind(_EnumMixin):
    """Discriminator for expected layout engine failures."""

    UNKNOWN_FIELD_KIND = "unknown_field_kind"
    FIELD_NOT_FOUND = "field_not_found"
    PAGE_NOT_FOUND = "page_not_found"
    ROW_FULL = "row_full"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    LAST_PAGE_PROTECTED = "last_page_protected"
    VALIDATION_FAILED = "validation_failed"
    PERSISTENCE_FAILED = "persistence_failed"
