"""Package exceptions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from formlayout.typing.enums import ErrorKind


class PackageError(Exception):
    """Root exception for the package."""


@dataclass(frozen=True)
class SettingsError(PackageError):
    """Raised when settings cannot be loaded or validated."""

    message: str = "Failed to load settings"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class AsyncExecutionError(PackageError):
    """Raised when an awaited persistence call fails in the compatibility runner."""

    result: BaseException
    message: str = "Async operation failed"

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.result}"


@dataclass
class PersistenceError(PackageError):
    """Raised by persistence adapters when a form cannot be stored or loaded."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class LayoutConsistencyError(PackageError):
    """Raised when the layout model is observed in a structurally invalid state.

    This is never part of the user-facing result set: reaching it means an
    engine operation broke an invariant.
    """

    violations: tuple[str, ...]

    def __str__(self) -> str:
        """Return error message payload."""
        return "Layout invariants violated: " + "; ".join(self.violations)


class LayoutError(PackageError):
    """Base class for expected domain failures returned by the layout engine."""

    kind: ClassVar[ErrorKind]


@dataclass(frozen=True)
class UnknownFieldKindError(LayoutError):
    """Requested field kind is not registered."""

    kind: ClassVar[ErrorKind] = ErrorKind.UNKNOWN_FIELD_KIND

    field_kind: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Unknown field kind: {self.field_kind}"


@dataclass(frozen=True)
class FieldNotFoundError(LayoutError):
    """Referenced field does not exist (or is not where the caller expects it)."""

    kind: ClassVar[ErrorKind] = ErrorKind.FIELD_NOT_FOUND

    field_id: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Field not found: {self.field_id}"


@dataclass(frozen=True)
class PageNotFoundError(LayoutError):
    """Referenced page does not exist."""

    kind: ClassVar[ErrorKind] = ErrorKind.PAGE_NOT_FOUND

    page_id: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Page not found: {self.page_id}"


@dataclass(frozen=True)
class RowFullError(LayoutError):
    """Target row already holds the maximum number of fields."""

    kind: ClassVar[ErrorKind] = ErrorKind.ROW_FULL

    row_id: str
    capacity: int = 2

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Row {self.row_id} already holds {self.capacity} fields"


@dataclass(frozen=True)
class IndexOutOfRangeError(LayoutError):
    """Positional index does not address an existing row or page."""

    kind: ClassVar[ErrorKind] = ErrorKind.INDEX_OUT_OF_RANGE

    index: int
    size: int

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Index {self.index} out of range for {self.size} item(s)"


@dataclass(frozen=True)
class LastPageProtectedError(LayoutError):
    """The only remaining page cannot be deleted."""

    kind: ClassVar[ErrorKind] = ErrorKind.LAST_PAGE_PROTECTED

    page_id: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Page {self.page_id} is the last page and cannot be deleted"


@dataclass(frozen=True)
class ValidationIssue:
    """One reason a form cannot be saved or a change cannot be applied."""

    message: str
    attribute: str
    field_id: str | None = None


@dataclass(frozen=True)
class ValidationFailedError(LayoutError):
    """Form or field values are incomplete or invalid."""

    kind: ClassVar[ErrorKind] = ErrorKind.VALIDATION_FAILED

    issues: tuple[ValidationIssue, ...] = field(default_factory=tuple)

    @property
    def field_ids(self) -> list[str]:
        """Return ids of offending fields, without duplicates."""
        return list(dict.fromkeys(issue.field_id for issue in self.issues if issue.field_id))

    def __str__(self) -> str:
        """Return error message payload."""
        return "Validation failed: " + "; ".join(issue.message for issue in self.issues)


@dataclass(frozen=True)
class PersistenceFailedError(LayoutError):
    """The persistence adapter rejected a save or load."""

    kind: ClassVar[ErrorKind] = ErrorKind.PERSISTENCE_FAILED

    cause: BaseException

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Persistence failed: {self.cause}"
