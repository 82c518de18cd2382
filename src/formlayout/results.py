"""Discriminated results returned by layout engine operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from formlayout.exceptions import LayoutError
    from formlayout.typing.enums import ErrorKind


@dataclass(frozen=True)
class Success[T]:
    """Operation completed; `value` holds the affected entity (or None)."""

    value: T
    ok: Literal[True] = True


@dataclass(frozen=True)
class Failure:
    """Operation rejected; the document was left untouched."""

    error: LayoutError
    ok: Literal[False] = False

    @property
    def kind(self) -> ErrorKind:
        """Return the error discriminator."""
        return self.error.kind

    @property
    def message(self) -> str:
        """Return a user-facing description of the failure."""
        return str(self.error)


type Result[T] = Success[T] | Failure
