"""Collaborator interfaces."""

from __future__ import annotations

from collections.abc import Awaitable
from typing import Any, Protocol

type FormPayload = dict[str, Any]


class IdFactory(Protocol):
    """Generator of process-unique identifiers."""

    def __call__(self, prefix: str) -> str:
        """Return a new identifier.

        Args:
            prefix: Entity prefix, e.g. `field`, `row` or `page`.

        Returns:
            str: Identifier never returned before by this factory.
        """


class PersistenceAdapter(Protocol):
    """Storage collaborator for serialized form documents.

    Implementations may be synchronous or return awaitables; failures are
    reported by raising.
    """

    def save(self, payload: FormPayload) -> str | Awaitable[str]:
        """Store a serialized document.

        Args:
            payload: JSON-shaped document envelope.

        Returns:
            str | Awaitable[str]: Stored identifier.
        """

    def load(self, stored_id: str) -> FormPayload | Awaitable[FormPayload]:
        """Fetch a serialized document.

        Args:
            stored_id: Identifier returned by `save`.

        Returns:
            FormPayload | Awaitable[FormPayload]: JSON-shaped document envelope.
        """
