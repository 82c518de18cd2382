"""Form document serialization and reference persistence adapters."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from formlayout import logger
from formlayout.exceptions import PersistenceError
from formlayout.slug import slugify
from formlayout.typing.models import FormDocument
from formlayout.typing.protocol import FormPayload

_FORM_FILE_VERSION = 1
_FORM_FILE_SUFFIX = ".form.json"


def document_to_payload(document: FormDocument, *, saved_at: datetime | None = None) -> FormPayload:
    """Serialize a document into the JSON-shaped envelope handed to adapters.

    Args:
        document (FormDocument): Document to serialize.
        saved_at (datetime | None): Save timestamp, defaults to now (UTC).

    Returns:
        FormPayload: Versioned envelope of plain mappings, sequences and primitives.
    """
    timestamp = saved_at or datetime.now(tz=UTC)
    return {
        "form_file_version": _FORM_FILE_VERSION,
        "saved_at": timestamp.isoformat(),
        "document": document.model_dump(mode="json"),
    }


def document_from_payload(payload: object) -> FormDocument:
    """Rebuild a document from a stored envelope.

    Args:
        payload (object): Envelope produced by `document_to_payload`, or a bare document.

    Raises:
        PersistenceError: If the payload is not a JSON object or not a valid document.

    Returns:
        FormDocument: Restored document.
    """
    migrated = _migrate_form_payload(payload)
    try:
        return FormDocument.model_validate(migrated)
    except ValidationError as exc:
        raise PersistenceError(message=f"Stored form is not a valid document: {exc}") from exc


def _migrate_form_payload(payload: object) -> dict[str, object]:
    """Migrate stored payloads to the current document model format.

    Args:
        payload (object): Raw JSON payload.

    Raises:
        PersistenceError: If payload is not a JSON object.

    Returns:
        dict[str, object]: Document payload.
    """
    if not isinstance(payload, dict):
        raise PersistenceError(message="Form payload must be a JSON object")

    payload_obj = cast("dict[str, object]", payload)
    document_object = payload_obj
    embedded = payload_obj.get("document")
    if isinstance(embedded, dict):
        document_object = cast("dict[str, object]", embedded)

    migrated = dict(document_object)
    migrated.setdefault("selected_field_id", None)
    if "current_page_id" not in migrated:
        page_order = migrated.get("page_order")
        if isinstance(page_order, list) and page_order:
            migrated["current_page_id"] = page_order[0]
    return migrated


def _stored_id_for(payload: FormPayload) -> str:
    document = payload.get("document", payload)
    slug = document.get("form_slug", "") if isinstance(document, dict) else ""
    stored_id = slugify(str(slug))
    if not stored_id:
        raise PersistenceError(message="Cannot store a form without a slug")
    return stored_id


class InMemoryFormStore(BaseModel):
    """Process-local store keyed by form slug."""

    model_config = ConfigDict(extra="forbid")

    forms: dict[str, str] = Field(default_factory=dict)

    def save(self, payload: FormPayload) -> str:
        """Store a copy of the payload.

        Args:
            payload (FormPayload): Serialized document envelope.

        Returns:
            str: Stored identifier (the form slug).
        """
        stored_id = _stored_id_for(payload)
        self.forms[stored_id] = json.dumps(payload, sort_keys=True)
        return stored_id

    def load(self, stored_id: str) -> FormPayload:
        """Return a copy of a stored payload.

        Args:
            stored_id (str): Identifier returned by `save`.

        Raises:
            PersistenceError: If nothing is stored under this id.

        Returns:
            FormPayload: Serialized document envelope.
        """
        if stored_id not in self.forms:
            raise PersistenceError(message=f"No stored form with id '{stored_id}'")
        return json.loads(self.forms[stored_id])


class JsonFileFormStore(BaseModel):
    """Filesystem-based form store writing one JSON file per form."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    root: Path = Field(description="Store directory root.")

    def model_post_init(self, __context: object, /) -> None:
        """Ensure the store directory exists after model initialization.

        Args:
            __context (object): Pydantic model context.
        """
        self.root.mkdir(parents=True, exist_ok=True)

    def form_path(self, stored_id: str) -> Path:
        """Build the file path of a stored form.

        Args:
            stored_id (str): Stored identifier.

        Raises:
            PersistenceError: If the identifier is not a valid slug.

        Returns:
            Path: Form file path.
        """
        if not stored_id or slugify(stored_id) != stored_id:
            raise PersistenceError(message=f"Invalid stored form id: '{stored_id}'")
        return self.root / f"{stored_id}{_FORM_FILE_SUFFIX}"

    def save(self, payload: FormPayload) -> str:
        """Persist a form payload, replacing any previous version of the same slug.

        Args:
            payload (FormPayload): Serialized document envelope.

        Raises:
            PersistenceError: If the file cannot be written.

        Returns:
            str: Stored identifier.
        """
        stored_id = _stored_id_for(payload)
        path = self.form_path(stored_id)
        try:
            path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(message=f"Could not write form file {path}: {exc}") from exc
        logger.info("Form saved", extra={"form_path": str(path), "stored_id": stored_id})
        return stored_id

    def load(self, stored_id: str) -> FormPayload:
        """Read a stored form payload.

        Args:
            stored_id (str): Stored identifier.

        Raises:
            PersistenceError: If the file is missing or does not contain JSON.

        Returns:
            FormPayload: Serialized document envelope.
        """
        path = self.form_path(stored_id)
        if not path.is_file():
            raise PersistenceError(message=f"Form file not found: {path}")
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(message=f"Could not read form file {path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise PersistenceError(message=f"Form file does not hold a JSON object: {path}")
        return payload

    def list_forms(self) -> list[str]:
        """List stored form identifiers.

        Returns:
            list[str]: Stored identifiers, sorted.
        """
        return sorted(path.name.removesuffix(_FORM_FILE_SUFFIX) for path in self.root.glob(f"*{_FORM_FILE_SUFFIX}"))
