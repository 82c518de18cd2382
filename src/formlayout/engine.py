"""Layout engine: the only writer of a builder session's form document."""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING, Any, Concatenate

from pydantic import ValidationError

from formlayout import logger
from formlayout.async_runner import resolve_awaitable
from formlayout.exceptions import (
    AsyncExecutionError,
    FieldNotFoundError,
    IndexOutOfRangeError,
    LastPageProtectedError,
    LayoutConsistencyError,
    LayoutError,
    PageNotFoundError,
    PersistenceError,
    PersistenceFailedError,
    RowFullError,
    ValidationFailedError,
    ValidationIssue,
)
from formlayout.persistence import document_from_payload, document_to_payload
from formlayout.projector import project
from formlayout.registry import FieldFactory, FieldTypeRegistry, uuid_ids
from formlayout.results import Failure, Result, Success
from formlayout.settings import Settings, get_settings
from formlayout.slug import preview_url, slugify
from formlayout.typing.enums import Side
from formlayout.typing.models import FormDocument, FormField, FormPage, FormRow, column_width
from formlayout.typing.models.layout import DEFAULT_PAGE_TITLE

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from formlayout.typing.models import FieldLocation
    from formlayout.typing.protocol import IdFactory, PersistenceAdapter

_PROTECTED_FIELD_KEYS = frozenset({"id", "kind", "page_id", "columns"})
_PAGE_KEYS = frozenset({"title", "description"})


def _operation[**P, T](
    method: Callable[Concatenate[LayoutEngine, P], T],
) -> Callable[Concatenate[LayoutEngine, P], Result[T]]:
    """Turn a mutating engine method into a result-returning operation.

    Expected domain errors raised by the method become `Failure` values. Every
    method validates its inputs before mutating, so a failure leaves the
    document as it was. Successful mutations are followed by an invariant check.
    """

    @functools.wraps(method)
    def wrapper(self: LayoutEngine, *args: P.args, **kwargs: P.kwargs) -> Result[T]:
        try:
            value = method(self, *args, **kwargs)
        except LayoutError as exc:
            logger.debug(
                "Layout operation rejected",
                extra={"operation": method.__name__, "error_kind": exc.kind.to_str(), "reason": str(exc)},
            )
            return Failure(exc)
        self.check_invariants()
        return Success(value)

    return wrapper


def _insertion_index(field_ids: list[str], side: Side, anchor_id: str | None) -> int:
    """Return where a field lands in a row for a drop side and optional anchor.

    Args:
        field_ids (list[str]): Row content, without the inserted field.
        side (Side): Drop side; anything but LEFT inserts after.
        anchor_id (str | None): Field the drop is relative to, else the row edges.

    Returns:
        int: Insertion index into `field_ids`.
    """
    if anchor_id is None:
        return 0 if side is Side.LEFT else len(field_ids)
    anchor_index = field_ids.index(anchor_id)
    return anchor_index if side is Side.LEFT else anchor_index + 1


def _move_item(items: list[str], from_index: int, to_index: int) -> None:
    if from_index == to_index:
        return
    for index in (from_index, to_index):
        if not 0 <= index < len(items):
            raise IndexOutOfRangeError(index=index, size=len(items))
    items.insert(to_index, items.pop(from_index))


class LayoutEngine:
    """Mutate a form document while preserving its layout invariants.

    One engine owns one document for the lifetime of a builder session. All
    collaborators (field registry, id factory, persistence adapter, settings)
    are passed in explicitly.
    """

    def __init__(
        self,
        document: FormDocument | None = None,
        *,
        registry: FieldTypeRegistry | None = None,
        make_id: IdFactory | None = None,
        store: PersistenceAdapter | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.make_id: IdFactory = make_id or uuid_ids
        self.registry = registry or FieldTypeRegistry()
        self.factory = FieldFactory(self.registry, self.make_id)
        self.store = store
        self.settings = settings or get_settings()
        self.document = document or FormDocument.new(self.make_id)
        self.stored_id: str | None = None

    # Queries

    @property
    def selected_field(self) -> FormField | None:
        """Return the field highlighted for editing, if any."""
        return self.document.selected_field

    def find_field_location(self, field_id: str) -> FieldLocation | None:
        """Return where a field sits, or None when it does not exist."""
        return self.document.locate(field_id)

    def can_add_to_row(self, row_index: int, *, page_id: str | None = None) -> bool:
        """Return whether a row of the page (current page by default) has a free slot."""
        page = self.document.pages.get(page_id or self.document.current_page_id)
        if page is None or not 0 <= row_index < len(page.row_ids):
            return False
        return not self.document.rows[page.row_ids[row_index]].is_full

    def preview_url(self) -> str:
        """Return the public preview address of the form."""
        return preview_url(self.settings.preview_host, self.document.form_slug)

    def project(self) -> dict[str, dict[str, Any]]:
        """Return the rendering schema of the current document."""
        return project(self.document)

    def check_invariants(self) -> None:
        """Verify the document structure.

        Raises:
            LayoutConsistencyError: If any structural invariant is broken.
        """
        violations = self.document.invariant_violations()
        if violations:
            logger.error("Layout invariants violated", extra={"violations": violations})
            raise LayoutConsistencyError(violations=tuple(violations))

    # Fields

    @_operation
    def add_field(self, kind: str, target_row_index: int | None = None) -> FormField:
        """Add a field of `kind` in a new row of the current page.

        The row is inserted at `target_row_index` when it is a valid insertion
        position, and appended otherwise. The new field becomes selected.
        """
        page = self.document.current_page
        field = self.factory.create(kind, page_id=page.id)
        position = len(page.row_ids)
        if target_row_index is not None and 0 <= target_row_index <= len(page.row_ids):
            position = target_row_index

        self.document.fields[field.id] = field
        self._insert_row(page, position, [field.id])
        self.document.selected_field_id = field.id
        logger.debug("Field added", extra={"field_id": field.id, "kind": field.kind, "row_index": position})
        return field

    @_operation
    def add_field_to_row(
        self,
        kind: str,
        row_index: int,
        side: Side | str = Side.RIGHT,
        after_field_id: str | None = None,
    ) -> FormField:
        """Add a field of `kind` next to the fields of an existing row.

        Without `after_field_id` the field goes to the row start (LEFT) or end.
        """
        drop_side = Side.from_str(side)
        page = self.document.current_page
        row = self._row_at(page, row_index)
        if row.is_full:
            raise RowFullError(row_id=row.id)
        if after_field_id is not None and after_field_id not in row.field_ids:
            raise FieldNotFoundError(field_id=after_field_id)
        field = self.factory.create(kind, page_id=page.id)

        self.document.fields[field.id] = field
        row.field_ids.insert(_insertion_index(row.field_ids, drop_side, after_field_id), field.id)
        self._refresh_columns(row)
        self.document.selected_field_id = field.id
        logger.debug("Field added to row", extra={"field_id": field.id, "row_id": row.id, "side": drop_side.to_str()})
        return field

    @_operation
    def move_field(
        self,
        field_id: str,
        to_row_index: int,
        side: Side | str,
        to_field_id: str | None = None,
        *,
        to_page_id: str | None = None,
    ) -> FormField:
        """Relocate a field within or across rows and pages.

        CENTER drops create a new row right after the destination row (or at
        the end of the page when `to_row_index` equals the row count). LEFT and
        RIGHT drops join the destination row, next to `to_field_id` when given,
        and fall back to a new adjacent row when that row is full. The
        destination row is resolved by id before the field is detached, so an
        emptied source row can be dropped without shifting any index.
        """
        drop_side = Side.from_str(side)
        field = self._field(field_id)
        source = self.document.locate(field_id)
        if source is None:
            raise FieldNotFoundError(field_id=field_id)
        page = self._page(to_page_id) if to_page_id is not None else self.document.pages[field.page_id]

        row_count = len(page.row_ids)
        upper = row_count if drop_side is Side.CENTER else row_count - 1
        if not 0 <= to_row_index <= upper:
            raise IndexOutOfRangeError(index=to_row_index, size=row_count)
        target_row_id = page.row_ids[to_row_index] if to_row_index < row_count else None

        anchor_id = None if drop_side is Side.CENTER else to_field_id
        if anchor_id == field_id:
            return field
        if anchor_id is not None and (target_row_id is None or anchor_id not in self.document.rows[target_row_id].field_ids):
            raise FieldNotFoundError(field_id=anchor_id)

        if target_row_id == source.row_id and drop_side is not Side.CENTER:
            row = self.document.rows[source.row_id]
            row.field_ids.remove(field_id)
            row.field_ids.insert(_insertion_index(row.field_ids, drop_side, anchor_id), field_id)
            logger.debug("Field reordered in row", extra={"field_id": field_id, "row_id": row.id})
            return field

        self._detach(field_id)
        field.page_id = page.id

        if drop_side is Side.CENTER:
            if target_row_id is None:
                position = len(page.row_ids)
            elif target_row_id in self.document.rows:
                position = page.row_ids.index(target_row_id) + 1
            else:
                # target was the source row, dropped because the field was alone in it
                position = source.row_index
            self._insert_row(page, position, [field_id])
        else:
            target_row = self.document.rows[target_row_id]
            if target_row.is_full:
                self._insert_row(page, page.row_ids.index(target_row.id) + 1, [field_id])
            else:
                target_row.field_ids.insert(_insertion_index(target_row.field_ids, drop_side, anchor_id), field_id)
                self._refresh_columns(target_row)

        self._reconcile_selection()
        logger.debug(
            "Field moved",
            extra={"field_id": field_id, "from_row_id": source.row_id, "to_page_id": page.id, "side": drop_side.to_str()},
        )
        return field

    @_operation
    def update_field(self, field_id: str, changes: Mapping[str, Any]) -> FormField:
        """Merge `changes` into a field's shared and kind-specific attributes.

        Identity, kind, page and derived columns are never changed; keys naming
        them are ignored.
        """
        field = self._field(field_id)
        envelope = field.model_dump()
        attributes = envelope["attributes"]
        attribute_keys = set(type(field.attributes).model_fields) - {"variant"}

        flat_changes = dict(changes)
        nested = flat_changes.pop("attributes", None)
        if isinstance(nested, dict):
            flat_changes = {**nested, **flat_changes}
        flat_changes.pop("variant", None)

        issues: list[ValidationIssue] = []
        for key, value in flat_changes.items():
            if key in _PROTECTED_FIELD_KEYS:
                logger.debug("Ignoring protected field key", extra={"field_id": field_id, "key": key})
            elif key in envelope:
                envelope[key] = value
            elif key in attribute_keys:
                attributes[key] = value
            else:
                issues.append(
                    ValidationIssue(message=f"Unknown attribute '{key}' for {field.kind}", attribute=key, field_id=field_id),
                )
        if issues:
            raise ValidationFailedError(issues=tuple(issues))

        try:
            updated = FormField.model_validate(envelope)
        except ValidationError as exc:
            raise ValidationFailedError(
                issues=tuple(
                    ValidationIssue(
                        message=error["msg"],
                        attribute=".".join(str(part) for part in error["loc"]),
                        field_id=field_id,
                    )
                    for error in exc.errors()
                ),
            ) from exc

        self.document.fields[field_id] = updated
        return updated

    @_operation
    def delete_field(self, field_id: str) -> None:
        """Remove a field, dropping its row when it becomes empty."""
        self._field(field_id)
        self._detach(field_id)
        del self.document.fields[field_id]
        if self.document.selected_field_id == field_id:
            self.document.selected_field_id = None
        logger.debug("Field deleted", extra={"field_id": field_id})

    @_operation
    def select_field(self, field_id: str) -> FormField:
        """Highlight a field for editing, switching to its page."""
        field = self._field(field_id)
        self.document.current_page_id = field.page_id
        self.document.selected_field_id = field_id
        return field

    @_operation
    def deselect_field(self) -> None:
        """Clear the field selection."""
        self.document.selected_field_id = None

    # Rows

    @_operation
    def reorder_rows(self, page_id: str, from_index: int, to_index: int) -> None:
        """Move a row within its page."""
        page = self._page(page_id)
        _move_item(page.row_ids, from_index, to_index)

    @_operation
    def update_row_description(self, row_index: int, description: str, *, page_id: str | None = None) -> FormRow:
        """Set the description of a row of the page (current page by default)."""
        page = self._page(page_id) if page_id is not None else self.document.current_page
        row = self._row_at(page, row_index)
        row.description = description
        return row

    # Pages

    @_operation
    def add_page(self, title: str | None = None, description: str = "") -> FormPage:
        """Append an empty page."""
        number = len(self.document.page_order) + 1
        page = FormPage(
            id=self.make_id("page"),
            title=title if title is not None else DEFAULT_PAGE_TITLE.format(number=number),
            description=description,
        )
        self.document.pages[page.id] = page
        self.document.page_order.append(page.id)
        logger.debug("Page added", extra={"page_id": page.id})
        return page

    @_operation
    def update_page(self, page_id: str, changes: Mapping[str, Any]) -> FormPage:
        """Change the title or description of a page."""
        page = self._page(page_id)
        unknown = [key for key in changes if key not in _PAGE_KEYS]
        if unknown:
            raise ValidationFailedError(
                issues=tuple(ValidationIssue(message=f"Unknown page attribute '{key}'", attribute=key) for key in unknown),
            )
        try:
            updated = FormPage.model_validate({**page.model_dump(), **changes})
        except ValidationError as exc:
            raise ValidationFailedError(
                issues=tuple(
                    ValidationIssue(message=error["msg"], attribute=".".join(str(part) for part in error["loc"]))
                    for error in exc.errors()
                ),
            ) from exc
        self.document.pages[page_id] = updated
        return updated

    @_operation
    def delete_page(self, page_id: str) -> FormPage:
        """Delete a page, moving its rows to the end of the first remaining page.

        Returns the page that received the rows.
        """
        page = self._page(page_id)
        if len(self.document.page_order) == 1:
            raise LastPageProtectedError(page_id=page_id)

        self.document.page_order.remove(page_id)
        receiver = self.document.pages[self.document.page_order[0]]
        for row_id in page.row_ids:
            row = self.document.rows[row_id]
            row.page_id = receiver.id
            for field_id in row.field_ids:
                self.document.fields[field_id].page_id = receiver.id
        receiver.row_ids.extend(page.row_ids)
        del self.document.pages[page_id]

        if self.document.current_page_id == page_id:
            self.document.current_page_id = receiver.id
        self._reconcile_selection()
        logger.info(
            "Page deleted",
            extra={"page_id": page_id, "receiver_page_id": receiver.id, "moved_rows": len(page.row_ids)},
        )
        return receiver

    @_operation
    def reorder_pages(self, from_index: int, to_index: int) -> None:
        """Move a page within the page order."""
        _move_item(self.document.page_order, from_index, to_index)

    @_operation
    def select_page(self, page_id: str) -> FormPage:
        """Show a page in the builder; clears the field selection."""
        page = self._page(page_id)
        self.document.current_page_id = page_id
        self.document.selected_field_id = None
        return page

    # Form metadata

    @_operation
    def set_form_name(self, name: str) -> str:
        """Rename the form, deriving the slug when none is set yet.

        Returns the current slug.
        """
        self.document.form_name = name
        if not self.document.form_slug:
            self.document.form_slug = slugify(name)
        return self.document.form_slug

    @_operation
    def set_form_slug(self, slug: str) -> str:
        """Set the slug, normalized to its URL-safe form."""
        self.document.form_slug = slugify(slug)
        return self.document.form_slug

    @_operation
    def generate_slug(self) -> str:
        """Derive the slug from the form name when the slug is blank."""
        if self.document.form_name and not self.document.form_slug:
            self.document.form_slug = slugify(self.document.form_name)
        return self.document.form_slug

    # Persistence

    @_operation
    def save_form(self) -> str:
        """Validate the form and hand its serialized document to the store.

        Returns the identifier chosen by the persistence adapter. Nothing in
        the document changes unless the adapter succeeds.
        """
        slug = self.document.form_slug or slugify(self.document.form_name)
        issues: list[ValidationIssue] = []
        if not self.document.form_name.strip():
            issues.append(ValidationIssue(message="Form name is required", attribute="form_name"))
        if not slug:
            issues.append(ValidationIssue(message="Form slug is required", attribute="form_slug"))
        for position, field in enumerate(self.document.ordered_fields(), start=1):
            if not field.label.strip():
                issues.append(
                    ValidationIssue(
                        message=f"Field {position} ({field.kind}) needs a label",
                        attribute="label",
                        field_id=field.id,
                    ),
                )
        if issues:
            raise ValidationFailedError(issues=tuple(issues))

        snapshot = self.document.model_copy(update={"form_slug": slug})
        stored_id = self._call_store(lambda store: store.save(document_to_payload(snapshot)))
        self.document.form_slug = slug
        self.stored_id = str(stored_id)
        logger.info("Form saved", extra={"stored_id": self.stored_id, "fields": len(self.document.fields)})
        return self.stored_id

    @_operation
    def load_form(self, stored_id: str) -> FormDocument:
        """Replace the session document with a stored one."""
        payload = self._call_store(lambda store: store.load(stored_id))
        try:
            document = document_from_payload(payload)
        except PersistenceError as exc:
            raise PersistenceFailedError(cause=exc) from exc
        violations = document.invariant_violations()
        if violations:
            raise PersistenceFailedError(cause=LayoutConsistencyError(violations=tuple(violations)))

        self.document = document
        self.stored_id = stored_id
        logger.info("Form loaded", extra={"stored_id": stored_id, "fields": len(document.fields)})
        return document

    # Internals

    def _call_store(self, call: Callable[[PersistenceAdapter], Any]) -> Any:
        if self.store is None:
            raise PersistenceFailedError(cause=PersistenceError(message="No persistence adapter configured"))
        try:
            return resolve_awaitable(call(self.store))
        except Exception as exc:  # noqa: BLE001
            cause = exc.result if isinstance(exc, AsyncExecutionError) else exc
            logger.warning("Persistence adapter failed", extra={"error": str(cause)})
            raise PersistenceFailedError(cause=cause) from exc

    def _field(self, field_id: str) -> FormField:
        field = self.document.fields.get(field_id)
        if field is None:
            raise FieldNotFoundError(field_id=field_id)
        return field

    def _page(self, page_id: str) -> FormPage:
        page = self.document.pages.get(page_id)
        if page is None:
            raise PageNotFoundError(page_id=page_id)
        return page

    def _row_at(self, page: FormPage, row_index: int) -> FormRow:
        if not 0 <= row_index < len(page.row_ids):
            raise IndexOutOfRangeError(index=row_index, size=len(page.row_ids))
        return self.document.rows[page.row_ids[row_index]]

    def _insert_row(self, page: FormPage, position: int, field_ids: list[str]) -> FormRow:
        row = FormRow(id=self.make_id("row"), page_id=page.id, field_ids=field_ids)
        self.document.rows[row.id] = row
        page.row_ids.insert(position, row.id)
        self._refresh_columns(row)
        return row

    def _detach(self, field_id: str) -> None:
        """Take a field out of its row, deleting the row when it empties."""
        location = self.document.locate(field_id)
        if location is None:
            raise FieldNotFoundError(field_id=field_id)
        row = self.document.rows[location.row_id]
        row.field_ids.remove(field_id)
        if row.field_ids:
            self._refresh_columns(row)
            return
        self.document.pages[location.page_id].row_ids.remove(row.id)
        del self.document.rows[row.id]

    def _refresh_columns(self, row: FormRow) -> None:
        width = column_width(len(row.field_ids))
        for field_id in row.field_ids:
            self.document.fields[field_id].columns = width

    def _reconcile_selection(self) -> None:
        selected = self.document.selected_field
        if selected is not None and selected.page_id != self.document.current_page_id:
            self.document.selected_field_id = None
