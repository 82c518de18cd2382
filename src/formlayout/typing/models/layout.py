"""Layout-centric domain models (pages, rows and the form document)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from formlayout.typing.models.field import FULL_WIDTH, HALF_WIDTH, FormField

if TYPE_CHECKING:
    from collections.abc import Callable

ROW_CAPACITY = 2
DEFAULT_PAGE_TITLE = "Page {number}"


def column_width(field_count: int) -> int:
    """Return the grid width each field of a row gets.

    Args:
        field_count (int): Number of fields in the row.

    Returns:
        int: 12 for a single field, 6 when two fields share the row.
    """
    return HALF_WIDTH if field_count == ROW_CAPACITY else FULL_WIDTH


class FormRow(BaseModel):
    """Horizontal group of one or two fields on a page."""

    model_config = ConfigDict(extra="forbid")

    id: str
    page_id: str
    field_ids: list[str] = Field(default_factory=list)
    description: str = ""

    @property
    def is_full(self) -> bool:
        """Return whether the row reached its capacity."""
        return len(self.field_ids) >= ROW_CAPACITY


class FormPage(BaseModel):
    """One step of a multi-page form."""

    model_config = ConfigDict(extra="forbid")

    id: str
    title: str
    description: str = ""
    row_ids: list[str] = Field(default_factory=list)


class FieldLocation(BaseModel):
    """Position of a field inside the document."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    page_id: str
    row_id: str
    row_index: int
    field_index: int


class FormDocument(BaseModel):
    """The form under construction.

    Pages, rows and fields are stored by id; ordering lives in
    `page_order`, `FormPage.row_ids` and `FormRow.field_ids`.
    """

    model_config = ConfigDict(extra="forbid")

    form_name: str = ""
    form_slug: str = ""
    page_order: list[str]
    pages: dict[str, FormPage]
    rows: dict[str, FormRow] = Field(default_factory=dict)
    fields: dict[str, FormField] = Field(default_factory=dict)
    current_page_id: str
    selected_field_id: str | None = None

    @classmethod
    def new(cls, make_id: Callable[[str], str], *, form_name: str = "") -> FormDocument:
        """Create an empty document holding one default page.

        Args:
            make_id (Callable[[str], str]): Id factory, called with the entity prefix.
            form_name (str): Optional initial form name.

        Returns:
            FormDocument: Fresh document.
        """
        page = FormPage(id=make_id("page"), title=DEFAULT_PAGE_TITLE.format(number=1))
        return cls(
            form_name=form_name,
            page_order=[page.id],
            pages={page.id: page},
            current_page_id=page.id,
        )

    @property
    def current_page(self) -> FormPage:
        """Return the page currently shown in the builder."""
        return self.pages[self.current_page_id]

    @property
    def selected_field(self) -> FormField | None:
        """Return the field highlighted for editing, if any."""
        if self.selected_field_id is None:
            return None
        return self.fields.get(self.selected_field_id)

    def ordered_pages(self) -> list[FormPage]:
        """Return pages in display order."""
        return [self.pages[page_id] for page_id in self.page_order]

    def page_rows(self, page_id: str) -> list[FormRow]:
        """Return the rows of a page in display order."""
        return [self.rows[row_id] for row_id in self.pages[page_id].row_ids]

    def row_fields(self, row_id: str) -> list[FormField]:
        """Return the fields of a row from left to right."""
        return [self.fields[field_id] for field_id in self.rows[row_id].field_ids]

    def ordered_fields(self) -> list[FormField]:
        """Return every field in page, row, then column order."""
        return [
            self.fields[field_id]
            for page_id in self.page_order
            for row_id in self.pages[page_id].row_ids
            for field_id in self.rows[row_id].field_ids
        ]

    def locate(self, field_id: str) -> FieldLocation | None:
        """Find where a field currently sits.

        Args:
            field_id (str): Field identifier.

        Returns:
            FieldLocation | None: Location, or None when the field is absent.
        """
        field = self.fields.get(field_id)
        if field is None or field.page_id not in self.pages:
            return None
        for row_index, row_id in enumerate(self.pages[field.page_id].row_ids):
            field_ids = self.rows[row_id].field_ids
            if field_id in field_ids:
                return FieldLocation(
                    page_id=field.page_id,
                    row_id=row_id,
                    row_index=row_index,
                    field_index=field_ids.index(field_id),
                )
        return None

    def invariant_violations(self) -> list[str]:
        """List every structural invariant the document currently breaks.

        Returns:
            list[str]: Human readable violations, empty for a consistent document.
        """
        violations: list[str] = []
        if not self.page_order:
            violations.append("document has no page")
        if set(self.page_order) != set(self.pages) or len(self.page_order) != len(self.pages):
            violations.append("page order does not match stored pages")
        if self.current_page_id not in self.pages:
            violations.append(f"current page {self.current_page_id} does not exist")

        placements: dict[str, int] = dict.fromkeys(self.fields, 0)
        referenced_rows: set[str] = set()
        for page in self.pages.values():
            for row_id in page.row_ids:
                row = self.rows.get(row_id)
                if row is None:
                    violations.append(f"page {page.id} references missing row {row_id}")
                    continue
                referenced_rows.add(row_id)
                if row.page_id != page.id:
                    violations.append(f"row {row_id} is listed on page {page.id} but owned by {row.page_id}")
                if not 1 <= len(row.field_ids) <= ROW_CAPACITY:
                    violations.append(f"row {row_id} holds {len(row.field_ids)} field(s)")
                width = column_width(len(row.field_ids))
                for field_id in row.field_ids:
                    field = self.fields.get(field_id)
                    if field is None:
                        violations.append(f"row {row_id} references missing field {field_id}")
                        continue
                    placements[field_id] += 1
                    if field.page_id != page.id:
                        violations.append(f"field {field_id} sits on page {page.id} but points to {field.page_id}")
                    if field.columns != width:
                        violations.append(f"field {field_id} has {field.columns} columns, expected {width}")

        violations.extend(f"row {row_id} is not attached to any page" for row_id in set(self.rows) - referenced_rows)
        violations.extend(
            f"field {field_id} is placed in {count} row(s)" for field_id, count in placements.items() if count != 1
        )

        selected = self.selected_field
        if self.selected_field_id is not None and selected is None:
            violations.append(f"selected field {self.selected_field_id} does not exist")
        elif selected is not None and selected.page_id != self.current_page_id:
            violations.append(f"selected field {selected.id} is not on the current page")
        return violations
