from __future__ import annotations

from typing import TYPE_CHECKING

from formlayout.typing.enums import ErrorKind

if TYPE_CHECKING:
    from formlayout.engine import LayoutEngine


def test_deleting_the_only_page_is_rejected(engine: LayoutEngine) -> None:
    engine.add_field("text")
    before = engine.document.model_dump()

    result = engine.delete_page(engine.document.current_page_id)

    assert result.kind == ErrorKind.LAST_PAGE_PROTECTED
    assert engine.document.model_dump() == before


def test_deleting_a_page_moves_its_fields_to_the_first_page(engine: LayoutEngine) -> None:
    first_page = engine.document.current_page_id
    kept = engine.add_field("text").value
    second_page = engine.add_page("Details").value
    engine.select_page(second_page.id)
    moved = engine.add_field("email").value
    paired = engine.add_field_to_row("number", 0).value

    receiver = engine.delete_page(second_page.id).value

    assert receiver.id == first_page
    assert engine.document.page_order == [first_page]
    assert engine.document.current_page_id == first_page
    assert [row.field_ids for row in engine.document.page_rows(first_page)] == [[kept.id], [moved.id, paired.id]]
    assert {field.page_id for field in engine.document.fields.values()} == {first_page}
    assert engine.document.selected_field_id == paired.id


def test_deleting_the_first_page_uses_the_next_one_as_receiver(engine: LayoutEngine) -> None:
    first_page = engine.document.current_page_id
    field = engine.add_field("text").value
    second_page = engine.add_page().value

    engine.delete_page(first_page)

    assert engine.document.current_page_id == second_page.id
    assert field.page_id == second_page.id
    assert engine.document.selected_field_id == field.id


def test_deleting_a_hidden_page_keeps_the_current_page(engine: LayoutEngine) -> None:
    second_page = engine.add_page().value
    third_page = engine.add_page().value
    engine.select_page(third_page.id)
    field = engine.add_field("text").value
    engine.select_page(second_page.id)
    engine.reorder_pages(1, 0)

    engine.delete_page(third_page.id)

    assert engine.document.page_order[0] == second_page.id
    assert engine.document.current_page_id == second_page.id
    assert engine.document.selected_field_id is None
    assert [row.field_ids for row in engine.document.page_rows(second_page.id)] == [[field.id]]


def test_add_update_and_select_pages(engine: LayoutEngine) -> None:
    engine.add_field("text")
    page = engine.add_page().value

    assert page.title == "Page 2"

    updated = engine.update_page(page.id, {"title": "Contact", "description": "How to reach you"}).value
    assert updated.title == "Contact"
    assert engine.update_page(page.id, {"row_ids": []}).kind == ErrorKind.VALIDATION_FAILED
    assert engine.update_page("missing", {"title": "x"}).kind == ErrorKind.PAGE_NOT_FOUND

    assert engine.select_page(page.id).ok
    assert engine.document.current_page_id == page.id
    assert engine.document.selected_field_id is None
    assert engine.select_page("missing").kind == ErrorKind.PAGE_NOT_FOUND


def test_reorder_pages_and_rows(engine: LayoutEngine) -> None:
    page_id = engine.document.current_page_id
    first = engine.add_field("text").value
    second = engine.add_field("text").value
    engine.add_page("Second")

    engine.reorder_rows(page_id, 1, 0)
    engine.reorder_pages(0, 1)

    assert [row.field_ids for row in engine.document.page_rows(page_id)] == [[second.id], [first.id]]
    assert engine.document.page_order[1] == page_id
    assert engine.reorder_rows(page_id, 4, 4).ok
    assert engine.reorder_rows(page_id, 0, 4).kind == ErrorKind.INDEX_OUT_OF_RANGE
    assert engine.reorder_rows("missing", 0, 1).kind == ErrorKind.PAGE_NOT_FOUND
    assert engine.reorder_pages(0, 2).kind == ErrorKind.INDEX_OUT_OF_RANGE


def test_update_row_description(engine: LayoutEngine) -> None:
    engine.add_field("text")

    row = engine.update_row_description(0, "Personal details").value

    assert row.description == "Personal details"
    assert engine.update_row_description(3, "x").kind == ErrorKind.INDEX_OUT_OF_RANGE
