from __future__ import annotations

import random
from typing import TYPE_CHECKING

import pytest

from formlayout.engine import LayoutEngine
from formlayout.registry import CounterIds
from formlayout.typing.enums import ErrorKind, Side

if TYPE_CHECKING:
    from formlayout.settings import Settings


def _rows(engine: LayoutEngine, page_id: str | None = None) -> list[list[str]]:
    document = engine.document
    return [row.field_ids for row in document.page_rows(page_id or document.current_page_id)]


@pytest.fixture
def laid_out(engine: LayoutEngine) -> tuple[LayoutEngine, dict[str, str]]:
    """Rows: [a, b], [c], [d]."""
    ids = {"a": engine.add_field("text").value.id}
    ids["b"] = engine.add_field_to_row("text", 0).value.id
    ids["c"] = engine.add_field("text").value.id
    ids["d"] = engine.add_field("text").value.id
    return engine, ids


def test_center_drop_splits_pair_into_new_row(laid_out) -> None:
    engine, ids = laid_out

    engine.move_field(ids["b"], 0, Side.CENTER)

    assert _rows(engine) == [[ids["a"]], [ids["b"]], [ids["c"]], [ids["d"]]]
    assert engine.document.fields[ids["a"]].columns == 12
    assert engine.document.fields[ids["b"]].columns == 12


def test_move_out_of_single_row_targets_pre_removal_index(laid_out) -> None:
    engine, ids = laid_out

    # row 2 is [d]; row 1 disappears once c leaves it
    result = engine.move_field(ids["c"], 2, Side.RIGHT)

    assert result.ok
    assert _rows(engine) == [[ids["a"], ids["b"]], [ids["d"], ids["c"]]]
    assert engine.document.fields[ids["c"]].columns == 6
    assert engine.document.fields[ids["d"]].columns == 6


def test_move_into_full_row_falls_back_to_adjacent_row(laid_out) -> None:
    engine, ids = laid_out

    result = engine.move_field(ids["d"], 0, Side.RIGHT)

    assert result.ok
    assert _rows(engine) == [[ids["a"], ids["b"]], [ids["d"]], [ids["c"]]]


def test_move_next_to_anchor_in_other_row(laid_out) -> None:
    engine, ids = laid_out

    engine.move_field(ids["b"], 2, Side.LEFT, to_field_id=ids["d"])

    assert _rows(engine) == [[ids["a"]], [ids["c"]], [ids["b"], ids["d"]]]


@pytest.mark.parametrize(
    ("side", "anchor"),
    [(Side.RIGHT, "b"), (Side.LEFT, None)],
)
def test_same_row_reorder(laid_out, side: Side, anchor: str | None) -> None:
    engine, ids = laid_out
    row_id = engine.document.current_page.row_ids[0]

    field_id = ids["a"] if side is Side.RIGHT else ids["b"]
    engine.move_field(field_id, 0, side, to_field_id=ids[anchor] if anchor else None)

    assert _rows(engine)[0] == [ids["b"], ids["a"]]
    assert engine.document.current_page.row_ids[0] == row_id


def test_center_drop_on_own_single_row_keeps_position(laid_out) -> None:
    engine, ids = laid_out

    engine.move_field(ids["c"], 1, "center")

    assert _rows(engine) == [[ids["a"], ids["b"]], [ids["c"]], [ids["d"]]]


def test_center_drop_past_last_row_appends(laid_out) -> None:
    engine, ids = laid_out

    engine.move_field(ids["c"], 3, Side.CENTER)

    assert _rows(engine) == [[ids["a"], ids["b"]], [ids["d"]], [ids["c"]]]


def test_move_field_rejections_leave_document_unchanged(laid_out) -> None:
    engine, ids = laid_out
    before = engine.document.model_dump()

    assert engine.move_field(ids["c"], 3, Side.RIGHT).kind == ErrorKind.INDEX_OUT_OF_RANGE
    assert engine.move_field(ids["c"], -1, Side.CENTER).kind == ErrorKind.INDEX_OUT_OF_RANGE
    assert engine.move_field("missing", 0, Side.CENTER).kind == ErrorKind.FIELD_NOT_FOUND
    assert engine.move_field(ids["c"], 0, Side.LEFT, to_field_id=ids["d"]).kind == ErrorKind.FIELD_NOT_FOUND
    assert engine.move_field(ids["c"], 0, Side.CENTER, to_page_id="missing").kind == ErrorKind.PAGE_NOT_FOUND
    assert engine.document.model_dump() == before


def test_move_field_across_pages(laid_out) -> None:
    engine, ids = laid_out
    first_page = engine.document.current_page_id
    second_page = engine.add_page().value

    engine.select_field(ids["c"])
    engine.move_field(ids["c"], 0, Side.CENTER, to_page_id=second_page.id)

    assert _rows(engine, second_page.id) == [[ids["c"]]]
    assert _rows(engine, first_page) == [[ids["a"], ids["b"]], [ids["d"]]]
    assert engine.document.fields[ids["c"]].page_id == second_page.id
    assert engine.document.selected_field_id is None


def test_random_operation_sequences_preserve_row_invariants(settings: Settings) -> None:
    rng = random.Random(20240517)  # noqa: S311
    engine = LayoutEngine(make_id=CounterIds(), settings=settings)
    engine.add_page()

    for _ in range(400):
        document = engine.document
        field_ids = list(document.fields)
        page_id = rng.choice(document.page_order)
        row_count = len(document.pages[page_id].row_ids)
        choice = rng.randrange(6)
        if choice == 0 or not field_ids:
            engine.add_field(rng.choice(["text", "email", "number", "select"]), rng.randrange(row_count + 2))
        elif choice == 1:
            engine.add_field_to_row("textarea", rng.randrange(max(row_count, 1)), rng.choice(["left", "right"]))
        elif choice == 2:
            engine.move_field(
                rng.choice(field_ids),
                rng.randrange(row_count + 1),
                rng.choice(list(Side)),
                to_page_id=page_id,
            )
        elif choice == 3:
            engine.delete_field(rng.choice(field_ids))
        elif choice == 4:
            engine.select_page(page_id)
        else:
            engine.reorder_rows(page_id, rng.randrange(max(row_count, 1)), rng.randrange(max(row_count, 1)))

        assert engine.document.invariant_violations() == []
        for row in engine.document.rows.values():
            assert 1 <= len(row.field_ids) <= 2
            expected = 12 if len(row.field_ids) == 1 else 6
            assert all(engine.document.fields[field_id].columns == expected for field_id in row.field_ids)
