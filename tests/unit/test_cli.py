from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from formlayout import cli
from formlayout.engine import LayoutEngine
from formlayout.persistence import JsonFileFormStore
from formlayout.registry import CounterIds
from formlayout.settings import Settings

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def stored_form(tmp_path: Path) -> Path:
    store = JsonFileFormStore(root=tmp_path)
    engine = LayoutEngine(make_id=CounterIds(), store=store, settings=Settings())
    engine.set_form_name("Kit Order")
    field = engine.add_field("email").value
    engine.update_field(field.id, {"label": "Email", "required": True})
    assert engine.save_form().ok
    return tmp_path


def test_build_parser_supports_version_flag(capsys) -> None:
    parser = cli.build_parser()

    with pytest.raises(SystemExit) as exc_info:
        parser.parse_args(["--version"])
    assert exc_info.value.code == 0

    captured = capsys.readouterr()
    assert "0.1.0" in captured.out


def test_main_lists_stored_forms(mocker, stored_form: Path, capsys) -> None:
    mocker.patch("formlayout.cli.get_settings", return_value=Settings(log_json=False))

    result = cli.main(["list", "--store", str(stored_form)])

    assert result == 0
    assert capsys.readouterr().out.splitlines() == ["kit-order"]


def test_main_prints_schema_of_stored_form(mocker, stored_form: Path, capsys) -> None:
    mocker.patch("formlayout.cli.get_settings", return_value=Settings(log_json=False))

    result = cli.main(["schema", "--store", str(stored_form), "--form", "kit-order", "--steps"])

    payload = json.loads(capsys.readouterr().out)
    assert result == 0
    assert payload["schema"]["field_1"] == {
        "type": "text",
        "inputType": "email",
        "label": "Email",
        "rules": "required|max:255|email",
    }
    assert payload["steps"]["page_1"]["elements"] == ["field_1"]


def test_main_fails_for_unknown_form(mocker, tmp_path: Path) -> None:
    mocker.patch("formlayout.cli.get_settings", return_value=Settings(log_json=False))

    assert cli.main(["schema", "--store", str(tmp_path), "--form", "missing"]) == 1


def test_main_without_command_prints_help(mocker, capsys) -> None:
    mocker.patch("formlayout.cli.get_settings", return_value=Settings(log_json=False))

    assert cli.main([]) == 0
    assert "usage" in capsys.readouterr().out.lower()
