from __future__ import annotations

import json

import structlog

from formlayout import logger as package_logger
from formlayout.logging import bind_form_context, clear_form_context, configure_logging, get_logger
from formlayout.settings import Settings


def test_stdlib_logger_is_configured(capsys) -> None:
    configure_logging(settings=Settings(log_json=False, log_level="INFO"), force=True)
    logger = get_logger("tests")
    logger.info("hello")

    captured = capsys.readouterr()
    assert "hello" in captured.err.lower()


def test_json_logs_flatten_extra_and_bound_context(capsys) -> None:
    configure_logging(settings=Settings(log_json=True, log_level="INFO"), force=True)
    bind_form_context(form_slug="entry-form", session_id=None)
    try:
        get_logger("tests").info("Form saved", extra={"stored_id": "entry-form"})
    finally:
        clear_form_context()

    line = capsys.readouterr().err.strip().splitlines()[-1]
    record = json.loads(line)
    assert record["message"] == "Form saved"
    assert record["stored_id"] == "entry-form"
    assert record["form_slug"] == "entry-form"
    assert "session_id" not in record
    assert structlog.contextvars.get_contextvars() == {}


def test_package_logger_created_on_import() -> None:
    assert callable(getattr(package_logger, "info", None))
