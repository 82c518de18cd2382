"""Pytest marker auto-assignment by folder and shared builder fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from formlayout import logger
from formlayout.engine import LayoutEngine
from formlayout.persistence import InMemoryFormStore
from formlayout.registry import CounterIds
from formlayout.settings import Settings


def _mark_tests_by_directory(
    config: pytest.Config,
    items: list[pytest.Item],
    marker: str,
) -> None:
    """Mark collected tests located under tests/<marker>/."""
    target_dir = Path(config.rootpath) / "tests" / marker
    target_dir = target_dir.resolve()

    for item in items:
        try:
            path = Path(str(item.fspath)).resolve()
        except Exception:
            logger.warning(
                f"Could not resolve path for test item {item.name!s}; skipping {marker!s} marker assignment",
            )
            continue

        if path == target_dir or target_dir in path.parents:
            item.add_marker(getattr(pytest.mark, marker))


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Apply directory-based markers to test items."""
    _mark_tests_by_directory(config, items, "unit")
    _mark_tests_by_directory(config, items, "integration")
    _mark_tests_by_directory(config, items, "end2end")


@pytest.fixture
def settings() -> Settings:
    return Settings(log_json=False, preview_host="demo.raceyaclub.local")


@pytest.fixture
def store() -> InMemoryFormStore:
    return InMemoryFormStore()


@pytest.fixture
def engine(settings: Settings, store: InMemoryFormStore) -> LayoutEngine:
    return LayoutEngine(make_id=CounterIds(), store=store, settings=settings)
