"""Shared fixtures for taskdeps tests.

File handling in tests:
- Use tmp_path for any directory or file creation so tests are isolated and cleaned up.
- Use taskdeps.io_utils read_text/write_text for consistent UTF-8 I/O.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from taskdeps.config import Config
from taskdeps.io_utils import write_text
from taskdeps.tasks.ids import Identifier
from taskdeps.tasks.model import Subtask, Task, TaskCollection


def _make_subtask(
    id: int,
    title: str = "",
    dependencies: list[Identifier] | None = None,
    status: str | None = None,
) -> Subtask:
    return Subtask(
        id=id,
        title=title or f"Subtask {id}",
        dependencies=dependencies or [],
        status=status,
    )


def _make_task(
    id: int,
    title: str = "",
    dependencies: list[Identifier] | None = None,
    subtasks: list[Subtask] | None = None,
    status: str | None = None,
) -> Task:
    return Task(
        id=id,
        title=title or f"Task {id}",
        dependencies=dependencies or [],
        subtasks=subtasks or [],
        status=status,
    )


def _make_collection(tasks: list[Task]) -> TaskCollection:
    return TaskCollection(tasks=tasks)


@pytest.fixture
def make_subtask():
    """Factory fixture that creates Subtask instances."""
    return _make_subtask


@pytest.fixture
def make_task():
    """Factory fixture that creates Task instances."""
    return _make_task


@pytest.fixture
def make_collection():
    """Factory fixture that creates TaskCollection instances."""
    return _make_collection


@pytest.fixture
def write_tasks(tmp_path: Path):
    """Write a legacy ``{"tasks": [...]}`` document and return its path."""

    def _write(tasks: list[dict], name: str = "tasks.json") -> Path:
        path = tmp_path / name
        write_text(path, json.dumps({"tasks": tasks}, indent=2))
        return path

    return _write


@pytest.fixture
def make_config(tmp_path: Path):
    """Config pointing at a tasks file under tmp_path, file generation off by default."""

    def _make(tasks_file: Path, **overrides) -> Config:
        overrides.setdefault("generate_files", False)
        return Config(tasks_file=str(tasks_file), **overrides)

    return _make


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("TASKDEPS_TASKS_FILE", "TASKDEPS_TAG", "TASKDEPS_SIBLING_THRESHOLD"):
        monkeypatch.delenv(name, raising=False)
