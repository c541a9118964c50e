"""Tests for taskdeps.tasks.io: loading and saving tasks.json."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from taskdeps.errors import DependencyError, ErrorCode
from taskdeps.io_utils import read_text, write_text
from taskdeps.tasks.io import load_tasks, save_tasks


def _tagged(tmp_path: Path) -> Path:
    path = tmp_path / "tasks.json"
    doc = {
        "master": {"tasks": [{"id": 1, "title": "A", "dependencies": []}], "metadata": {"created": "x"}},
        "feature": {"tasks": [{"id": 1, "title": "F", "dependencies": []}, {"id": 2, "dependencies": [1]}]},
    }
    write_text(path, json.dumps(doc))
    return path


class TestLoadTasks:
    def test_legacy_layout(self, write_tasks):
        path = write_tasks([{"id": 1, "title": "A"}, {"id": 2, "dependencies": [1]}])
        c = load_tasks(path)
        assert [t.id for t in c.tasks] == [1, 2]
        assert c.tag is None

    def test_tagged_layout_defaults_to_master(self, tmp_path):
        c = load_tasks(_tagged(tmp_path))
        assert c.tag == "master"
        assert [t.title for t in c.tasks] == ["A"]

    def test_tagged_layout_other_tag(self, tmp_path):
        c = load_tasks(_tagged(tmp_path), tag="feature")
        assert c.get_task(2).dependencies == [1]

    def test_unknown_tag(self, tmp_path):
        with pytest.raises(DependencyError) as exc:
            load_tasks(_tagged(tmp_path), tag="nope")
        assert exc.value.code is ErrorCode.INVALID_COLLECTION

    def test_missing_file(self, tmp_path):
        with pytest.raises(DependencyError) as exc:
            load_tasks(tmp_path / "missing.json")
        assert exc.value.code is ErrorCode.FILE_NOT_FOUND

    def test_bad_json(self, tmp_path):
        path = tmp_path / "tasks.json"
        write_text(path, "{not json")
        with pytest.raises(DependencyError) as exc:
            load_tasks(path)
        assert exc.value.code is ErrorCode.INVALID_COLLECTION

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "tasks.json"
        write_text(path, json.dumps({"tasks": {"id": 1}}))
        with pytest.raises(DependencyError) as exc:
            load_tasks(path)
        assert exc.value.code is ErrorCode.INVALID_COLLECTION


class TestSaveTasks:
    def test_round_trip_legacy(self, write_tasks):
        path = write_tasks([{"id": 1, "title": "A", "dependencies": []}])
        c = load_tasks(path)
        c.get_task(1).dependencies.append(1)
        save_tasks(path, c)
        data = json.loads(read_text(path))
        assert data == {"tasks": [{"id": 1, "title": "A", "dependencies": [1]}]}

    def test_other_tags_preserved(self, tmp_path):
        path = _tagged(tmp_path)
        c = load_tasks(path, tag="feature")
        c.get_task(2).dependencies = []
        save_tasks(path, c)
        data = json.loads(read_text(path))
        assert data["master"]["metadata"] == {"created": "x"}
        assert data["master"]["tasks"][0]["title"] == "A"
        assert data["feature"]["tasks"][1]["dependencies"] == []

    def test_creates_parent_directories(self, tmp_path, make_task, make_collection):
        path = tmp_path / "nested" / "dir" / "tasks.json"
        save_tasks(path, make_collection([make_task(1)]))
        assert path.is_file()
        assert read_text(path).endswith("\n")

    def test_untouched_fields_saved_verbatim(self, tmp_path):
        path = tmp_path / "tasks.json"
        raw = [
            {"status": "pending", "id": 1, "details": None, "description": None, "dependencies": []},
            {"id": "2", "dependencies": None, "subtasks": [{"title": None, "id": 1}]},
        ]
        write_text(path, json.dumps({"tasks": raw}))
        save_tasks(path, load_tasks(path))
        data = json.loads(read_text(path))
        assert data["tasks"] == raw
        assert list(data["tasks"][0]) == ["status", "id", "details", "description", "dependencies"]

    def test_only_dependencies_change(self, tmp_path):
        path = tmp_path / "tasks.json"
        write_text(path, json.dumps({"tasks": [
            {"id": 1, "priority": None},
            {"id": 2, "custom": {"a": 1}, "subtasks": [{"id": 1, "dependencies": [1]}, {"id": 2}]},
        ]}))
        c = load_tasks(path)
        c.get_task(2).dependencies.append(1)
        c.get_task(2).get_subtask(1).dependencies.clear()
        save_tasks(path, c)
        data = json.loads(read_text(path))
        assert data["tasks"] == [
            {"id": 1, "priority": None},
            {"id": 2, "custom": {"a": 1}, "subtasks": [{"id": 1, "dependencies": []}, {"id": 2}], "dependencies": [1]},
        ]
