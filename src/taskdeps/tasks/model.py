"""Task, Subtask and TaskCollection data models used across loading, validation and repair."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from taskdeps.errors import DependencyError, ErrorCode
from taskdeps.tasks.ids import Identifier

DEFAULT_TAG = "master"


def _invalid(msg: str) -> DependencyError:
    return DependencyError(ErrorCode.INVALID_COLLECTION, msg)


def _parse_id(value: Any, where: str) -> int:
    if isinstance(value, bool):
        raise _invalid(f"{where}: id must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise _invalid(f"{where}: id must be an integer, got {value!r}")


def _parse_dependencies(value: Any, where: str) -> list[Identifier]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise _invalid(f"{where}: dependencies must be a list")
    deps: list[Identifier] = []
    for dep in value:
        if isinstance(dep, bool) or not isinstance(dep, (int, str)):
            raise _invalid(f"{where}: invalid dependency {dep!r}")
        deps.append(dep)
    return deps


def _overlay(out: dict[str, Any], key: str, value: list[Any]) -> None:
    # Keys the input did not have (or had as null) stay that way while empty.
    if value or out.get(key) is not None:
        out[key] = value


@dataclass
class Subtask:
    id: int
    title: str = ""
    description: str | None = None
    status: str | None = None
    details: str | None = None
    dependencies: list[Identifier] = field(default_factory=list)
    # Object this subtask was loaded from; saving starts from it.
    source: dict[str, Any] | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Any, parent_id: int) -> "Subtask":
        if not isinstance(data, dict):
            raise _invalid(f"Task {parent_id}: subtasks must be objects")
        sid = _parse_id(data.get("id"), f"Task {parent_id} subtask")
        return cls(
            id=sid,
            title=data.get("title") or "",
            description=data.get("description"),
            status=data.get("status"),
            details=data.get("details"),
            dependencies=_parse_dependencies(
                data.get("dependencies"), f"Subtask {parent_id}.{sid}"
            ),
            source=copy.deepcopy(data),
        )

    def to_dict(self) -> dict[str, Any]:
        if self.source is not None:
            out = copy.deepcopy(self.source)
            _overlay(out, "dependencies", list(self.dependencies))
            return out
        out = {"id": self.id, "title": self.title}
        if self.description is not None:
            out["description"] = self.description
        if self.status is not None:
            out["status"] = self.status
        out["dependencies"] = list(self.dependencies)
        if self.details is not None:
            out["details"] = self.details
        return out


@dataclass
class Task:
    id: int
    title: str = ""
    description: str | None = None
    status: str | None = None
    priority: str | None = None
    details: str | None = None
    test_strategy: str | None = None
    dependencies: list[Identifier] = field(default_factory=list)
    subtasks: list[Subtask] = field(default_factory=list)
    source: dict[str, Any] | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Any) -> "Task":
        if not isinstance(data, dict):
            raise _invalid("Tasks must be objects")
        tid = _parse_id(data.get("id"), "Task")
        raw_subtasks = data.get("subtasks")
        if raw_subtasks is None:
            raw_subtasks = []
        if not isinstance(raw_subtasks, list):
            raise _invalid(f"Task {tid}: subtasks must be a list")
        subtasks = [Subtask.from_dict(s, tid) for s in raw_subtasks]
        seen: set[int] = set()
        for sub in subtasks:
            if sub.id in seen:
                raise _invalid(f"Duplicate subtask id: {tid}.{sub.id}")
            seen.add(sub.id)
        return cls(
            id=tid,
            title=data.get("title") or "",
            description=data.get("description"),
            status=data.get("status"),
            priority=data.get("priority"),
            details=data.get("details"),
            test_strategy=data.get("testStrategy"),
            dependencies=_parse_dependencies(data.get("dependencies"), f"Task {tid}"),
            subtasks=subtasks,
            source=copy.deepcopy(data),
        )

    def to_dict(self) -> dict[str, Any]:
        if self.source is not None:
            out = copy.deepcopy(self.source)
            _overlay(out, "dependencies", list(self.dependencies))
            _overlay(out, "subtasks", [s.to_dict() for s in self.subtasks])
            return out
        out = {"id": self.id, "title": self.title}
        if self.description is not None:
            out["description"] = self.description
        if self.status is not None:
            out["status"] = self.status
        if self.priority is not None:
            out["priority"] = self.priority
        out["dependencies"] = list(self.dependencies)
        if self.details is not None:
            out["details"] = self.details
        if self.test_strategy is not None:
            out["testStrategy"] = self.test_strategy
        out["subtasks"] = [s.to_dict() for s in self.subtasks]
        return out

    def get_subtask(self, subtask_id: int) -> Subtask | None:
        for s in self.subtasks:
            if s.id == subtask_id:
                return s
        return None


@dataclass
class TaskCollection:
    tasks: list[Task] = field(default_factory=list)
    tag: str | None = None
    # Remainder of the on-disk document (other tags, metadata), kept for saving.
    document: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dicts(cls, tasks: Any, *, tag: str | None = None) -> "TaskCollection":
        if not isinstance(tasks, list):
            raise _invalid("'tasks' must be a list")
        collection = cls(tasks=[Task.from_dict(t) for t in tasks], tag=tag)
        seen: set[int] = set()
        for task in collection.tasks:
            if task.id in seen:
                raise _invalid(f"Duplicate task id: {task.id}")
            seen.add(task.id)
        return collection

    def get_task(self, task_id: int) -> Task | None:
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None

    def task_ids(self) -> set[str]:
        return {str(t.id) for t in self.tasks}

    def subtask_ids(self) -> set[str]:
        return {f"{t.id}.{s.id}" for t in self.tasks for s in t.subtasks}

    def count_subtasks(self) -> int:
        return sum(len(t.subtasks) for t in self.tasks)

    def count_dependencies(self) -> int:
        total = 0
        for t in self.tasks:
            total += len(t.dependencies)
            total += sum(len(s.dependencies) for s in t.subtasks)
        return total

    def to_dict(self) -> list[dict[str, Any]]:
        return [t.to_dict() for t in self.tasks]

    def snapshot(self) -> list[dict[str, Any]]:
        """Plain-data copy used for deep-equality change detection."""
        return self.to_dict()
