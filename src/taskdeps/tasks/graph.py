"""Resolve identifiers to task/subtask nodes and read or write their edges."""

from __future__ import annotations

from dataclasses import dataclass

from taskdeps.errors import DependencyError, ErrorCode
from taskdeps.tasks.ids import (
    SIBLING_REF_THRESHOLD,
    Identifier,
    format_identifier,
    is_subtask_id,
    normalize,
    qualify,
    split_subtask_id,
)
from taskdeps.tasks.model import Subtask, Task, TaskCollection


@dataclass
class Resolved:
    task: Task
    subtask: Subtask | None = None

    @property
    def node(self) -> Task | Subtask:
        return self.subtask if self.subtask is not None else self.task

    @property
    def is_subtask(self) -> bool:
        return self.subtask is not None

    @property
    def owner_parent(self) -> int | None:
        """Parent id used to qualify sibling shorthand; ``None`` for tasks."""
        return self.task.id if self.subtask is not None else None

    @property
    def full_id(self) -> str:
        if self.subtask is not None:
            return f"{self.task.id}.{self.subtask.id}"
        return str(self.task.id)


def resolve(collection: TaskCollection, identifier: Identifier) -> Resolved:
    """Return the node named by *identifier* or raise a not-found error."""
    ident = format_identifier(identifier)
    if is_subtask_id(ident):
        parent_id, child_id = split_subtask_id(ident)
        task = collection.get_task(parent_id)
        if task is None:
            raise DependencyError(
                ErrorCode.PARENT_NOT_FOUND, f"Parent task {parent_id} not found"
            )
        subtask = task.get_subtask(child_id)
        if subtask is None:
            raise DependencyError(
                ErrorCode.SUBTASK_NOT_FOUND, f"Subtask {ident} not found"
            )
        return Resolved(task, subtask)

    task = collection.get_task(ident)
    if task is None:
        raise DependencyError(ErrorCode.TASK_NOT_FOUND, f"Task {ident} not found")
    return Resolved(task)


def find(collection: TaskCollection, identifier: Identifier) -> Resolved | None:
    try:
        return resolve(collection, identifier)
    except DependencyError:
        return None


def task_exists(collection: TaskCollection, identifier: Identifier) -> bool:
    return find(collection, identifier) is not None


def dependencies_of(node: Task | Subtask) -> list[Identifier]:
    if node.dependencies is None:
        node.dependencies = []
    return node.dependencies


def set_dependencies(node: Task | Subtask, deps: list[Identifier]) -> None:
    node.dependencies = list(deps)


def build_adjacency(
    collection: TaskCollection,
    threshold: int = SIBLING_REF_THRESHOLD,
) -> dict[str, list[str]]:
    """Map every node id to its normalized dependency ids.

    Tasks come first in collection order, then all subtasks. Sibling
    shorthand in subtask lists is qualified against the parent.
    """
    adjacency: dict[str, list[str]] = {}
    for task in collection.tasks:
        adjacency[str(task.id)] = [normalize(d) for d in dependencies_of(task)]
    for task in collection.tasks:
        for sub in task.subtasks:
            adjacency[f"{task.id}.{sub.id}"] = [
                qualify(d, task.id, threshold) for d in dependencies_of(sub)
            ]
    return adjacency
