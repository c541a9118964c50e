"""Whole-collection dependency validation and repair."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from taskdeps import log
from taskdeps.tasks.cycles import find_cycles, on_cycle
from taskdeps.tasks.graph import build_adjacency, dependencies_of, resolve
from taskdeps.tasks.ids import SIBLING_REF_THRESHOLD, Identifier, qualify
from taskdeps.tasks.model import Subtask, Task, TaskCollection


class IssueType(str, Enum):
    SELF = "self"
    MISSING = "missing"
    CIRCULAR = "circular"


@dataclass
class Issue:
    type: IssueType
    task_id: str
    message: str
    dependency_id: Identifier | None = None

    def to_dict(self) -> dict:
        out = {"type": self.type.value, "taskId": self.task_id, "message": self.message}
        if self.dependency_id is not None:
            out["dependencyId"] = self.dependency_id
        return out


@dataclass
class ValidationResult:
    valid: bool
    issues: list[Issue] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"valid": self.valid, "issues": [i.to_dict() for i in self.issues]}


@dataclass
class RepairStats:
    non_existent_dependencies_removed: int = 0
    self_dependencies_removed: int = 0
    duplicate_dependencies_removed: int = 0
    circular_dependencies_fixed: int = 0
    tasks_fixed: int = 0
    subtasks_fixed: int = 0

    @property
    def total(self) -> int:
        return (
            self.non_existent_dependencies_removed
            + self.self_dependencies_removed
            + self.duplicate_dependencies_removed
            + self.circular_dependencies_fixed
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "nonExistentDependenciesRemoved": self.non_existent_dependencies_removed,
            "selfDependenciesRemoved": self.self_dependencies_removed,
            "duplicateDependenciesRemoved": self.duplicate_dependencies_removed,
            "circularDependenciesFixed": self.circular_dependencies_fixed,
            "tasksFixed": self.tasks_fixed,
            "subtasksFixed": self.subtasks_fixed,
        }


# ── Helpers ─────────────────────────────────────────────────────────


def _nodes(collection: TaskCollection):
    """Yield ``(full_id, node, owner_parent)`` for every task, then subtasks."""
    for task in collection.tasks:
        yield str(task.id), task, None
        for sub in task.subtasks:
            yield f"{task.id}.{sub.id}", sub, task.id


def _exists(node_id: str, task_ids: set[str], subtask_ids: set[str]) -> bool:
    if "." in node_id:
        return node_id in subtask_ids
    try:
        return str(int(node_id, 10)) in task_ids
    except ValueError:
        return False


# ═══════════════════════════════════════════════════════════════════
#  Validation
# ═══════════════════════════════════════════════════════════════════


def validate_dependencies(
    collection: TaskCollection,
    threshold: int = SIBLING_REF_THRESHOLD,
) -> ValidationResult:
    """Report self, missing and circular dependencies without changing anything."""
    issues: list[Issue] = []
    task_ids = collection.task_ids()
    subtask_ids = collection.subtask_ids()
    adjacency = build_adjacency(collection, threshold)
    # Self edges are reported as SELF, not as cycles.
    adjacency = {n: [d for d in deps if d != n] for n, deps in adjacency.items()}

    for full_id, node, owner in _nodes(collection):
        label = "Subtask" if owner is not None else "Task"
        for dep in dependencies_of(node):
            dep_id = qualify(dep, owner, threshold)
            if dep_id == full_id:
                issues.append(Issue(
                    IssueType.SELF, full_id, f"{label} {full_id} depends on itself",
                ))
                continue
            if not _exists(dep_id, task_ids, subtask_ids):
                issues.append(Issue(
                    IssueType.MISSING,
                    full_id,
                    f"{label} {full_id} depends on non-existent task {dep_id}",
                    dependency_id=dep,
                ))
        if on_cycle(adjacency, full_id):
            issues.append(Issue(
                IssueType.CIRCULAR,
                full_id,
                f"{label} {full_id} is part of a circular dependency chain",
            ))

    return ValidationResult(valid=not issues, issues=issues)


# ═══════════════════════════════════════════════════════════════════
#  Repair
# ═══════════════════════════════════════════════════════════════════


class _Repair:
    """One repair pass over tasks and subtasks: dedupe, missing, self, cycles."""

    def __init__(self, collection: TaskCollection, threshold: int, logger: log.Logger) -> None:
        self.collection = collection
        self.threshold = threshold
        self.log = logger
        self.stats = RepairStats()
        self._tasks_touched: set[str] = set()
        self._subtasks_touched: set[str] = set()

    def _touch(self, full_id: str, owner: int | None) -> None:
        if owner is None:
            self._tasks_touched.add(full_id)
        else:
            self._subtasks_touched.add(full_id)

    def _filter(
        self,
        keep: Callable[[str, str, Identifier, int | None], bool],
    ) -> int:
        removed = 0
        for full_id, node, owner in _nodes(self.collection):
            deps = dependencies_of(node)
            kept = [d for d in deps if keep(full_id, qualify(d, owner, self.threshold), d, owner)]
            if len(kept) < len(deps):
                removed += len(deps) - len(kept)
                node.dependencies = kept
                self._touch(full_id, owner)
        return removed

    def deduplicate(self) -> None:
        seen: dict[str, set[str]] = {}

        def keep(full_id: str, dep_id: str, raw: Identifier, owner: int | None) -> bool:
            bucket = seen.setdefault(full_id, set())
            if dep_id in bucket:
                self.log.info(f"Removing duplicate dependency from {full_id}: {raw}")
                return False
            bucket.add(dep_id)
            return True

        self.stats.duplicate_dependencies_removed += self._filter(keep)

    def drop_missing(self) -> None:
        task_ids = self.collection.task_ids()
        subtask_ids = self.collection.subtask_ids()

        def keep(full_id: str, dep_id: str, raw: Identifier, owner: int | None) -> bool:
            if _exists(dep_id, task_ids, subtask_ids):
                return True
            self.log.info(
                f"Removing invalid dependency from {full_id}: {raw} (target does not exist)"
            )
            return False

        self.stats.non_existent_dependencies_removed += self._filter(keep)

    def drop_self(self) -> None:
        def keep(full_id: str, dep_id: str, raw: Identifier, owner: int | None) -> bool:
            if dep_id != full_id:
                return True
            self.log.info(f"Removing self-dependency from {full_id}")
            return False

        self.stats.self_dependencies_removed += self._filter(keep)

    def break_cycles(self) -> None:
        self.log.info("Checking for circular dependencies...")
        adjacency = build_adjacency(self.collection, self.threshold)
        for start in list(adjacency):
            for source, target in find_cycles(start, adjacency):
                self._drop_edge(source, target)
                adjacency[source] = [d for d in adjacency[source] if d != target]

    def _drop_edge(self, source: str, target: str) -> None:
        resolved = resolve(self.collection, source)
        owner = resolved.owner_parent
        node: Task | Subtask = resolved.node
        deps = dependencies_of(node)
        kept = [d for d in deps if qualify(d, owner, self.threshold) != target]
        removed = len(deps) - len(kept)
        if removed:
            self.log.info(f"Breaking circular dependency: removing {target} from {source}")
            node.dependencies = kept
            self.stats.circular_dependencies_fixed += removed
            self._touch(source, owner)

    def run(self) -> RepairStats:
        self.deduplicate()
        self.drop_missing()
        self.drop_self()
        self.break_cycles()
        self.stats.tasks_fixed = len(self._tasks_touched)
        self.stats.subtasks_fixed = len(self._subtasks_touched)
        return self.stats


def repair_dependencies(
    collection: TaskCollection,
    threshold: int = SIBLING_REF_THRESHOLD,
    logger: log.Logger = log.NULL,
) -> RepairStats:
    """Remove duplicate, missing, self and cycle-closing edges in place.

    Never raises on bad edges. Running it again on its own output changes
    nothing and returns all-zero stats.
    """
    return _Repair(collection, threshold, logger).run()


def ensure_independent_subtask(
    collection: TaskCollection,
    logger: log.Logger = log.NULL,
) -> bool:
    """Give every task with subtasks at least one subtask with no dependencies.

    Clears the first subtask's list where needed. Returns ``True`` on change.
    """
    changed = False
    for task in collection.tasks:
        if not task.subtasks:
            continue
        if any(not s.dependencies for s in task.subtasks):
            continue
        first = task.subtasks[0]
        logger.debug(
            f"Ensuring at least one independent subtask: clearing dependencies "
            f"for subtask {task.id}.{first.id}"
        )
        first.dependencies = []
        changed = True
    return changed


def validate_and_fix(
    collection: TaskCollection,
    threshold: int = SIBLING_REF_THRESHOLD,
    logger: log.Logger = log.NULL,
) -> bool:
    """Repair edges, then restore the independent-subtask invariant.

    Meant to run after any task edit. Returns ``True`` if anything changed.
    """
    before = collection.snapshot()
    repair_dependencies(collection, threshold, logger)
    ensure_independent_subtask(collection, logger)
    return collection.snapshot() != before
