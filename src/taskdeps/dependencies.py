"""Add and remove single dependency edges.

Both operations work on an in-memory :class:`TaskCollection` and check every
precondition before touching it. Loading, saving and file regeneration live in
:mod:`taskdeps.commands`.
"""

from __future__ import annotations

from taskdeps import log
from taskdeps.errors import DependencyError, ErrorCode
from taskdeps.tasks.cycles import introduces_cycle
from taskdeps.tasks.graph import dependencies_of, resolve
from taskdeps.tasks.ids import (
    SIBLING_REF_THRESHOLD,
    Identifier,
    dependency_sort_key,
    format_identifier,
    normalize,
    qualify,
)
from taskdeps.tasks.model import TaskCollection


def _resolve_owner(collection: TaskCollection, task_id: Identifier):
    try:
        return resolve(collection, task_id)
    except DependencyError as exc:
        if exc.code in (ErrorCode.INVALID_ID_FORMAT, ErrorCode.INPUT_VALIDATION_ERROR):
            raise
        raise DependencyError(ErrorCode.TASK_NOT_FOUND, exc.message) from None


def _match_index(
    deps: list[Identifier],
    target: str,
    owner_parent: int | None,
    threshold: int,
) -> int | None:
    for index, dep in enumerate(deps):
        if qualify(dep, owner_parent, threshold) == target:
            return index
    return None


def add_dependency(
    collection: TaskCollection,
    task_id: Identifier,
    dependency_id: Identifier,
    *,
    threshold: int = SIBLING_REF_THRESHOLD,
    logger: log.Logger = log.NULL,
) -> bool:
    """Make *task_id* depend on *dependency_id*.

    Returns ``True`` if an edge was added and ``False`` if it already existed.
    Raises :class:`DependencyError` with ``DEPENDENCY_NOT_FOUND``,
    ``TASK_NOT_FOUND``, ``SELF_DEPENDENCY`` or ``CIRCULAR_DEPENDENCY``.
    """
    task_ident = format_identifier(task_id)
    dep_ident = format_identifier(dependency_id)
    logger.info(f"Adding dependency {dep_ident} to task {task_ident}...")

    try:
        resolve(collection, dep_ident)
    except DependencyError as exc:
        if exc.code is ErrorCode.INVALID_ID_FORMAT:
            raise
        raise DependencyError(
            ErrorCode.DEPENDENCY_NOT_FOUND,
            f"Dependency target {dep_ident} does not exist",
        ) from None

    owner = _resolve_owner(collection, task_ident)
    deps = dependencies_of(owner.node)
    target = normalize(dep_ident)

    if any(qualify(d, owner.owner_parent, threshold) == target for d in deps):
        logger.warn(f"Dependency {dep_ident} already exists in task {task_ident}.")
        return False

    if owner.full_id == target:
        raise DependencyError(
            ErrorCode.SELF_DEPENDENCY, f"Task {task_ident} cannot depend on itself"
        )

    if introduces_cycle(collection, task_ident, dep_ident, threshold):
        raise DependencyError(
            ErrorCode.CIRCULAR_DEPENDENCY,
            f"Cannot add dependency {dep_ident} to task {task_ident} "
            "as it would create a circular dependency",
        )

    stored = dep_ident
    if owner.is_subtask and isinstance(stored, int) and stored < threshold:
        # A bare small int here would read back as a sibling subtask.
        stored = normalize(stored)

    deps.append(stored)
    deps.sort(key=dependency_sort_key)
    logger.success(f"Added dependency {dep_ident} to task {task_ident}")
    return True


def remove_dependency(
    collection: TaskCollection,
    task_id: Identifier,
    dependency_id: Identifier,
    *,
    threshold: int = SIBLING_REF_THRESHOLD,
    logger: log.Logger = log.NULL,
) -> bool:
    """Drop *dependency_id* from *task_id*.

    Returns ``True`` if an edge was removed. A missing edge is not an error.
    """
    task_ident = format_identifier(task_id)
    dep_ident = format_identifier(dependency_id)
    logger.info(f"Removing dependency {dep_ident} from task {task_ident}...")

    owner = _resolve_owner(collection, task_ident)
    deps = dependencies_of(owner.node)
    if not deps:
        logger.info(f"Task {task_ident} has no dependencies, nothing to remove.")
        return False

    target = normalize(dep_ident)
    index = _match_index(deps, target, owner.owner_parent, threshold)
    if index is not None:
        del deps[index]
        logger.success(
            f"Removed dependency: Task {task_ident} no longer depends on {dep_ident}"
        )
        return True

    logger.info(f"Task {task_ident} does not depend on {dep_ident}, no changes made.")
    return False
