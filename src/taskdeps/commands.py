"""Read-modify-write commands over a ``tasks.json`` file.

Each command loads the collection fresh, runs one operation, saves only if
something changed, then fires the regeneration hook once. A failing hook is
logged and never undoes the save.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from taskdeps import log
from taskdeps.config import Config
from taskdeps.dependencies import add_dependency, remove_dependency
from taskdeps.generate import generate_task_files
from taskdeps.io_utils import PathLike
from taskdeps.tasks.ids import Identifier, format_identifier
from taskdeps.tasks.io import load_tasks, save_tasks
from taskdeps.tasks.validate import (
    RepairStats,
    ValidationResult,
    ensure_independent_subtask,
    repair_dependencies,
    validate_dependencies,
)

MutationHook = Callable[[str, str], None]


@dataclass
class MutationResult:
    changed: bool
    task_id: Identifier
    dependency_id: Identifier | None = None
    message: str = ""

    def to_dict(self) -> dict:
        return {
            "changed": self.changed,
            "taskId": self.task_id,
            "dependencyId": self.dependency_id,
            "message": self.message,
        }


@dataclass
class FixResult:
    changed: bool
    stats: RepairStats = field(default_factory=RepairStats)
    independent_subtasks_restored: bool = False

    def to_dict(self) -> dict:
        return {
            "changed": self.changed,
            "stats": self.stats.to_dict(),
            "independentSubtasksRestored": self.independent_subtasks_restored,
        }


def default_hook(cfg: Config, logger: log.Logger) -> MutationHook | None:
    """Task-file regeneration bound to *cfg*, or ``None`` when disabled."""
    if not cfg.generate_files:
        return None

    def _hook(tasks_path: str, output_dir: str) -> None:
        generate_task_files(
            tasks_path,
            output_dir,
            tag=cfg.tag_or_none,
            threshold=cfg.sibling_threshold,
            logger=logger,
        )

    return _hook


def _fire_hook(
    hook: MutationHook | None,
    tasks_path: PathLike,
    output_dir: str,
    logger: log.Logger,
) -> None:
    if hook is None:
        return
    try:
        hook(str(tasks_path), output_dir)
    except Exception as exc:  # noqa: BLE001
        logger.warn(f"Task file regeneration failed: {exc}")


def add_dependency_command(
    cfg: Config,
    task_id: object,
    dependency_id: object,
    *,
    logger: log.Logger = log.NULL,
    on_mutation: MutationHook | None = None,
) -> MutationResult:
    task_ident = format_identifier(task_id)
    dep_ident = format_identifier(dependency_id)
    collection = load_tasks(cfg.tasks_file, cfg.tag_or_none)

    changed = add_dependency(
        collection, task_ident, dep_ident, threshold=cfg.sibling_threshold, logger=logger
    )
    if not changed:
        return MutationResult(
            False, task_ident, dep_ident,
            f"Dependency {dep_ident} already exists in task {task_ident}",
        )

    save_tasks(cfg.tasks_file, collection)
    logger.panel(
        f"[green]Successfully added dependency:[/green]\n\n"
        f"Task [bold]{task_ident}[/bold] now depends on [bold]{dep_ident}[/bold]"
    )
    _fire_hook(on_mutation, cfg.tasks_file, cfg.output_dir, logger)
    return MutationResult(
        True, task_ident, dep_ident,
        f"Successfully added dependency: Task {task_ident} now depends on {dep_ident}",
    )


def remove_dependency_command(
    cfg: Config,
    task_id: object,
    dependency_id: object,
    *,
    logger: log.Logger = log.NULL,
    on_mutation: MutationHook | None = None,
) -> MutationResult:
    task_ident = format_identifier(task_id)
    dep_ident = format_identifier(dependency_id)
    collection = load_tasks(cfg.tasks_file, cfg.tag_or_none)

    changed = remove_dependency(
        collection, task_ident, dep_ident, threshold=cfg.sibling_threshold, logger=logger
    )
    if not changed:
        return MutationResult(
            False, task_ident, dep_ident,
            f"Task {task_ident} does not depend on {dep_ident}, no changes made",
        )

    save_tasks(cfg.tasks_file, collection)
    logger.panel(
        f"[green]Successfully removed dependency:[/green]\n\n"
        f"Task [bold]{task_ident}[/bold] no longer depends on [bold]{dep_ident}[/bold]"
    )
    _fire_hook(on_mutation, cfg.tasks_file, cfg.output_dir, logger)
    return MutationResult(
        True, task_ident, dep_ident,
        f"Successfully removed dependency: Task {task_ident} no longer depends on {dep_ident}",
    )


def validate_dependencies_command(
    cfg: Config,
    *,
    logger: log.Logger = log.NULL,
) -> ValidationResult:
    collection = load_tasks(cfg.tasks_file, cfg.tag_or_none)
    task_count = len(collection.tasks)
    subtask_count = collection.count_subtasks()
    logger.info(
        f"Analyzing dependencies for {task_count} tasks and {subtask_count} subtasks..."
    )

    result = validate_dependencies(collection, cfg.sibling_threshold)
    if result.valid:
        logger.success("No invalid dependencies found - all dependencies are valid")
        logger.panel(
            "[green]All Dependencies Are Valid[/green]\n\n"
            f"[cyan]Tasks checked:[/cyan] {task_count}\n"
            f"[cyan]Subtasks checked:[/cyan] {subtask_count}\n"
            f"[cyan]Total dependencies verified:[/cyan] {collection.count_dependencies()}"
        )
        return result

    logger.error(f"Dependency validation failed. Found {len(result.issues)} issue(s):")
    for issue in result.issues:
        line = f"  \\[{issue.type.value.upper()}] {issue.message}"
        if issue.dependency_id is not None:
            line += f" (Dependency: {issue.dependency_id})"
        logger.error(line)
    logger.panel(
        "[red]Dependency Validation FAILED[/red]\n\n"
        f"[cyan]Tasks checked:[/cyan] {task_count}\n"
        f"[cyan]Subtasks checked:[/cyan] {subtask_count}\n"
        f"[red]Issues found:[/red] {len(result.issues)}",
        style="red",
    )
    return result


def fix_dependencies_command(
    cfg: Config,
    *,
    logger: log.Logger = log.NULL,
    on_mutation: MutationHook | None = None,
) -> FixResult:
    logger.info("Checking for and fixing invalid dependencies...")
    collection = load_tasks(cfg.tasks_file, cfg.tag_or_none)
    before = collection.snapshot()

    stats = repair_dependencies(collection, cfg.sibling_threshold, logger)
    restored = ensure_independent_subtask(collection, logger)
    changed = collection.snapshot() != before

    if changed:
        save_tasks(cfg.tasks_file, collection)
        logger.success("Fixed dependency issues")
        _fire_hook(on_mutation, cfg.tasks_file, cfg.output_dir, logger)
    else:
        logger.info("No changes needed to fix dependencies")

    if stats.total:
        logger.panel(
            "[green]Dependency Fixes Summary:[/green]\n\n"
            f"[cyan]Invalid dependencies removed:[/cyan] {stats.non_existent_dependencies_removed}\n"
            f"[cyan]Self-dependencies removed:[/cyan] {stats.self_dependencies_removed}\n"
            f"[cyan]Duplicate dependencies removed:[/cyan] {stats.duplicate_dependencies_removed}\n"
            f"[cyan]Circular dependencies fixed:[/cyan] {stats.circular_dependencies_fixed}\n\n"
            f"[cyan]Tasks fixed:[/cyan] {stats.tasks_fixed}\n"
            f"[cyan]Subtasks fixed:[/cyan] {stats.subtasks_fixed}"
        )
    elif not changed:
        logger.panel(
            "[green]All Dependencies Are Valid[/green]\n\n"
            f"[cyan]Tasks checked:[/cyan] {len(collection.tasks)}\n"
            f"[cyan]Total dependencies verified:[/cyan] {collection.count_dependencies()}"
        )
    return FixResult(changed=changed, stats=stats, independent_subtasks_restored=restored)


def ensure_independent_subtask_command(
    cfg: Config,
    *,
    logger: log.Logger = log.NULL,
    on_mutation: MutationHook | None = None,
) -> bool:
    collection = load_tasks(cfg.tasks_file, cfg.tag_or_none)
    changed = ensure_independent_subtask(collection, logger)
    if changed:
        save_tasks(cfg.tasks_file, collection)
        logger.success("Every task with subtasks now has an independent subtask")
        _fire_hook(on_mutation, cfg.tasks_file, cfg.output_dir, logger)
    else:
        logger.info("All tasks already have an independent subtask")
    return changed
