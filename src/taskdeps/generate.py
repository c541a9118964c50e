"""Per-task text files regenerated after every dependency change."""

from __future__ import annotations

import re
from pathlib import Path

from taskdeps import log
from taskdeps.io_utils import PathLike, write_text
from taskdeps.tasks.io import load_tasks
from taskdeps.tasks.ids import SIBLING_REF_THRESHOLD, qualify
from taskdeps.tasks.model import DEFAULT_TAG, Task


def task_file_name(task_id: int, tag: str | None = None) -> str:
    """``task_001.txt`` for the master tag, ``task_001_<tag>.txt`` otherwise."""
    if tag and tag != DEFAULT_TAG:
        return f"task_{task_id:03d}_{tag}.txt"
    return f"task_{task_id:03d}.txt"


def render_task(task: Task, threshold: int = SIBLING_REF_THRESHOLD) -> str:
    deps = ", ".join(str(d) for d in task.dependencies) or "None"
    lines = [
        f"# Task ID: {task.id}",
        f"# Title: {task.title}",
        f"# Status: {task.status or 'pending'}",
        f"# Dependencies: {deps}",
        f"# Priority: {task.priority or 'medium'}",
        f"# Description: {task.description or ''}",
        "# Details:",
        task.details or "",
        "",
        "# Test Strategy:",
        task.test_strategy or "",
    ]
    if task.subtasks:
        lines += ["", "# Subtasks:"]
        for sub in task.subtasks:
            # Sibling shorthand is always written out in full here.
            sub_deps = ", ".join(qualify(d, task.id, threshold) for d in sub.dependencies) or "None"
            lines += [
                f"## {sub.id}. {sub.title} [{sub.status or 'pending'}]",
                f"### Dependencies: {sub_deps}",
                f"### Description: {sub.description or ''}",
                "### Details:",
                sub.details or "",
                "",
            ]
    return "\n".join(lines).rstrip("\n") + "\n"


def _remove_orphans(output_dir: Path, valid_ids: set[int], tag: str | None, logger: log.Logger) -> None:
    if tag and tag != DEFAULT_TAG:
        pattern = re.compile(rf"^task_(\d+)_{re.escape(tag)}\.txt$")
    else:
        pattern = re.compile(r"^task_(\d+)\.txt$")
    for path in output_dir.iterdir():
        m = pattern.match(path.name)
        if m and int(m.group(1)) not in valid_ids:
            logger.debug(f"Removing orphaned task file {path.name}")
            path.unlink()


def generate_task_files(
    tasks_path: PathLike,
    output_dir: PathLike | None = None,
    *,
    tag: str | None = None,
    threshold: int = SIBLING_REF_THRESHOLD,
    logger: log.Logger = log.NULL,
) -> int:
    """Write one text file per task next to *tasks_path* (or into *output_dir*).

    Returns the number of files written.
    """
    collection = load_tasks(tasks_path, tag)
    out = Path(output_dir) if output_dir else Path(tasks_path).parent
    out.mkdir(parents=True, exist_ok=True)

    _remove_orphans(out, {t.id for t in collection.tasks}, collection.tag, logger)

    for task in collection.tasks:
        write_text(out / task_file_name(task.id, collection.tag), render_task(task, threshold))

    logger.info(f"Generated {len(collection.tasks)} task files in {out}")
    return len(collection.tasks)
