"""Configuration defaults, env vars, and runtime options for taskdeps."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from taskdeps.tasks.ids import SIBLING_REF_THRESHOLD

DEFAULT_TASKS_FILE = ".taskmaster/tasks/tasks.json"


@dataclass
class Config:
    """Runtime configuration, mirroring the CLI flags."""

    # Storage
    tasks_file: str = ""
    tag: str = ""
    output_dir: str = ""

    # Dependency semantics; 0 turns the sibling shorthand off
    sibling_threshold: int = -1

    # Side effects
    generate_files: bool = True

    # Output
    verbose: bool = False
    quiet: bool = False

    def __post_init__(self) -> None:
        if not self.tasks_file:
            self.tasks_file = os.environ.get("TASKDEPS_TASKS_FILE") or str(
                resolve_project_root() / DEFAULT_TASKS_FILE
            )
        if not self.tag:
            self.tag = os.environ.get("TASKDEPS_TAG", "")
        if self.sibling_threshold < 0:
            raw = os.environ.get("TASKDEPS_SIBLING_THRESHOLD", "")
            self.sibling_threshold = int(raw) if raw.strip().isdigit() else SIBLING_REF_THRESHOLD
        if not self.output_dir:
            self.output_dir = str(Path(self.tasks_file).parent)

    @property
    def tag_or_none(self) -> str | None:
        return self.tag or None


def resolve_project_root() -> Path:
    """Return the git repository root, falling back to cwd."""
    import subprocess

    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            capture_output=True,
            text=True,
            check=True,
        )
        return Path(result.stdout.strip())
    except (subprocess.CalledProcessError, FileNotFoundError):
        return Path.cwd()
