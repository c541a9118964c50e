"""Load and save task collections as ``tasks.json``.

Two layouts are understood: the legacy ``{"tasks": [...]}`` document and the
tagged ``{"<tag>": {"tasks": [...], "metadata": {...}}}`` document. Saving
writes back into whichever layout was loaded and leaves other tags alone.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path

from taskdeps.errors import DependencyError, ErrorCode
from taskdeps.io_utils import PathLike, read_json, write_json
from taskdeps.tasks.model import DEFAULT_TAG, TaskCollection


def load_tasks(path: PathLike, tag: str | None = None) -> TaskCollection:
    p = Path(path)
    if not p.is_file():
        raise DependencyError(ErrorCode.FILE_NOT_FOUND, f"Tasks file not found at {p}")
    try:
        document = read_json(p)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DependencyError(
            ErrorCode.INVALID_COLLECTION, f"Could not parse {p}: {exc}"
        ) from exc

    if not isinstance(document, dict):
        raise DependencyError(ErrorCode.INVALID_COLLECTION, f"No valid tasks found in {p}")

    if "tasks" in document and (tag is None or tag not in document):
        collection = TaskCollection.from_dicts(document["tasks"])
    else:
        tag = tag or DEFAULT_TAG
        section = document.get(tag)
        if not isinstance(section, dict) or "tasks" not in section:
            raise DependencyError(
                ErrorCode.INVALID_COLLECTION,
                f"Tag '{tag}' not found or has no tasks in {p}",
            )
        collection = TaskCollection.from_dicts(section["tasks"], tag=tag)

    collection.document = document
    return collection


def save_tasks(path: PathLike, collection: TaskCollection) -> None:
    document = copy.deepcopy(collection.document) if collection.document else {}
    tasks = collection.to_dict()
    if collection.tag is None:
        document["tasks"] = tasks
    else:
        section = document.get(collection.tag)
        if not isinstance(section, dict):
            section = {}
        section["tasks"] = tasks
        document[collection.tag] = section
    write_json(path, document)
