"""Task and subtask identifiers.

Top-level tasks are named by plain integers, subtasks by ``"parent.child"``
strings. Identifiers loaded from JSON may arrive as ints or as numeric
strings depending on the writer, so every comparison goes through
:func:`normalize`.
"""

from __future__ import annotations

from typing import Union

from taskdeps.errors import DependencyError, ErrorCode

Identifier = Union[int, str]

# Legacy shorthand: inside a subtask's dependency list a bare integer below
# this value names a sibling subtask rather than a top-level task.
SIBLING_REF_THRESHOLD = 100


def is_subtask_id(identifier: Identifier) -> bool:
    return isinstance(identifier, str) and "." in identifier


def format_identifier(raw: object) -> Identifier:
    """Coerce user or JSON input into an :data:`Identifier`.

    Strings containing a dot are returned as-is (stripped). Everything else
    must parse as a base-10 integer.
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise DependencyError(ErrorCode.INPUT_VALIDATION_ERROR, "An id is required")
    if isinstance(raw, bool):
        raise DependencyError(ErrorCode.INVALID_ID_FORMAT, f"Invalid id: {raw!r}")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        if "." in text:
            split_subtask_id(text)
            return text
        try:
            return int(text, 10)
        except ValueError:
            pass
    raise DependencyError(ErrorCode.INVALID_ID_FORMAT, f"Invalid id: {raw!r}")


def normalize(identifier: Identifier) -> str:
    return str(identifier).strip()


def split_subtask_id(identifier: Identifier) -> tuple[int, int]:
    """Return ``(parent, child)`` for a ``"p.c"`` identifier."""
    parts = normalize(identifier).split(".")
    if len(parts) != 2:
        raise DependencyError(ErrorCode.INVALID_ID_FORMAT, f"Invalid subtask id: {identifier!r}")
    try:
        return int(parts[0], 10), int(parts[1], 10)
    except ValueError:
        raise DependencyError(
            ErrorCode.INVALID_ID_FORMAT, f"Invalid subtask id: {identifier!r}"
        ) from None


def parent_of(identifier: Identifier) -> int | None:
    if not is_subtask_id(identifier):
        return None
    return split_subtask_id(identifier)[0]


def qualify(
    dep: Identifier,
    owner_parent: int | None,
    threshold: int = SIBLING_REF_THRESHOLD,
) -> str:
    """Normalize *dep* as seen from a node whose parent is *owner_parent*.

    ``owner_parent`` is ``None`` for top-level tasks. For subtasks, a bare
    integer below *threshold* is rewritten to ``"{owner_parent}.{dep}"``.
    """
    if (
        owner_parent is not None
        and isinstance(dep, int)
        and not isinstance(dep, bool)
        and dep < threshold
    ):
        return f"{owner_parent}.{dep}"
    return normalize(dep)


def dependency_sort_key(identifier: Identifier) -> tuple[int, int, int]:
    """Numeric ids by value first, then subtask ids by (parent, child)."""
    text = normalize(identifier)
    if "." in text:
        try:
            parent, child = split_subtask_id(text)
        except DependencyError:
            return (2, 0, 0)
        return (1, parent, child)
    try:
        return (0, int(text, 10), 0)
    except ValueError:
        return (2, 0, 0)
