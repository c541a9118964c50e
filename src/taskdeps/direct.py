"""Envelope wrappers for embedding hosts (MCP tools, editor extensions).

Every function takes a plain ``args`` dict and returns either
``{"success": True, "data": {...}}`` or
``{"success": False, "error": {"code": ..., "message": ...}}``.
Nothing here raises.
"""

from __future__ import annotations

from typing import Any, Callable

from taskdeps import log
from taskdeps.commands import (
    MutationHook,
    add_dependency_command,
    ensure_independent_subtask_command,
    fix_dependencies_command,
    remove_dependency_command,
    validate_dependencies_command,
)
from taskdeps.config import Config
from taskdeps.errors import DependencyError, ErrorCode

Envelope = dict[str, Any]


def _error(code: ErrorCode, message: str) -> Envelope:
    return {"success": False, "error": {"code": code.value, "message": message}}


def _config(args: dict[str, Any]) -> Config:
    return Config(
        tasks_file=str(args["tasks_path"]),
        tag=args.get("tag") or "",
        output_dir=args.get("output_dir") or "",
        generate_files=False,
    )


def _run(
    name: str,
    args: dict[str, Any],
    required: tuple[str, ...],
    logger: log.Logger,
    body: Callable[[Config], dict[str, Any]],
) -> Envelope:
    for key in ("tasks_path",) + required:
        value = args.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            logger.error(f"{name} called without {key}")
            return _error(ErrorCode.INPUT_VALIDATION_ERROR, f"{key} is required")
    try:
        return {"success": True, "data": body(_config(args))}
    except DependencyError as exc:
        logger.error(f"Error in {name}: {exc.message}")
        return {"success": False, "error": exc.to_dict()}
    except Exception as exc:  # noqa: BLE001
        logger.error(f"Error in {name}: {exc}")
        return _error(ErrorCode.CORE_FUNCTION_ERROR, str(exc))


def add_dependency_direct(
    args: dict[str, Any],
    logger: log.Logger = log.NULL,
    on_mutation: MutationHook | None = None,
) -> Envelope:
    def body(cfg: Config) -> dict[str, Any]:
        result = add_dependency_command(
            cfg, args["id"], args["depends_on"], logger=logger, on_mutation=on_mutation
        )
        return result.to_dict() | {"tasksPath": cfg.tasks_file}

    return _run("add_dependency_direct", args, ("id", "depends_on"), logger, body)


def remove_dependency_direct(
    args: dict[str, Any],
    logger: log.Logger = log.NULL,
    on_mutation: MutationHook | None = None,
) -> Envelope:
    def body(cfg: Config) -> dict[str, Any]:
        result = remove_dependency_command(
            cfg, args["id"], args["depends_on"], logger=logger, on_mutation=on_mutation
        )
        return result.to_dict() | {"tasksPath": cfg.tasks_file}

    return _run("remove_dependency_direct", args, ("id", "depends_on"), logger, body)


def validate_dependencies_direct(
    args: dict[str, Any],
    logger: log.Logger = log.NULL,
) -> Envelope:
    def body(cfg: Config) -> dict[str, Any]:
        result = validate_dependencies_command(cfg, logger=logger)
        message = (
            "All dependencies are valid"
            if result.valid
            else f"Found {len(result.issues)} dependency issue(s)"
        )
        return result.to_dict() | {"message": message, "tasksPath": cfg.tasks_file}

    return _run("validate_dependencies_direct", args, (), logger, body)


def fix_dependencies_direct(
    args: dict[str, Any],
    logger: log.Logger = log.NULL,
    on_mutation: MutationHook | None = None,
) -> Envelope:
    def body(cfg: Config) -> dict[str, Any]:
        result = fix_dependencies_command(cfg, logger=logger, on_mutation=on_mutation)
        return result.to_dict() | {
            "message": "Dependencies fixed successfully",
            "tasksPath": cfg.tasks_file,
        }

    return _run("fix_dependencies_direct", args, (), logger, body)


def ensure_independent_subtask_direct(
    args: dict[str, Any],
    logger: log.Logger = log.NULL,
    on_mutation: MutationHook | None = None,
) -> Envelope:
    def body(cfg: Config) -> dict[str, Any]:
        changed = ensure_independent_subtask_command(cfg, logger=logger, on_mutation=on_mutation)
        return {"changed": changed, "tasksPath": cfg.tasks_file}

    return _run("ensure_independent_subtask_direct", args, (), logger, body)
