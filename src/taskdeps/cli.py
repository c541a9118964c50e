"""taskdeps CLI: manage task dependencies in a ``tasks.json`` file.

Installed as ``taskdeps`` console_script via pipx / pip.
"""

from __future__ import annotations

import click

from taskdeps import __version__
from taskdeps.config import Config


# ── Custom Click group that handles short command aliases ─────────────

class TaskdepsGroup(click.Group):
    """Accept ``add-dep``, ``remove-dep``, ``validate`` and ``fix`` as aliases."""

    _ALIASES: dict[str, str] = {
        "add-dep": "add-dependency",
        "remove-dep": "remove-dependency",
        "validate": "validate-dependencies",
        "fix": "fix-dependencies",
    }

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        return super().get_command(ctx, self._ALIASES.get(cmd_name, cmd_name))

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        _, cmd, rest = super().resolve_command(ctx, args)
        return (cmd.name if cmd else None), cmd, rest


CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


def _threshold(value: int | None) -> int:
    return -1 if value is None else value


@click.group(cls=TaskdepsGroup, context_settings=CONTEXT_SETTINGS)
@click.option("-f", "--file", "tasks_file", default="", help="Path to tasks.json (default: .taskmaster/tasks/tasks.json)")
@click.option("--tag", default="", help="Tag context inside a tagged tasks.json")
@click.option("--output-dir", default="", help="Directory for generated task files")
@click.option(
    "--sibling-threshold",
    type=click.IntRange(min=0),
    default=None,
    help="Bare ints below this in a subtask's dependencies mean sibling subtasks (0 disables)",
)
@click.option("--no-generate", is_flag=True, help="Do not regenerate task files after changes")
@click.option("-q", "--quiet", is_flag=True, help="Only print errors")
@click.option("-v", "--verbose", is_flag=True, help="Show debug output")
@click.version_option(__version__, prog_name="taskdeps")
@click.pass_context
def main(
    ctx: click.Context,
    tasks_file: str,
    tag: str,
    output_dir: str,
    sibling_threshold: int | None,
    no_generate: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    """taskdeps: dependency graph manager for Task Master style tasks.json.

    Adds and removes dependencies between tasks and subtasks, refusing
    self-references and cycles, and repairs broken dependency data.

    \b
    EXAMPLES:
      taskdeps add-dependency --id 2 --depends-on 1
      taskdeps add-dep --id 3.2 --depends-on 3.1
      taskdeps remove-dependency --id 2 --depends-on 1
      taskdeps validate-dependencies
      taskdeps -f tasks.json fix-dependencies
    """
    from taskdeps import log as tlog

    cfg = Config(
        tasks_file=tasks_file,
        tag=tag,
        output_dir=output_dir,
        sibling_threshold=_threshold(sibling_threshold),
        generate_files=not no_generate,
        verbose=verbose,
        quiet=quiet,
    )
    ctx.obj = {"cfg": cfg, "log": tlog.get_logger(verbose=verbose, quiet=quiet)}


def _context(ctx: click.Context):
    from taskdeps.commands import default_hook

    cfg: Config = ctx.obj["cfg"]
    logger = ctx.obj["log"]
    return cfg, logger, default_hook(cfg, logger)


def _fail(exc: Exception) -> click.ClickException:
    from taskdeps.errors import DependencyError

    if isinstance(exc, DependencyError):
        return click.ClickException(f"[{exc.code.value}] {exc.message}")
    return click.ClickException(str(exc))


# ── Subcommands ──────────────────────────────────────────────────────


@main.command("add-dependency")
@click.option("-i", "--id", "task_id", required=True, help="Task or subtask id that will depend on another")
@click.option("-d", "--depends-on", "depends_on", required=True, help="Task or subtask id to depend on")
@click.pass_context
def add_dependency_cmd(ctx: click.Context, task_id: str, depends_on: str) -> None:
    """Make a task or subtask depend on another one."""
    from taskdeps.commands import add_dependency_command
    from taskdeps.errors import DependencyError

    cfg, logger, hook = _context(ctx)
    try:
        add_dependency_command(cfg, task_id, depends_on, logger=logger, on_mutation=hook)
    except DependencyError as exc:
        raise _fail(exc) from None


@main.command("remove-dependency")
@click.option("-i", "--id", "task_id", required=True, help="Task or subtask id to remove a dependency from")
@click.option("-d", "--depends-on", "depends_on", required=True, help="Dependency id to remove")
@click.pass_context
def remove_dependency_cmd(ctx: click.Context, task_id: str, depends_on: str) -> None:
    """Remove a dependency (a missing one is not an error)."""
    from taskdeps.commands import remove_dependency_command
    from taskdeps.errors import DependencyError

    cfg, logger, hook = _context(ctx)
    try:
        remove_dependency_command(cfg, task_id, depends_on, logger=logger, on_mutation=hook)
    except DependencyError as exc:
        raise _fail(exc) from None


@main.command("validate-dependencies")
@click.pass_context
def validate_dependencies_cmd(ctx: click.Context) -> None:
    """Report invalid dependencies without changing anything. Exits 1 on issues."""
    from taskdeps.commands import validate_dependencies_command
    from taskdeps.errors import DependencyError

    cfg, logger, _ = _context(ctx)
    try:
        result = validate_dependencies_command(cfg, logger=logger)
    except DependencyError as exc:
        raise _fail(exc) from None
    if not result.valid:
        ctx.exit(1)


@main.command("fix-dependencies")
@click.pass_context
def fix_dependencies_cmd(ctx: click.Context) -> None:
    """Remove duplicate, missing, self and circular dependencies."""
    from taskdeps.commands import fix_dependencies_command
    from taskdeps.errors import DependencyError

    cfg, logger, hook = _context(ctx)
    try:
        fix_dependencies_command(cfg, logger=logger, on_mutation=hook)
    except DependencyError as exc:
        raise _fail(exc) from None


@main.command("ensure-independent")
@click.pass_context
def ensure_independent_cmd(ctx: click.Context) -> None:
    """Make sure every task with subtasks has one subtask with no dependencies."""
    from taskdeps.commands import ensure_independent_subtask_command
    from taskdeps.errors import DependencyError

    cfg, logger, hook = _context(ctx)
    try:
        ensure_independent_subtask_command(cfg, logger=logger, on_mutation=hook)
    except DependencyError as exc:
        raise _fail(exc) from None


@main.command("generate")
@click.pass_context
def generate_cmd(ctx: click.Context) -> None:
    """Regenerate the per-task text files."""
    from taskdeps.errors import DependencyError
    from taskdeps.generate import generate_task_files

    cfg, logger, _ = _context(ctx)
    try:
        count = generate_task_files(
            cfg.tasks_file,
            cfg.output_dir,
            tag=cfg.tag_or_none,
            threshold=cfg.sibling_threshold,
            logger=logger,
        )
    except DependencyError as exc:
        raise _fail(exc) from None
    logger.success(f"Generated {count} task files in {cfg.output_dir}")
