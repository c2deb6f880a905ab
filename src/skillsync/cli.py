import json
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from skillsync import scope as scope_ops
from skillsync.backup import BackupController, FileBackupStore
from skillsync.cancel import CancelToken
from skillsync.config import Config, get_config_file, get_default_config, load_config
from skillsync.constant import VERSION
from skillsync.exception import (
    CancelledError,
    ConflictUnresolvedError,
    ErrorKind,
    ExitCode,
    SkillNotFoundError,
    SkillsyncError,
    exit_code_for,
)
from skillsync.model import Platform, PlatformSpec, Scope, Skill
from skillsync.paths import PathResolver
from skillsync.share import resolve_share_dir
from skillsync.similarity import MatchThresholds, find_similar
from skillsync.skills.discovery import DiscoveryOptions, discover
from skillsync.sync.conflict import classify, detect_conflicts
from skillsync.sync.executor import SyncExecutor
from skillsync.sync.planner import PlanEntry, SyncPlan, plan_sync
from skillsync.sync.strategy import Resolution, ResolutionChoice, Strategy
from skillsync.utils.diff import format_hunks
from skillsync.utils.logging import configure_file_logging
from skillsync.utils.signal import cancel_on_sigint
from skillsync.utils.string import shorten_middle

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

_LOG_LEVEL_OPTION = "--log-level"
_DEFAULT_LOG_LEVEL_KEY = "default"


class _ParsedParam(click.ParamType):
    """Click parameter backed by a ``parse`` classmethod."""

    def __init__(self, name: str, parse: Any) -> None:
        self.name = name
        self._parse = parse

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> Any:
        if not isinstance(value, str):
            return value
        try:
            return self._parse(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


PLATFORM = _ParsedParam("platform", Platform.parse)
SCOPE = _ParsedParam("scope", Scope.parse)
PLATFORM_SPEC = _ParsedParam("platform[:scope]", PlatformSpec.parse)


class SkillsyncGroup(click.Group):
    """Group that maps skillsync errors onto process exit codes."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except CancelledError:
            err_console.print("[yellow]Cancelled.[/yellow] Completed work has been kept.")
            ctx.exit(int(ExitCode.PARTIAL))
        except SkillsyncError as e:
            _print_error(e)
            ctx.exit(int(exit_code_for(e)))
        except OSError as e:
            err_console.print(f"[red]Error:[/red] {escape(str(e))}")
            ctx.exit(int(ExitCode.IO))


def _print_error(error: SkillsyncError) -> None:
    err_console.print(f"[red]Error ({error.kind.value}):[/red] {escape(error.message)}")
    if isinstance(error, ConflictUnresolvedError) and error.skill_names:
        err_console.print(
            "Resolve with [bold]--strategy interactive[/bold] or pick another strategy for: "
            + ", ".join(error.skill_names)
        )


@dataclass(slots=True)
class AppContext:
    config: Config
    work_dir: Path
    home: Path
    resolver: PathResolver

    def discovery_options(
        self,
        scopes: Sequence[Scope] = (),
        *,
        collapse: bool = True,
        follow_symlinks: bool = False,
    ) -> DiscoveryOptions:
        paths = self.config.paths
        return DiscoveryOptions(
            scope_filter=frozenset(scopes) if scopes else None,
            collapse_precedence=collapse,
            follow_symlinks=follow_symlinks,
            admin_path=paths.admin_path,
            system_path=paths.system_path,
            builtin_path=paths.builtin_path,
        )

    def backups(self) -> BackupController:
        return BackupController(FileBackupStore(self.home))


@click.group(cls=SkillsyncGroup, context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(VERSION)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Log debug information. Default: no.",
)
@click.option(
    "--log-level",
    "-L",
    "log_level_override",
    multiple=True,
    help=(
        "Override log level per module. Use `module=LEVEL` to target a specific module "
        "(e.g. `-L skillsync.sync=DEBUG`) or just `LEVEL` to change the default level."
    ),
)
@click.option(
    "--config-file",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path),
    default=None,
    help="Config file to load. Default: config.yaml in the skillsync home.",
)
@click.option(
    "--work-dir",
    "-w",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Working directory used to find repository skills. Default: current directory.",
)
@click.option(
    "--home",
    "skillsync_home",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="skillsync home directory. Default: $SKILLSYNC_HOME or ~/.skillsync.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    debug: bool,
    log_level_override: tuple[str, ...],
    config_file: Path | None,
    work_dir: Path | None,
    skillsync_home: Path | None,
):
    """Discover, compare and synchronize skills across AI coding assistants."""
    if config_file is None:
        default_file = get_config_file(skillsync_home)
        config = load_config(default_file) if default_file.exists() else get_default_config()
    else:
        config = load_config(config_file)

    home = resolve_share_dir(skillsync_home or config.paths.skillsync_home)
    config_levels = dict(config.logging.levels)
    cli_levels = _parse_log_level_overrides(log_level_override)
    merged_levels = {**config_levels, **cli_levels}
    base_level = "TRACE" if debug else "INFO"
    try:
        configure_file_logging(
            home / "logs" / "skillsync.log",
            base_level=base_level,
            module_levels=merged_levels,
        )
    except ValueError as exc:
        raise click.BadOptionUsage(_LOG_LEVEL_OPTION, str(exc)) from exc

    work_dir = (work_dir or Path.cwd()).absolute()
    logger.debug("Running in {work_dir} with home {home}", work_dir=work_dir, home=home)
    ctx.obj = AppContext(
        config=config,
        work_dir=work_dir,
        home=home,
        resolver=PathResolver(skillsync_home=home),
    )


def _parse_log_level_overrides(values: tuple[str, ...]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for raw in values:
        entry = raw.strip()
        if not entry:
            raise click.BadOptionUsage(_LOG_LEVEL_OPTION, "Log level override cannot be empty")
        if "=" in entry:
            module, level = entry.split("=", 1)
            module = module.strip()
            if not module:
                raise click.BadOptionUsage(
                    _LOG_LEVEL_OPTION,
                    "Module name is required before '=' when using --log-level",
                )
        else:
            module = _DEFAULT_LOG_LEVEL_KEY
            level = entry
        level = level.strip()
        if not level:
            raise click.BadOptionUsage(_LOG_LEVEL_OPTION, "Log level cannot be empty")
        overrides[_normalize_module_key(module)] = level
    return overrides


def _normalize_module_key(module: str) -> str:
    normalized = module.strip().rstrip(".").lower()
    if not normalized:
        return _DEFAULT_LOG_LEVEL_KEY
    return normalized


def _skill_table(skills: Sequence[Skill]) -> Table:
    table = Table(show_edge=False, header_style="bold")
    table.add_column("Name")
    table.add_column("Platform")
    table.add_column("Scope")
    table.add_column("Description")
    for skill in skills:
        table.add_row(
            escape(skill.name),
            skill.platform.code,
            escape(skill.display_scope()),
            escape(_shorten(skill.description or "")),
        )
    return table


def _shorten(text: str, width: int = 60) -> str:
    return shorten_middle(text.strip(), width)


def _print_warnings(warnings: Sequence[Any]) -> None:
    for warning in warnings:
        err_console.print(
            f"[yellow]warning[/yellow] {escape(f'[{warning.kind.value}]')} "
            f"{escape(str(warning.path))}: {escape(warning.message)}"
        )


@cli.command("discover")
@click.option(
    "--platform",
    "-p",
    "platforms",
    type=PLATFORM,
    multiple=True,
    help="Platform to scan. Repeat for several. Default: all platforms.",
)
@click.option(
    "--scope",
    "-s",
    "scopes",
    type=SCOPE,
    multiple=True,
    help="Scope to scan. Repeat for several. Default: all scopes.",
)
@click.option(
    "--all-scopes",
    is_flag=True,
    default=False,
    help="List every scope's copy instead of only the highest-precedence one.",
)
@click.option("--follow-symlinks", is_flag=True, default=False, help="Follow symlinked skills.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format. Default: table.",
)
@click.pass_context
def discover_command(
    ctx: click.Context,
    platforms: tuple[Platform, ...],
    scopes: tuple[Scope, ...],
    all_scopes: bool,
    follow_symlinks: bool,
    output_format: str,
):
    """List the skills installed for each platform."""
    app: AppContext = ctx.obj
    options = app.discovery_options(
        scopes, collapse=not all_scopes, follow_symlinks=follow_symlinks
    )
    with cancel_on_sigint(CancelToken()) as token:
        result = discover(
            platforms or list(Platform), app.work_dir, options, resolver=app.resolver, cancel=token
        )

    if output_format == "json":
        click.echo(
            json.dumps(
                [
                    {
                        "name": s.name,
                        "platform": s.platform.value,
                        "scope": s.scope.value,
                        "path": str(s.path),
                        "description": s.description,
                        "tools": list(s.tools),
                    }
                    for s in result.skills
                ],
                indent=2,
            )
        )
    elif result.skills:
        console.print(_skill_table(result.skills))
        console.print(f"\n{len(result.skills)} skill(s)")
    else:
        console.print("No skills found.")

    _print_warnings(result.warnings)
    if any(w.kind in (ErrorKind.PARSE, ErrorKind.IO) for w in result.warnings):
        ctx.exit(int(ExitCode.PARTIAL))


@cli.command("compare")
@click.option(
    "--platform",
    "-p",
    "platforms",
    type=PLATFORM,
    multiple=True,
    help="Platform to include. Repeat for several. Default: all platforms.",
)
@click.option(
    "--name-threshold",
    type=click.FloatRange(0.0, 1.0),
    default=None,
    help="Minimum name similarity. Default: from config (0.7).",
)
@click.option(
    "--content-threshold",
    type=click.FloatRange(0.0, 1.0),
    default=None,
    help="Minimum content similarity. Default: from config (0.6).",
)
@click.option(
    "--threshold",
    type=click.FloatRange(0.0, 1.0),
    default=None,
    help="Single threshold applied to both scores.",
)
@click.option(
    "--algorithm",
    type=click.Choice(["levenshtein", "jaro-winkler", "combined"]),
    default=None,
    help="Name similarity algorithm. Default: from config (combined).",
)
@click.option("--show-diff", is_flag=True, default=False, help="Print the diff of each pair.")
@click.pass_obj
def compare_command(
    app: AppContext,
    platforms: tuple[Platform, ...],
    name_threshold: float | None,
    content_threshold: float | None,
    threshold: float | None,
    algorithm: str | None,
    show_diff: bool,
):
    """Find similar skills across platforms."""
    similarity = app.config.similarity
    if threshold is not None:
        thresholds = MatchThresholds.uniform(threshold)
    else:
        thresholds = MatchThresholds(
            name=name_threshold if name_threshold is not None else similarity.name_threshold,
            content=(
                content_threshold if content_threshold is not None else similarity.content_threshold
            ),
        )

    with cancel_on_sigint(CancelToken()) as token:
        result = discover(
            platforms or list(Platform),
            app.work_dir,
            app.discovery_options(),
            resolver=app.resolver,
            cancel=token,
        )
        matches = find_similar(
            result.skills,
            thresholds=thresholds,
            algorithm=algorithm or similarity.algorithm,
            cancel=token,
        )

    if not matches:
        console.print("No similar skills found.")
        return

    table = Table(show_edge=False, header_style="bold")
    table.add_column("Skill A")
    table.add_column("Skill B")
    table.add_column("Name", justify="right")
    table.add_column("Content", justify="right")
    table.add_column("Changes", justify="right")
    for match in matches:
        table.add_row(
            f"{escape(match.skill_a.name)} ({match.skill_a.platform.code})",
            f"{escape(match.skill_b.name)} ({match.skill_b.platform.code})",
            f"{match.name_score:.0%}",
            f"{match.content_score:.0%}",
            f"[green]+{match.lines_added}[/green] [red]-{match.lines_removed}[/red]",
        )
    console.print(table)

    if show_diff:
        for match in matches:
            console.print()
            console.print(
                format_hunks(
                    match.hunks,
                    f"{match.skill_a.platform.value}/{match.skill_a.name}",
                    f"{match.skill_b.platform.value}/{match.skill_b.name}",
                )
            )


def _find_named(app: AppContext, name: str, spec: PlatformSpec) -> Skill:
    result = discover(
        [spec.platform], app.work_dir, app.discovery_options(spec.scopes), resolver=app.resolver
    )
    for skill in result.skills:
        if skill.name == name:
            return skill
    raise SkillNotFoundError(f"Skill '{name}' not found for {spec}")


@cli.command("diff")
@click.argument("name")
@click.argument("source", type=PLATFORM_SPEC)
@click.argument("target", type=PLATFORM_SPEC)
@click.pass_obj
def diff_command(app: AppContext, name: str, source: PlatformSpec, target: PlatformSpec):
    """Show the differences of skill NAME between SOURCE and TARGET.

    SOURCE and TARGET are `platform[:scope,...]`, e.g. `claude-code:user`.
    """
    source_skill = _find_named(app, name, source)
    target_skill = _find_named(app, name, target)
    outcome = classify(source_skill, target_skill)
    conflict = outcome.conflict
    if conflict is None:
        console.print(f"[green]{escape(name)} is identical[/green]")
        return
    console.print(escape(conflict.summary()))
    if conflict.hunks:
        console.print(
            format_hunks(conflict.hunks, str(source_skill.path), str(target_skill.path))
        )
    else:
        console.print(
            f"description: {escape(repr(source_skill.description))} -> "
            f"{escape(repr(target_skill.description))}"
        )
        console.print(f"tools: {list(source_skill.tools)} -> {list(target_skill.tools)}")


def _prompt_resolutions(conflicts: Sequence[Any]) -> dict[str, Any]:
    resolutions: dict[str, Resolution] = {}
    for conflict in conflicts:
        console.rule(escape(conflict.skill_name))
        console.print(escape(conflict.summary()))
        if conflict.hunks:
            console.print(format_hunks(conflict.hunks, max_lines=40))
        choice = click.prompt(
            "Resolution",
            type=click.Choice([c.value for c in ResolutionChoice]),
            default=ResolutionChoice.USE_SOURCE.value,
        )
        resolutions[conflict.skill_name] = Resolution(ResolutionChoice(choice))
    return resolutions


@cli.command("sync")
@click.argument("source", type=PLATFORM_SPEC)
@click.argument("target", type=PLATFORM_SPEC)
@click.option(
    "--strategy",
    type=click.Choice(["overwrite", "skip", "newer", "merge", "three-way", "interactive"]),
    default=None,
    help="Conflict resolution strategy. Default: from config (overwrite).",
)
@click.option(
    "--skill",
    "-k",
    "skill_names",
    multiple=True,
    help="Only sync the named skill. Repeat for several. Default: all.",
)
@click.option(
    "--backup/--no-backup",
    default=None,
    help="Back up target files before overwriting them. Default: from config (yes).",
)
@click.option("--dry-run", is_flag=True, default=False, help="Show the plan without writing.")
@click.option(
    "--bidirectional",
    is_flag=True,
    default=False,
    help="Also report skills that only exist in the target.",
)
@click.option("--verify", is_flag=True, default=False, help="Verify written files by checksum.")
@click.option(
    "--abort-on-error", is_flag=True, default=False, help="Stop at the first failed entry."
)
@click.pass_context
def sync_command(
    ctx: click.Context,
    source: PlatformSpec,
    target: PlatformSpec,
    strategy: str | None,
    skill_names: tuple[str, ...],
    backup: bool | None,
    dry_run: bool,
    bidirectional: bool,
    verify: bool,
    abort_on_error: bool,
):
    """Synchronize skills from SOURCE to TARGET.

    SOURCE is `platform[:scope,...]`; TARGET is `platform[:repo|user]` (default: user).
    """
    app: AppContext = ctx.obj
    if source.platform is target.platform:
        raise click.BadParameter("source and target platforms must differ", param_hint="TARGET")
    try:
        target_scope = target.target_scope()
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="TARGET") from e

    chosen = Strategy.parse(strategy) if strategy else app.config.sync.default_strategy
    with_backup = app.config.sync.auto_backup if backup is None else backup

    with cancel_on_sigint(CancelToken()) as token:
        target_root = app.resolver.write_root(target.platform, target_scope, app.work_dir)
        source_skills = discover(
            [source.platform],
            app.work_dir,
            app.discovery_options(source.scopes),
            resolver=app.resolver,
            cancel=token,
        ).skills
        if skill_names:
            source_skills = [s for s in source_skills if s.name in skill_names]
            missing = set(skill_names) - {s.name for s in source_skills}
            if missing:
                raise SkillNotFoundError(
                    f"Skill(s) not found in {source}: {', '.join(sorted(missing))}"
                )
        target_skills = discover(
            [target.platform],
            app.work_dir,
            app.discovery_options([target_scope], collapse=False),
            resolver=app.resolver,
            cancel=token,
        ).skills

        resolutions = None
        if chosen is Strategy.INTERACTIVE:
            report = detect_conflicts(source_skills, target_skills, target.platform, target_scope)
            resolutions = _prompt_resolutions(report.conflicts)

        plan = plan_sync(
            source_skills,
            target_skills,
            target.platform,
            target_scope,
            target_root=target_root,
            strategy=chosen,
            resolutions=resolutions,
            backup=with_backup,
            bidirectional=bidirectional,
            cancel=token,
        )
        _print_plan(plan)
        if dry_run:
            console.print("[dim]Dry run, nothing written.[/dim]")
            return

        store = FileBackupStore(app.home) if with_backup else None
        result = SyncExecutor(store, abort_on_error=abort_on_error, verify=verify).apply(
            plan, cancel=token
        )

    for entry_result in result.failed:
        err_console.print(
            f"[red]failed[/red] {escape(entry_result.entry.skill_name)}: "
            f"{escape(str(entry_result.error))}"
        )
    console.print(result.summary())
    if result.exit_code != ExitCode.SUCCESS:
        ctx.exit(int(result.exit_code))


def _entry_details(entry: PlanEntry) -> str:
    if not entry.assets:
        return entry.reason
    assets = f"{len(entry.assets)} asset(s)"
    return f"{entry.reason}, {assets}" if entry.reason else assets


def _print_plan(plan: SyncPlan) -> None:
    if not plan.entries and not plan.missing:
        console.print("Nothing to sync.")
        return
    table = Table(show_edge=False, header_style="bold")
    table.add_column("Skill")
    table.add_column("Action")
    table.add_column("Backup")
    table.add_column("Details")
    for entry in plan.entries:
        table.add_row(
            escape(entry.skill_name),
            entry.action.value,
            "yes" if entry.backup_required else "",
            escape(_entry_details(entry)),
        )
    console.print(table)
    for conflict in plan.missing:
        console.print(f"[yellow]missing[/yellow] {escape(conflict.summary())}")


@cli.group("backup", cls=SkillsyncGroup)
def backup_group():
    """Manage backups taken before skills are overwritten."""


@backup_group.command("list")
@click.option("--platform", "-p", type=PLATFORM, default=None, help="Only this platform.")
@click.pass_obj
def backup_list_command(app: AppContext, platform: Platform | None):
    """List stored backups, oldest first."""
    records = app.backups().list(platform)
    if not records:
        console.print("No backups.")
        return
    table = Table(show_edge=False, header_style="bold")
    table.add_column("ID")
    table.add_column("Platform")
    table.add_column("Created")
    table.add_column("Size", justify="right")
    table.add_column("Source")
    for record in records:
        table.add_row(
            record.id,
            record.platform.code,
            f"{record.created_at:%Y-%m-%d %H:%M:%S}",
            str(record.size),
            escape(str(record.source_path)),
        )
    console.print(table)


@backup_group.command("verify")
@click.argument("backup_ids", nargs=-1)
@click.pass_context
def backup_verify_command(ctx: click.Context, backup_ids: tuple[str, ...]):
    """Check backup checksums. Verifies every backup when no ID is given."""
    controller = ctx.obj.backups()
    if backup_ids:
        results = {backup_id: controller.verify(backup_id) for backup_id in backup_ids}
    else:
        results = controller.verify_all()
    for backup_id, ok in results.items():
        status = "[green]ok[/green]" if ok else "[red]corrupted[/red]"
        console.print(f"{backup_id} {status}")
    if not all(results.values()):
        ctx.exit(int(ExitCode.PARTIAL))


@backup_group.command("restore")
@click.argument("backup_id")
@click.option(
    "--to",
    "target",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Restore to this file instead of the original location.",
)
@click.pass_obj
def backup_restore_command(app: AppContext, backup_id: str, target: Path | None):
    """Restore a backup."""
    destination = app.backups().restore(backup_id, target)
    console.print(f"Restored {backup_id} to {escape(str(destination))}")


@backup_group.command("delete")
@click.argument("backup_id")
@click.pass_obj
def backup_delete_command(app: AppContext, backup_id: str):
    """Delete a backup."""
    app.backups().delete(backup_id)
    console.print(f"Deleted {backup_id}")


@backup_group.command("prune")
@click.option(
    "--days",
    type=click.IntRange(min=0),
    default=None,
    help="Remove backups older than this many days. Default: from config (30).",
)
@click.option("--dry-run", is_flag=True, default=False, help="Only list what would be removed.")
@click.pass_obj
def backup_prune_command(app: AppContext, days: int | None, dry_run: bool):
    """Remove old backups."""
    retention = days if days is not None else app.config.backup.retention_days
    removed = app.backups().prune(retention, dry_run=dry_run)
    verb = "Would remove" if dry_run else "Removed"
    for record in removed:
        console.print(f"{verb} {record.id}")
    console.print(f"{verb} {len(removed)} backup(s)")


def _move_options(func: Any) -> Any:
    for decorator in reversed(
        [
            click.argument("name"),
            click.option(
                "--platform",
                "-p",
                type=PLATFORM,
                default=Platform.CLAUDE_CODE.value,
                help="Platform of the skill. Default: claude-code.",
            ),
            click.option("--force", is_flag=True, default=False, help="Overwrite the destination."),
            click.option("--rename", default=None, help="New name at the destination."),
            click.option(
                "--remove-source",
                is_flag=True,
                default=False,
                help="Delete the original after copying.",
            ),
            click.option(
                "--dry-run", is_flag=True, default=False, help="Show what would happen."
            ),
        ]
    ):
        func = decorator(func)
    return func


def _move(
    app: AppContext,
    name: str,
    platform: Platform,
    from_scope: Scope,
    *,
    force: bool,
    rename: str | None,
    remove_source: bool,
    dry_run: bool,
) -> None:
    skill = scope_ops.locate_skill(
        name, platform, from_scope, resolver=app.resolver, working_dir=app.work_dir
    )
    move = scope_ops.promote if from_scope is Scope.REPO else scope_ops.demote
    moved = move(
        skill,
        resolver=app.resolver,
        working_dir=app.work_dir,
        remove_source=remove_source,
        force=force,
        rename=rename,
        dry_run=dry_run,
    )
    prefix = "Would move" if dry_run else ("Moved" if remove_source else "Copied")
    console.print(
        f"{prefix} {escape(skill.name)} ({skill.scope.value}) -> "
        f"{escape(moved.name)} ({moved.scope.value}) at {escape(str(moved.path))}"
    )


@cli.command("promote")
@_move_options
@click.pass_obj
def promote_command(
    app: AppContext,
    name: str,
    platform: Platform,
    force: bool,
    rename: str | None,
    remove_source: bool,
    dry_run: bool,
):
    """Copy repository skill NAME to the user scope."""
    _move(
        app,
        name,
        platform,
        Scope.REPO,
        force=force,
        rename=rename,
        remove_source=remove_source,
        dry_run=dry_run,
    )


@cli.command("demote")
@_move_options
@click.pass_obj
def demote_command(
    app: AppContext,
    name: str,
    platform: Platform,
    force: bool,
    rename: str | None,
    remove_source: bool,
    dry_run: bool,
):
    """Copy user skill NAME into the current repository."""
    _move(
        app,
        name,
        platform,
        Scope.USER,
        force=force,
        rename=rename,
        remove_source=remove_source,
        dry_run=dry_run,
    )


@cli.command("delete")
@click.argument("name")
@click.option(
    "--platform",
    "-p",
    type=PLATFORM,
    default=Platform.CLAUDE_CODE.value,
    help="Platform of the skill. Default: claude-code.",
)
@click.option(
    "--scope",
    "-s",
    type=SCOPE,
    default=Scope.REPO.value,
    help="Scope to delete from (repo or user). Default: repo.",
)
@click.option(
    "--backup/--no-backup",
    default=None,
    help="Back up the skill file before deleting. Default: from config (yes).",
)
@click.option("--yes", "-y", is_flag=True, default=False, help="Do not ask for confirmation.")
@click.pass_obj
def delete_command(
    app: AppContext,
    name: str,
    platform: Platform,
    scope: Scope,
    backup: bool | None,
    yes: bool,
):
    """Delete skill NAME from a writable scope."""
    skill = scope_ops.locate_skill(
        name, platform, scope, resolver=app.resolver, working_dir=app.work_dir
    )
    if not yes:
        click.confirm(f"Delete {skill.name} at {skill.root_path}?", abort=True)
    with_backup = app.config.sync.auto_backup if backup is None else backup
    records = scope_ops.delete_skill(skill, app.backups() if with_backup else None)
    console.print(f"Deleted {escape(skill.name)}")
    for record in records:
        console.print(f"Backup: {record.id} {escape(str(record.source_path))}")


def main():
    cli()


if __name__ == "__main__":
    main()
