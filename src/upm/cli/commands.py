"""CLI commands implementation using click."""

import datetime as dt
import logging
import sys
from pathlib import Path
from typing import List, Optional, Type

import click
from rich.markup import escape

from ..core.config import Config
from ..core.project import Project, ProjectMeta
from ..core.stats import calculate_progress, calculate_time_breakdown, get_at_risk_tasks, estimate_completion_date
from ..core.store import EXPERIENCE_MULTIPLIERS, BULK_HOUR_MODES
from ..core.task import Task, TaskStatus, HourMode, normalize_phase
from ..core.timelog import filter_time_logs, calculate_time_log_stats, get_daily_totals
from ..core.validator import Validator
from ..csvio.exporter import (
    export_to_csv,
    export_tasks_to_csv,
    export_time_logs_to_csv,
    default_export_filename,
    default_time_log_filename,
)
from ..csvio.importer import import_csv, validate_csv, read_file_as_text
from ..utils.error_handling import cli_error_handler
from ..utils.exceptions import (
    UpmError,
    ConfigError,
    FileOperationError,
    TaskNotFoundError,
    SubtaskNotFoundError,
    TimeLogNotFoundError,
)
from ..utils.helpers import generate_id, parse_hours, short_id
from ..utils.logger import setup_logger
from .formatters import Formatter


def _load(ctx, project_name: str) -> Project:
    config: Config = ctx.obj['config']
    config.require_workspace()
    return Project.load(project_name, config)


def _save(ctx, project: Project) -> None:
    project.save(ctx.obj['config'])


def _resolve_ref(ids: List[str], ref: str, kind: str, error: Type[UpmError], positions: bool = True) -> str:
    if positions and ref.isdigit() and int(ref) < len(ids):
        return ids[int(ref)]
    if ref in ids:
        return ref

    matches = [i for i in ids if i.startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    if matches:
        raise error(f"{kind} reference '{ref}' is ambiguous ({len(matches)} matches)")
    raise error(f"{kind} '{ref}' not found")


def resolve_task_id(project: Project, ref: str) -> str:
    """
    Accept a full task id, a unique id prefix, or a list position.
    """
    return _resolve_ref([t.id for t in project.store.tasks], ref, 'Task', TaskNotFoundError)


def resolve_subtask_id(task: Task, ref: str) -> str:
    """Same rules as tasks; positions follow the subtask list's display order."""
    return _resolve_ref([st.id for st in task.sorted_subtasks()], ref, 'Subtask', SubtaskNotFoundError)


def resolve_time_log_id(project: Project, ref: str) -> str:
    """Full entry id or unique prefix; log listings are filtered, so no positions."""
    ids = [e.id for e in project.store.time_logs]
    return _resolve_ref(ids, ref, 'Time log entry', TimeLogNotFoundError, positions=False)


def _default_experience(config: Config) -> str:
    level = config.get_setting('default_experience_level')
    if level not in EXPERIENCE_MULTIPLIERS:
        raise ConfigError(f"Invalid default_experience_level '{level}' in {config.config_path}")
    return level


def _iso_date(value: Optional[dt.datetime]) -> Optional[str]:
    return value.date().isoformat() if value else None


DATE_TYPE = click.DateTime(formats=['%Y-%m-%d'])


# Global options
@click.group()
@click.version_option(version='1.0.0', prog_name='upm')
@click.option('-w', '--workspace', type=click.Path(file_okay=False), help='Workspace directory')
@click.option('-v', '--verbose', is_flag=True, help='Verbose output')
@click.option('-q', '--quiet', is_flag=True, help='Quiet mode')
@click.option('--no-color', is_flag=True, help='Disable colored output')
@click.pass_context
def cli(ctx, workspace, verbose, quiet, no_color):
    """upm - track projects, tasks and subtasks imported from spreadsheets."""
    ctx.ensure_object(dict)

    cfg = Config.from_args(workspace_dir=workspace, verbose=verbose, quiet=quiet, no_color=no_color)
    ctx.obj['config'] = cfg
    ctx.obj['formatter'] = Formatter(no_color=no_color)

    if verbose:
        log_level = logging.DEBUG
    elif quiet:
        log_level = logging.ERROR
    else:
        log_level = logging.WARNING

    ctx.obj['logger'] = setup_logger(
        level=log_level,
        log_dir=str(cfg.logs_path) if cfg.workspace_exists() else None,
        console=not quiet,
        color=not no_color,
    )


# =====================
# init command
# =====================
@cli.command()
@click.pass_context
def init(ctx):
    """Initialize workspace."""
    config: Config = ctx.obj['config']
    formatter: Formatter = ctx.obj['formatter']

    if config.workspace_exists():
        formatter.print_warning("Workspace already initialized")
        return

    try:
        config.init_workspace()
    except OSError as e:
        formatter.print_error(f"Failed to initialize workspace: {e}")
        sys.exit(1)

    formatter.print_success(f"Workspace initialized at {config.workspace_path}")
    formatter.print_info(f"Projects directory: {config.projects_path}")
    formatter.print_info(f"Config file: {config.config_path}")


# =====================
# project commands
# =====================
@cli.group()
@click.pass_context
def project(ctx):
    """Manage projects."""
    pass


@project.command('list')
@click.option('-s', '--status', type=str, help='Filter by status')
@click.pass_context
def project_list(ctx, status):
    """List all projects."""
    config: Config = ctx.obj['config']
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        config.require_workspace()
        projects = Project.list_all(config)
        if status:
            projects = [p for p in projects if p.meta.status == status]
        formatter.print_project_list(projects)


@project.command('create')
@click.option('--name', required=True, help='Project name')
@click.option('--description', help='Project description')
@click.option('--lead', help='Project lead')
@click.option('--type', 'project_type', default='custom', show_default=True, help='Project type')
@click.option('--experience', type=click.Choice(sorted(EXPERIENCE_MULTIPLIERS)),
              help='Team experience level [default: from config]')
@click.option('--start-date', help='Start date (YYYY-MM-DD)')
@click.option('--target-end-date', help='Target end date (YYYY-MM-DD)')
@click.option('--budget', type=float, help='Budget')
@click.pass_context
def project_create(ctx, name, description, lead, project_type, experience, start_date, target_end_date, budget):
    """Create a new, empty project."""
    config: Config = ctx.obj['config']
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        config.require_workspace()
        if config.project_exists(name):
            formatter.print_error(f"Project '{name}' already exists")
            sys.exit(1)

        new_project = Project(ProjectMeta(
            name=name,
            description=description,
            lead=lead,
            project_type=project_type,
            experience_level=experience or _default_experience(config),
            start_date=start_date,
            target_end_date=target_end_date,
            budget=budget,
        ))
        new_project.save(config)
        formatter.print_success(f"Project '{name}' created")


@project.command('show')
@click.argument('project_name')
@click.option('--tasks', is_flag=True, help='Show tasks')
@click.pass_context
def project_show(ctx, project_name, tasks):
    """Show project details."""
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        formatter.print_project_details(p)
        if tasks:
            formatter.print_task_list(p.store.tasks, p.store.task_states)


@project.command('delete')
@click.argument('project_name')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@click.pass_context
def project_delete(ctx, project_name, yes):
    """Delete a project."""
    config: Config = ctx.obj['config']
    formatter: Formatter = ctx.obj['formatter']

    if not yes and not click.confirm(f"Delete project '{project_name}'?"):
        formatter.print_info("Deletion cancelled")
        return

    with cli_error_handler():
        config.require_workspace()
        Project.delete(project_name, config)
        formatter.print_success(f"Project '{project_name}' deleted")


@project.command('experience')
@click.argument('project_name')
@click.argument('level', type=click.Choice(sorted(EXPERIENCE_MULTIPLIERS)))
@click.pass_context
def project_experience(ctx, project_name, level):
    """Rescale task estimates for a team experience level."""
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        p.store.apply_experience_level(level)
        p.meta.experience_level = level
        _save(ctx, p)
        formatter.print_success(f"Estimates rescaled for {level} (x{EXPERIENCE_MULTIPLIERS[level]})")


@project.command('export-json')
@click.argument('project_name')
@click.option('-o', '--output', type=click.Path(dir_okay=False), help='Output file')
@click.pass_context
def project_export_json(ctx, project_name, output):
    """Export a whole project as JSON."""
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        target = Path(output or f"{'_'.join(p.name.split())}.json")
        p.export_json(target)
        formatter.print_success(f"Project exported to {target}")


@project.command('import-json')
@click.argument('json_file', type=click.Path(dir_okay=False))
@click.option('--name', help='Save under a different project name')
@click.pass_context
def project_import_json(ctx, json_file, name):
    """Create a project from a JSON export."""
    config: Config = ctx.obj['config']
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        config.require_workspace()
        p = Project.from_json(read_file_as_text(json_file))
        if name:
            p.meta.name = name
        if config.project_exists(p.name):
            formatter.print_error(f"Project '{p.name}' already exists")
            sys.exit(1)
        p.save(config)
        formatter.print_success(f"Project '{p.name}' imported with {len(p.store)} task(s)")


# =====================
# import / export
# =====================
@cli.command('import')
@click.argument('csv_file', type=click.Path(dir_okay=False))
@click.option('-p', '--project', 'project_name', help='Target project (created if missing)')
@click.option('--validate-only', is_flag=True, help='Only check the file structure')
@click.option('--extended-aliases', is_flag=True, help='Also accept "Hours"/"Estimated" headers')
@click.pass_context
def import_cmd(ctx, csv_file, project_name, validate_only, extended_aliases):
    """Import tasks from a CSV or tab-separated file."""
    config: Config = ctx.obj['config']
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        text = read_file_as_text(csv_file)

        check = validate_csv(text)
        if validate_only or not check.is_valid:
            formatter.print_validation_result(check)
            if not check.is_valid:
                sys.exit(1)
            return

        config.require_workspace()
        result = import_csv(text, extended_aliases=extended_aliases)

        name = project_name or result.meta.name or Path(csv_file).stem
        if config.project_exists(name):
            p = Project.load(name, config)
            p.meta = p.meta.merged_with(ProjectMeta(
                **{k: v for k, v in vars(result.meta).items() if k not in ('id', 'name')}
            ))
        else:
            defaults = ProjectMeta(experience_level=_default_experience(config))
            p = Project(defaults.merged_with(result.meta).merged_with(ProjectMeta(name=name)))

        p.store.add_tasks(result.tasks, result.task_states)
        p.save(config)

        formatter.print_import_result(result)
        formatter.print_info(f"Project '{p.name}' now has {len(p.store)} task(s)")


@cli.command('export')
@click.argument('project_name')
@click.option('--tasks-only', is_flag=True, help='Plain task table instead of the full report')
@click.option('-o', '--output', type=click.Path(dir_okay=False), help='Output file ("-" for stdout)')
@click.pass_context
def export_cmd(ctx, project_name, tasks_only, output):
    """Export a project to CSV."""
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        tasks, states = p.store.tasks, p.store.task_states
        if tasks_only:
            content = export_tasks_to_csv(tasks, states)
        else:
            content = export_to_csv(tasks, states, p.meta, calculate_progress(tasks, states))

        if output == '-':
            click.echo(content, nl=False)
            return

        target = Path(output or default_export_filename(p.name, tasks_only=tasks_only))
        try:
            target.write_text(content, encoding='utf-8')
        except OSError as e:
            raise FileOperationError(f"Failed to write {target}: {e}") from e
        formatter.print_success(f"Exported {len(tasks)} task(s) to {target}")


# =====================
# task commands
# =====================
@cli.group()
@click.pass_context
def task(ctx):
    """Manage tasks."""
    pass


@task.command('list')
@click.argument('project_name')
@click.option('-s', '--status', type=str, help='Filter by status')
@click.option('--phase', type=str, help='Filter by phase')
@click.option('--critical', is_flag=True, help='Only critical-path tasks')
@click.pass_context
def task_list(ctx, project_name, status, phase, critical):
    """List tasks in a project."""
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        store = p.store
        tasks = store.tasks

        if status:
            wanted = TaskStatus.parse(status)
            tasks = [t for t in tasks if store.get_task_state(t.id).status == wanted]
        if phase:
            tasks = [t for t in tasks if t.phase == normalize_phase(phase)]
        if critical:
            tasks = [t for t in tasks if t.critical_path]

        hours = {t.id: store.calculate_task_hours(t.id) for t in tasks if t.subtask_hour_mode == HourMode.AUTO}
        formatter.print_task_list(tasks, store.task_states, hours)


@task.command('add')
@click.argument('project_name')
@click.argument('name')
@click.option('--phase', default='Imported', show_default=True, help='Phase title')
@click.option('--category', help='Category [default: from config]')
@click.option('--hours', type=float, default=0.0, help='Estimated hours')
@click.option('--notes', help='Notes')
@click.option('--critical', is_flag=True, help='Mark as critical path')
@click.option('--auto-hours', is_flag=True, help='Derive hours from subtasks')
@click.pass_context
def task_add(ctx, project_name, name, phase, category, hours, notes, critical, auto_hours):
    """Add a task to a project."""
    config: Config = ctx.obj['config']
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        category = category or config.get_setting('default_category') or 'Other'
        new_task = Task(
            id=generate_id('task'),
            name=name,
            phase=normalize_phase(phase),
            phase_title=phase,
            category=category,
            base_est_hours=hours,
            adjusted_est_hours=hours,
            notes=notes,
            critical_path=critical,
            subtask_hour_mode=HourMode.AUTO if auto_hours else HourMode.MANUAL,
        )
        p.store.add_task(new_task)
        _save(ctx, p)
        formatter.print_success(f"Task '{name}' added ({short_id(new_task.id)})")


@task.command('delete')
@click.argument('project_name')
@click.argument('task_ref')
@click.pass_context
def task_delete(ctx, project_name, task_ref):
    """Delete a task and its tracked progress."""
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        task_id = resolve_task_id(p, task_ref)
        name = p.store.get_task(task_id).name
        p.store.delete_task(task_id)
        _save(ctx, p)
        formatter.print_success(f"Task '{name}' deleted")


@task.command('status')
@click.argument('project_name')
@click.argument('task_ref')
@click.argument('status', type=click.Choice([s.value for s in TaskStatus]))
@click.pass_context
def task_status(ctx, project_name, task_ref, status):
    """Set a task's progress status."""
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        task_id = resolve_task_id(p, task_ref)
        p.store.update_task_state(task_id, 'status', TaskStatus(status))
        _save(ctx, p)
        formatter.print_success(f"Task '{p.store.get_task(task_id).name}' is now {status}")


@task.command('log')
@click.argument('project_name')
@click.argument('task_ref')
@click.argument('hours', type=float)
@click.option('--date', type=DATE_TYPE, help='Day the work was done [default: today]')
@click.option('--set', 'replace_total', is_flag=True,
              help='Replace the total instead of adding to it (no log entry)')
@click.option('--note', help='Note for the entry, also appended to the task notes')
@click.pass_context
def task_log(ctx, project_name, task_ref, hours, date, replace_total, note):
    """Log time spent on a task."""
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        task_id = resolve_task_id(p, task_ref)
        notes = p.store.get_task_state(task_id).notes

        try:
            if replace_total:
                p.store.update_task_state(task_id, 'actual_hours', f"{hours:g}")
            else:
                entry = p.store.log_time(task_id, hours, date=_iso_date(date), notes=note or '')
        except ValueError as e:
            formatter.print_error(str(e))
            sys.exit(1)

        if note:
            p.store.update_task_state(task_id, 'notes', f"{notes}\n{note}" if notes else note)

        _save(ctx, p)
        total = p.store.get_task_state(task_id).actual_hours or '0'
        if replace_total:
            formatter.print_success(f"Total set to {total}h")
        else:
            formatter.print_success(f"Logged {hours:g}h on {entry.date}, total {total}h")


@task.command('move')
@click.argument('project_name')
@click.argument('task_ref')
@click.argument('position', type=int)
@click.pass_context
def task_move(ctx, project_name, task_ref, position):
    """Move a task to a new list position."""
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        task_id = resolve_task_id(p, task_ref)
        p.store.move_task(task_id, position)
        _save(ctx, p)
        formatter.print_success(f"Task moved to position {position}")


@task.command('phase')
@click.argument('project_name')
@click.argument('task_ref')
@click.argument('phase_title')
@click.pass_context
def task_phase(ctx, project_name, task_ref, phase_title):
    """Move a task to another phase."""
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        task_id = resolve_task_id(p, task_ref)
        p.store.move_task_to_phase(task_id, normalize_phase(phase_title), phase_title)
        _save(ctx, p)
        formatter.print_success(f"Task moved to phase '{phase_title}'")


# =====================
# subtask commands
# =====================
@cli.group()
@click.pass_context
def subtask(ctx):
    """Manage subtasks."""
    pass


@subtask.command('list')
@click.argument('project_name')
@click.argument('task_ref')
@click.pass_context
def subtask_list(ctx, project_name, task_ref):
    """List a task's subtasks."""
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        task_id = resolve_task_id(p, task_ref)
        formatter.print_subtask_list(p.store.get_task(task_id), p.store.get_subtask_progress(task_id))


@subtask.command('add')
@click.argument('project_name')
@click.argument('task_ref')
@click.argument('name')
@click.option('--hours', type=float, help='Estimated hours')
@click.pass_context
def subtask_add(ctx, project_name, task_ref, name, hours):
    """Add a subtask."""
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        task_id = resolve_task_id(p, task_ref)
        st = p.store.add_subtask(task_id, name, est_hours=hours)
        _save(ctx, p)
        formatter.print_success(f"Subtask '{name}' added ({short_id(st.id)})")


@subtask.command('bulk')
@click.argument('project_name')
@click.argument('task_ref')
@click.argument('lines_file', type=click.File('r', encoding='utf-8'))
@click.option('--hour-mode', type=click.Choice(BULK_HOUR_MODES), default='divide', show_default=True,
              help='How to assign estimated hours')
@click.option('--hours', type=float, help='Hours per subtask (custom mode)')
@click.pass_context
def subtask_bulk(ctx, project_name, task_ref, lines_file, hour_mode, hours):
    """Add one subtask per line of LINES_FILE ("-" for stdin)."""
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        task_id = resolve_task_id(p, task_ref)
        try:
            added = p.store.bulk_add_subtasks(task_id, lines_file.read().splitlines(), hour_mode, hours)
        except ValueError as e:
            formatter.print_error(str(e))
            sys.exit(1)

        if not added:
            formatter.print_warning("No subtasks found in input")
            return
        _save(ctx, p)
        formatter.print_success(f"Added {len(added)} subtask(s)")


@subtask.command('toggle')
@click.argument('project_name')
@click.argument('task_ref')
@click.argument('subtask_ref')
@click.pass_context
def subtask_toggle(ctx, project_name, task_ref, subtask_ref):
    """Flip a subtask between pending and completed."""
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        task_id = resolve_task_id(p, task_ref)
        subtask_id = resolve_subtask_id(p.store.get_task(task_id), subtask_ref)
        st = p.store.toggle_subtask_status(task_id, subtask_id)
        _save(ctx, p)
        formatter.print_success(f"Subtask '{st.name}' is now {st.status}")


@subtask.command('log')
@click.argument('project_name')
@click.argument('task_ref')
@click.argument('subtask_ref')
@click.argument('hours', type=float)
@click.option('--date', type=DATE_TYPE, help='Day the work was done [default: today]')
@click.option('--note', help='Note for the entry')
@click.pass_context
def subtask_log(ctx, project_name, task_ref, subtask_ref, hours, date, note):
    """Log time spent on a subtask."""
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        task_id = resolve_task_id(p, task_ref)
        subtask_id = resolve_subtask_id(p.store.get_task(task_id), subtask_ref)
        try:
            entry = p.store.log_time(task_id, hours, date=_iso_date(date), notes=note or '',
                                     subtask_id=subtask_id)
        except ValueError as e:
            formatter.print_error(str(e))
            sys.exit(1)

        _save(ctx, p)
        formatter.print_success(f"Logged {hours:g}h on {entry.date} for '{entry.subtask_name}'")


@subtask.command('delete')
@click.argument('project_name')
@click.argument('task_ref')
@click.argument('subtask_ref')
@click.pass_context
def subtask_delete(ctx, project_name, task_ref, subtask_ref):
    """Delete a subtask."""
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        task_id = resolve_task_id(p, task_ref)
        subtask_id = resolve_subtask_id(p.store.get_task(task_id), subtask_ref)
        p.store.delete_subtask(task_id, subtask_id)
        _save(ctx, p)
        formatter.print_success("Subtask deleted")


# =====================
# time log commands
# =====================
@cli.group()
@click.pass_context
def timelog(ctx):
    """Review logged time."""
    pass


@timelog.command('list')
@click.argument('project_name')
@click.option('--task', 'task_ref', help='Only entries for this task')
@click.option('--from', 'start', type=DATE_TYPE, help='First day (inclusive)')
@click.option('--to', 'end', type=DATE_TYPE, help='Last day (inclusive)')
@click.option('--search', help='Match task, subtask or notes text')
@click.pass_context
def timelog_list(ctx, project_name, task_ref, start, end, search):
    """List time-log entries with totals per day."""
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        task_ids = [resolve_task_id(p, task_ref)] if task_ref else None
        entries = filter_time_logs(
            p.store.time_logs,
            task_ids=task_ids,
            start_date=_iso_date(start),
            end_date=_iso_date(end),
            query=search,
        )
        formatter.print_time_logs(entries, calculate_time_log_stats(entries), get_daily_totals(entries))


@timelog.command('delete')
@click.argument('project_name')
@click.argument('log_ref')
@click.pass_context
def timelog_delete(ctx, project_name, log_ref):
    """Delete an entry and take its hours back off the actual total."""
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        log_id = resolve_time_log_id(p, log_ref)
        entry = p.store.get_time_log(log_id)
        p.store.delete_time_log(log_id)
        _save(ctx, p)
        formatter.print_success(f"Removed {entry.hours:g}h logged on {entry.date}")


@timelog.command('export')
@click.argument('project_name')
@click.option('-o', '--output', type=click.Path(dir_okay=False), help='Output file ("-" for stdout)')
@click.pass_context
def timelog_export(ctx, project_name, output):
    """Export time-log entries to CSV, newest first."""
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        entries = filter_time_logs(p.store.time_logs)
        content = export_time_logs_to_csv(entries)

        if output == '-':
            click.echo(content, nl=False)
            return

        target = Path(output or default_time_log_filename(p.name))
        try:
            target.write_text(content, encoding='utf-8')
        except OSError as e:
            raise FileOperationError(f"Failed to write {target}: {e}") from e
        formatter.print_success(f"Exported {len(entries)} entries to {target}")


# =====================
# stats / validate
# =====================
@cli.command()
@click.argument('project_name')
@click.pass_context
def stats(ctx, project_name):
    """Show progress and time statistics."""
    config: Config = ctx.obj['config']
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        tasks, states = p.store.tasks, p.store.task_states
        formatter.print_stats(
            calculate_progress(tasks, states),
            calculate_time_breakdown(tasks, states),
            get_at_risk_tasks(tasks, states),
        )

        hours_per_day = parse_hours(config.get_setting('hours_per_day'), default=8) or 8
        finish = estimate_completion_date(tasks, states, hours_per_day=hours_per_day)
        if finish:
            formatter.print_info(f"Estimated completion: {finish.isoformat()}")


@cli.command()
@click.argument('project_name')
@click.pass_context
def validate(ctx, project_name):
    """Validate a project's tasks."""
    formatter: Formatter = ctx.obj['formatter']

    with cli_error_handler():
        p = _load(ctx, project_name)
        formatter.print_header(f"Validating project: {escape(p.name)}")
        result = Validator.validate_project(p)
        formatter.print_validation_result(result)
        if not result.is_valid:
            sys.exit(1)


if __name__ == '__main__':
    cli()
