"""Output formatters for CLI with rich formatting."""

from typing import List, Optional, Mapping, Tuple

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..core.project import Project
from ..core.stats import Stats, TaskHours
from ..core.store import SubtaskProgress
from ..core.task import Task, TaskState, Subtask
from ..core.timelog import TimeLogEntry, TimeLogStats
from ..core.validator import ValidationResult
from ..csvio.importer import ImportResult
from ..utils.helpers import short_id, truncate_text


STATUS_COLORS = {
    'pending': 'yellow',
    'in-progress': 'magenta',
    'complete': 'green',
    'completed': 'green',
    'blocked': 'red',
    'on-hold': 'dim',
    'active': 'cyan',
}

STATUS_ICONS = {
    'pending': '⏳',
    'in-progress': '🔄',
    'complete': '✅',
    'completed': '✅',
    'blocked': '🚫',
    'on-hold': '⏸',
}


class Formatter:
    """Output formatter for CLI."""

    def __init__(self, no_color: bool = False, console: Optional[Console] = None):
        self.no_color = no_color
        self.console = console or Console(no_color=no_color, highlight=not no_color)

    def print(self, text: str, style: Optional[str] = None) -> None:
        self.console.print(text, style=style)

    def print_success(self, message: str) -> None:
        self.console.print(f"✓ {message}", style="bold green")

    def print_error(self, message: str) -> None:
        self.console.print(f"✗ {message}", style="bold red")

    def print_warning(self, message: str) -> None:
        self.console.print(f"⚠ {message}", style="bold yellow")

    def print_info(self, message: str) -> None:
        self.console.print(f"ℹ {message}", style="blue")

    def print_header(self, title: str) -> None:
        self.console.print(f"\n[bold cyan]{title}[/bold cyan]")
        self.console.print("─" * len(title))

    def format_status(self, status: str) -> str:
        """Format status with color."""
        color = STATUS_COLORS.get(status, 'white')
        icon = STATUS_ICONS.get(status, '•')
        return f"[{color}]{icon} {status.upper()}[/{color}]"

    def print_project_list(self, projects: List[Project]) -> None:
        """Print list of projects in table format."""
        if not projects:
            self.print_info("No projects found")
            return

        table = Table(title="Projects", box=box.ROUNDED, show_lines=False)
        table.add_column("Name", style="cyan", no_wrap=True)
        table.add_column("Status", justify="center")
        table.add_column("Tasks", justify="right")
        table.add_column("Lead", style="dim")
        table.add_column("Description", style="dim")

        for project in projects:
            table.add_row(
                escape(project.name),
                self.format_status(project.meta.status or 'active'),
                str(len(project.store)),
                escape(project.meta.lead or "-"),
                escape(truncate_text(project.meta.description or '', 50)),
            )

        self.console.print(table)

    def print_project_details(self, project: Project) -> None:
        """Print detailed project information."""
        meta = project.meta
        self.console.print(Panel(
            f"[bold cyan]{escape(project.name)}[/bold cyan]\n"
            f"[dim]{escape(meta.description or '')}[/dim]",
            title="Project Details",
            border_style="cyan"
        ))

        table = Table(box=box.SIMPLE, show_header=False)
        table.add_column("Field", style="bold")
        table.add_column("Value")

        table.add_row("ID", meta.id or "N/A")
        table.add_row("Status", self.format_status(meta.status or 'active'))
        table.add_row("Type", meta.project_type or "N/A")
        table.add_row("Experience", meta.experience_level or "N/A")
        table.add_row("Lead", meta.lead or "Not specified")
        if meta.start_date:
            table.add_row("Start", meta.start_date)
        if meta.target_end_date:
            table.add_row("Target end", meta.target_end_date)
        if meta.budget is not None:
            table.add_row("Budget", f"${meta.budget:,.2f}")
        if meta.timeline:
            table.add_row("Timeline", meta.timeline)
        table.add_row("Tasks", str(len(project.store)))
        table.add_row("Created", meta.created_at or "N/A")

        self.console.print(table)

    def print_task_list(
        self,
        tasks: List[Task],
        task_states: Mapping[str, TaskState],
        hours: Optional[Mapping[str, float]] = None
    ) -> None:
        """Print tasks with their tracked state."""
        if not tasks:
            self.print_info("No tasks found")
            return

        table = Table(title="Tasks", box=box.ROUNDED, show_lines=False)
        table.add_column("#", justify="right", style="dim")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Task", style="white", min_width=12)
        table.add_column("Phase")
        table.add_column("Category", style="dim")
        table.add_column("Status", justify="center")
        table.add_column("Est", justify="right")
        table.add_column("Actual", justify="right")
        table.add_column("Subtasks", justify="center")

        for index, task in enumerate(tasks):
            state = task_states.get(task.id) or TaskState()
            est = hours[task.id] if hours and task.id in hours else state.est_hours
            done = sum(1 for st in task.subtasks if st.is_completed)
            name = f"★ {task.name}" if task.critical_path else task.name
            table.add_row(
                str(index),
                short_id(task.id),
                escape(truncate_text(name, 40)),
                task.phase_title,
                task.category,
                self.format_status(str(state.status)),
                f"{est:g}",
                state.actual_hours or "-",
                f"{done}/{len(task.subtasks)}" if task.subtasks else "-",
            )

        self.console.print(table)

    def print_subtask_list(self, task: Task, progress: SubtaskProgress) -> None:
        """Print a task's subtasks in display order."""
        self.print_header(f"{escape(task.name)} ({progress.completed}/{progress.total}, {progress.percent}%)")
        subtasks: List[Subtask] = task.sorted_subtasks()
        if not subtasks:
            self.print_info("No subtasks")
            return

        table = Table(box=box.SIMPLE)
        table.add_column("#", justify="right", style="dim")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Subtask", min_width=12)
        table.add_column("Status", justify="center")
        table.add_column("Est", justify="right")
        table.add_column("Actual", justify="right")
        table.add_column("Completed", style="dim")

        for index, st in enumerate(subtasks):
            table.add_row(
                str(index),
                short_id(st.id),
                escape(truncate_text(st.name, 50)),
                self.format_status(str(st.status)),
                f"{st.est_hours:g}" if st.est_hours is not None else "-",
                f"{st.actual_hours:g}" if st.actual_hours else "-",
                (st.completed_date or "")[:10],
            )

        self.console.print(table)

    def print_time_logs(
        self,
        entries: List[TimeLogEntry],
        stats: TimeLogStats,
        daily: List[Tuple[str, float]]
    ) -> None:
        """Print time-log entries, newest first, then totals per day."""
        if not entries:
            self.print_info("No time logged")
            return

        table = Table(title="Time log", box=box.ROUNDED)
        table.add_column("Date", no_wrap=True)
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Task", min_width=12)
        table.add_column("Hours", justify="right")
        table.add_column("Notes", style="dim")

        for entry in entries:
            target = entry.task_name
            if entry.subtask_name:
                target = f"{target} › {entry.subtask_name}"
            table.add_row(
                entry.date,
                short_id(entry.id),
                escape(truncate_text(target, 40)),
                f"{entry.hours:g}",
                escape(truncate_text(entry.notes, 30)),
            )
        self.console.print(table)

        self.print_header("Hours per day")
        per_day = Table(box=box.SIMPLE, show_header=False)
        per_day.add_column("Date")
        per_day.add_column("Hours", justify="right")
        for date, hours in daily:
            per_day.add_row(date, f"{hours:g}")
        self.console.print(per_day)
        self.print_info(f"{stats.total_hours:g}h across {stats.total_entries} entries")

    def print_stats(self, stats: Stats, breakdown: List[TaskHours], at_risk: List[Task]) -> None:
        """Print progress summary and hours."""
        self.print_header("Summary")
        table = Table(box=box.SIMPLE, show_header=False)
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right")
        table.add_row("Total tasks", str(stats.total))
        table.add_row("Completed", str(stats.completed))
        table.add_row("In progress", str(stats.in_progress))
        table.add_row("Blocked", str(stats.blocked))
        table.add_row("Pending", str(stats.pending))
        table.add_row("Estimated hours", f"{stats.total_est:.1f}")
        table.add_row("Actual hours", f"{stats.total_actual:.1f}")
        table.add_row("Variance", f"{stats.variance:+.1f}")
        table.add_row("Over estimate", str(stats.overruns))
        self.console.print(table)
        self.print_progress_bar(stats.completed, stats.total, "Progress")

        if breakdown:
            self.print_header("Time by task")
            hours = Table(box=box.SIMPLE)
            hours.add_column("Task")
            hours.add_column("Est", justify="right")
            hours.add_column("Actual", justify="right")
            hours.add_column("Variance", justify="right")
            for row in breakdown:
                style = "red" if row.variance > 0 else None
                hours.add_row(
                    escape(truncate_text(row.task.name, 40)),
                    f"{row.est:.1f}",
                    f"{row.actual:.1f}",
                    f"{row.variance:+.1f}",
                    style=style,
                )
            self.console.print(hours)

        if at_risk:
            self.print_warning(f"{len(at_risk)} task(s) over estimate: "
                               + ", ".join(t.name for t in at_risk))

    def print_import_result(self, result: ImportResult) -> None:
        """Print what an import produced and what it skipped."""
        self.print_success(f"Imported {result.imported_count} task(s)")
        for row in result.skipped:
            self.print_warning(f"Line {row.line_number} skipped: {row.reason}")

    def print_validation_result(self, result: ValidationResult) -> None:
        """Print validation result."""
        if result.is_valid:
            self.print_success("Validation passed!")
        else:
            self.print_error(f"Validation failed with {len(result.errors)} error(s)")

        for error in result.errors:
            self.print_error(error.message)

        for warning in result.warnings:
            self.print_warning(warning.message)

    def print_progress_bar(self, current: int, total: int, description: str = "") -> None:
        """Print progress bar."""
        if total == 0:
            return

        percentage = (current / total) * 100
        bar_length = 30
        filled = int(bar_length * current / total)
        bar = "█" * filled + "░" * (bar_length - filled)
        self.console.print(
            f"{description} [{bar}] {current}/{total} ({percentage:.1f}%)",
            style="cyan",
            markup=False,
        )
