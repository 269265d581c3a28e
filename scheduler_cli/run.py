# -*- coding: utf-8 -*-
import typing as t
from datetime import datetime
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from scheduler_server.config import LOG_LEVEL, get_data_dir
from scheduler_server.coordinator import Coordinator, parse_color
from scheduler_server.errors import SchedulerError
from scheduler_server.logging_config import configure_logging
from scheduler_server.models import Appointment, TodoItem
from scheduler_server.todo_service import split_by_completion


console = Console()
err_console = Console(stderr=True)


def format_datetime_human(value: datetime) -> str:
    """Convert a datetime to human-readable format (MM/DD HH:MM)."""
    return value.strftime("%m/%d %H:%M")


def truncate_title(title: str, max_length: int = 45) -> str:
    """Truncate title to max_length characters, adding ellipsis if needed."""
    if len(title) <= max_length:
        return title
    return title[:max_length-3] + "..."


def create_events_table(coordinator: Coordinator, appointments: list[Appointment], title: str = "📅 Events") -> Table:
    """Create a table of appointments with their properties."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("", style="cyan", width=3)  # Just emoji
    table.add_column("Id", style="dim")
    table.add_column("Subject", style="white")
    table.add_column("Date/Time", style="yellow")
    table.add_column("Color", style="white")

    for appointment in appointments:
        props = coordinator.get_event_properties(appointment.id)
        marker = "✅" if props.is_completed else ("📅" if props.is_event else "📝")
        when = (
            f"{format_datetime_human(appointment.start)} → {format_datetime_human(appointment.end)}"
            if props.has_date else "no date"
        )
        hex_color = appointment.background.to_hex()
        table.add_row(
            marker,
            appointment.id,
            truncate_title(appointment.subject),
            when,
            Text(hex_color, style=f"#{hex_color[3:]}"),
        )

    return table


def create_todo_table(items: list[TodoItem], title: str) -> Table:
    """Create a table of todo items."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("", style="cyan", width=3)
    table.add_column("Id", style="dim")
    table.add_column("Subject", style="white")
    table.add_column("When", style="yellow")

    for item in items:
        table.add_row(
            "☑" if item.is_completed else "☐",
            item.appointment_id,
            truncate_title(item.subject),
            item.date_time_info,
        )

    return table


def _fail(message: str) -> t.NoReturn:
    err_console.print(f"[red]Error:[/red] {message}")
    raise SystemExit(1)


def _require_item(coordinator: Coordinator, appointment_id: str) -> Appointment:
    appointment = coordinator.get_event(appointment_id)
    if appointment is None:
        _fail(f"No item with id {appointment_id}.")
    return appointment


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory holding unified_events.json and todos.json (defaults to SCHEDULER_DATA_DIR).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, data_dir: t.Optional[str], verbose: bool) -> None:
    """Manage calendar events and todo items stored in local JSON files."""
    configure_logging("DEBUG" if verbose else LOG_LEVEL, console=err_console)
    if data_dir:
        Path(data_dir).mkdir(parents=True, exist_ok=True)
    try:
        ctx.obj = Coordinator.from_data_dir(data_dir or get_data_dir())
    except SchedulerError as e:
        _fail(str(e))


@main.command("add-event")
@click.argument("subject")
@click.option("--start", "-s", type=click.DateTime(), required=True, help="Start time, e.g. 2024-01-15T09:00:00.")
@click.option("--end", "-e", type=click.DateTime(), required=True, help="End time, after the start.")
@click.option("--color", "-c", default="", help="Palette name or hex color (random palette color if omitted).")
@click.option("--task", "is_task", is_flag=True, help="Create a dated task instead of an event.")
@click.option("--no-date", is_flag=True, help="Hide the item from the calendar.")
@click.pass_obj
def add_event(
        coordinator: Coordinator,
        subject: str,
        start: datetime,
        end: datetime,
        color: str,
        is_task: bool,
        no_date: bool,
) -> None:
    """Create an event (or a dated task) called SUBJECT."""
    try:
        appointment = coordinator.add_new_event(
            start, end, subject, parse_color(color), has_date=not no_date, is_event=not is_task
        )
    except SchedulerError as e:
        _fail(str(e))
    console.print(f"   ✓ Created {'task' if is_task else 'event'} [bold]{appointment.subject}[/bold] ({appointment.id})")


@main.command("add-task")
@click.argument("subject")
@click.pass_obj
def add_task(coordinator: Coordinator, subject: str) -> None:
    """Create a task without a date called SUBJECT."""
    try:
        appointment = coordinator.add_task_without_date(subject)
    except SchedulerError as e:
        _fail(str(e))
    console.print(f"   ✓ Created task [bold]{appointment.subject}[/bold] ({appointment.id})")


@main.command("list")
@click.option("--with-dates", is_flag=True, help="Only show items that appear on the calendar.")
@click.pass_obj
def list_events(coordinator: Coordinator, with_dates: bool) -> None:
    """List all events and tasks."""
    appointments = coordinator.events_with_dates if with_dates else coordinator.get_all_events()
    if not appointments:
        console.print("📅 No events found.")
        return
    console.print(create_events_table(coordinator, appointments))

    # Statistics panel
    statuses = coordinator.get_completion_status()
    stats_text = Text()
    stats_text.append("Total items: ", style="white")
    stats_text.append(f"{len(appointments)}", style="bold green")
    stats_text.append("\n")
    stats_text.append("Completed: ", style="white")
    stats_text.append(f"{sum(1 for a in appointments if statuses.get(a.id))}", style="bold green")
    console.print(Panel(stats_text, title="📊 Statistics", border_style="green"))


@main.command("day")
@click.argument("day", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.pass_obj
def list_day(coordinator: Coordinator, day: datetime) -> None:
    """List the items spanning DAY (YYYY-MM-DD)."""
    appointments = coordinator.get_events_by_date(day.date())
    if not appointments:
        console.print(f"📅 Nothing scheduled on {day.date().isoformat()}.")
        return
    console.print(create_events_table(coordinator, appointments, title=f"📅 {day.date().isoformat()}"))


@main.command("todos")
@click.option(
    "--status",
    type=click.Choice(["all", "active", "completed"]),
    default="all",
    show_default=True,
    help="Which tasks to show.",
)
@click.pass_obj
def list_todos(coordinator: Coordinator, status: str) -> None:
    """Show the todo list."""
    active, completed = split_by_completion(coordinator.get_all_todo_items())
    if status in ("all", "active"):
        console.print(create_todo_table(active, "📝 Active tasks"))
    if status in ("all", "completed"):
        console.print(create_todo_table(completed, "✅ Completed tasks"))


@main.command("complete")
@click.argument("appointment_id")
@click.option("--undo", is_flag=True, help="Mark the item as not completed.")
@click.pass_obj
def complete(coordinator: Coordinator, appointment_id: str, undo: bool) -> None:
    """Mark the item APPOINTMENT_ID as completed."""
    _require_item(coordinator, appointment_id)
    coordinator.update_completion_status(appointment_id, not undo)
    console.print(f"   ✓ {appointment_id} marked {'active' if undo else 'completed'}")


@main.command("toggle")
@click.argument("appointment_id")
@click.pass_obj
def toggle(coordinator: Coordinator, appointment_id: str) -> None:
    """Flip the completion flag of APPOINTMENT_ID."""
    _require_item(coordinator, appointment_id)
    completed = coordinator.toggle_completion(appointment_id)
    console.print(f"   ✓ {appointment_id} is now {'completed' if completed else 'active'}")


@main.command("remove")
@click.argument("appointment_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def remove(coordinator: Coordinator, appointment_id: str, yes: bool) -> None:
    """Delete the item APPOINTMENT_ID."""
    appointment = coordinator.get_event(appointment_id)
    if appointment is None:
        console.print(f"[yellow]No item with id {appointment_id}.[/yellow]")
        return
    if not yes and not click.confirm(f"Delete '{appointment.subject}'?"):
        return
    coordinator.remove_event(appointment_id)
    console.print(f"   ✓ Removed [bold]{appointment.subject}[/bold]")


if __name__ == "__main__":
    main()
