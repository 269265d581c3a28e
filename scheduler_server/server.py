# -*- coding: utf-8 -*-
import typing as t
from datetime import date, datetime

from fastmcp import FastMCP

from scheduler_server.config import LOG_LEVEL, get_data_dir
from scheduler_server.coordinator import Coordinator, parse_color, parse_datetime
from scheduler_server.errors import ValidationError
from scheduler_server.models import Appointment
from scheduler_server.logging_config import configure_logging
from scheduler_server.todo_service import split_by_completion
from services.shared.models import AppointmentModel, TodoItemModel, TodoStatus

mcp = FastMCP("SchedulerServer")

_coordinator: t.Optional[Coordinator] = None


def get_coordinator() -> Coordinator:
    """Return the process-wide coordinator, opening the data directory on first use."""
    global _coordinator
    if _coordinator is None:
        _coordinator = Coordinator.from_data_dir(get_data_dir())
    return _coordinator


def set_coordinator(coordinator: t.Optional[Coordinator]) -> None:
    """Replace the process-wide coordinator (None reopens the data directory lazily)."""
    global _coordinator
    _coordinator = coordinator


def _to_model(appointment: Appointment) -> AppointmentModel:
    coordinator = get_coordinator()
    return AppointmentModel.from_appointment(appointment, coordinator.get_event_properties(appointment.id))


@mcp.tool()
def create_event(
        subject: str,
        start: str,
        end: str,
        color: str = "",
        is_completed: bool = False,
        has_date: bool = True,
        is_event: bool = True,
) -> AppointmentModel:
    """Creates a calendar event or a dated task.

    :param subject: Title of the event.
    :param start: Start time in ISO format.
    :param end: End time in ISO format, after the start time.
    :param color: Palette name (blue, green, orange, purple, pink, teal) or hex color (optional).
    :param is_completed: Whether the item starts out completed.
    :param has_date: Whether the item is shown on the calendar.
    :param is_event: True for a calendar event, False for a task.
    :return: The created appointment.
    """
    appointment = get_coordinator().add_new_event(
        parse_datetime(start),
        parse_datetime(end),
        subject,
        parse_color(color),
        is_completed=is_completed,
        has_date=has_date,
        is_event=is_event,
    )
    return _to_model(appointment)


@mcp.tool()
def create_task(subject: str) -> AppointmentModel:
    """Creates a task without a date.

    :param subject: Title of the task.
    :return: The created appointment.
    """
    return _to_model(get_coordinator().add_task_without_date(subject))


@mcp.tool()
def update_event(appointment_id: str, subject: str, start: str, end: str, color: str = "") -> bool:
    """Changes the subject, times and optionally the color of an appointment.

    :param appointment_id: Id of the appointment.
    :param subject: New title.
    :param start: New start time in ISO format.
    :param end: New end time in ISO format.
    :param color: New color; the current one is kept if empty.
    :return: False if no appointment has that id.
    """
    return get_coordinator().update_event(
        appointment_id, parse_datetime(start), parse_datetime(end), subject, parse_color(color)
    )


@mcp.tool()
def update_event_properties(
        appointment_id: str,
        is_completed: bool,
        has_date: bool,
        is_event: bool,
) -> dict[str, bool]:
    """Replaces the completion, date and kind flags of an appointment.

    Setting is_event to False moves the appointment into the todo list.

    :return: The stored flags.
    """
    coordinator = get_coordinator()
    coordinator.update_event_properties(appointment_id, is_completed, has_date, is_event)
    properties = coordinator.get_event_properties(appointment_id)
    return {
        "is_completed": properties.is_completed,
        "has_date": properties.has_date,
        "is_event": properties.is_event,
    }


@mcp.tool()
def set_completion(appointment_id: str, is_completed: bool) -> bool:
    """Marks an appointment or task as completed or not.

    :return: The stored completion flag.
    """
    get_coordinator().update_completion_status(appointment_id, is_completed)
    return is_completed


@mcp.tool()
def toggle_completion(appointment_id: str) -> bool:
    """Flips the completion flag of an appointment or task.

    :return: The new completion flag.
    """
    return get_coordinator().toggle_completion(appointment_id)


@mcp.tool()
def remove_event(appointment_id: str) -> bool:
    """Deletes an appointment together with its todo entry.

    :return: False if no appointment has that id.
    """
    return get_coordinator().remove_event(appointment_id)


@mcp.tool()
def list_events() -> list[AppointmentModel]:
    """Lists all appointments, events and tasks, in creation order."""
    return [_to_model(a) for a in get_coordinator().get_all_events()]


@mcp.tool()
def list_events_with_dates() -> list[AppointmentModel]:
    """Lists the appointments that are shown on the calendar."""
    return [_to_model(a) for a in get_coordinator().events_with_dates]


@mcp.tool()
def list_events_by_date(day: str) -> list[AppointmentModel]:
    """Lists appointments that span the given calendar day.

    :param day: Date in YYYY-MM-DD format.
    """
    try:
        parsed = date.fromisoformat(day.strip())
    except ValueError as e:
        raise ValidationError(f"Invalid date: {day!r}") from e
    return [_to_model(a) for a in get_coordinator().get_events_by_date(parsed)]


@mcp.tool()
def list_todo_items(status: TodoStatus = "all") -> list[TodoItemModel]:
    """Lists tasks from the todo list.

    :param status: 'all', 'active' (not completed) or 'completed'.
    """
    return [TodoItemModel.from_todo_item(item) for item in get_todo_items(status)]


@mcp.tool()
def get_completion_status() -> dict[str, bool]:
    """Returns the completion flag of every appointment keyed by id."""
    return get_coordinator().get_completion_status()


def get_todo_items(status: str = "all"):
    """Internal function to get todo items filtered by completion."""
    items = get_coordinator().get_all_todo_items()
    if status == "all":
        return items
    active, completed = split_by_completion(items)
    if status == "active":
        return active
    if status == "completed":
        return completed
    raise ValidationError(f"Unknown todo status: {status!r}")


def _format_datetime(value: datetime) -> str:
    """Formats a datetime into a concise readable format like 'Mon 1/15 2:30 PM'."""
    return value.strftime("%a %-m/%-d %-I:%M %p")


def format_events() -> str:
    """Internal function to format appointments as a clean table.

    :return: Formatted table string of all appointments.
    """
    coordinator = get_coordinator()
    appointments = coordinator.get_all_events()
    if not appointments:
        return "📅 No events found."

    lines = []
    lines.append("📅 EVENTS")
    lines.append("=" * 100)
    lines.append(f"{'#':<4} {'Subject':<35} {'Start':<18} {'End':<18} {'Kind':<8} {'Done':<6}")
    lines.append("-" * 100)

    for idx, appointment in enumerate(appointments, 1):
        props = coordinator.get_event_properties(appointment.id)
        subject = appointment.subject[:34] if len(appointment.subject) > 34 else appointment.subject
        start = _format_datetime(appointment.start) if props.has_date else "—"
        end = _format_datetime(appointment.end) if props.has_date else "—"
        kind = "event" if props.is_event else "task"
        done = "yes" if props.is_completed else "no"
        lines.append(f"{idx:<4} {subject:<35} {start:<18} {end:<18} {kind:<8} {done:<6}")

    lines.append("=" * 100)
    lines.append(f"Total: {len(appointments)} item(s)")
    return "\n".join(lines)


def format_todo_items() -> str:
    """Internal function to format the todo list as a clean table.

    :return: Formatted table string of all todo items.
    """
    items = get_coordinator().get_all_todo_items()
    if not items:
        return "✅ No tasks found."

    lines = []
    lines.append("✅ TASKS")
    lines.append("=" * 100)
    lines.append(f"{'#':<4} {'Done':<6} {'Subject':<40} {'When':<40}")
    lines.append("-" * 100)

    for idx, item in enumerate(items, 1):
        subject = item.subject[:39] if len(item.subject) > 39 else item.subject
        done = "[x]" if item.is_completed else "[ ]"
        lines.append(f"{idx:<4} {done:<6} {subject:<40} {item.date_time_info:<40}")

    lines.append("=" * 100)
    lines.append(f"Total: {len(items)} task(s)")
    return "\n".join(lines)


@mcp.tool()
def show_events() -> str:
    """Displays all appointments in a nicely formatted view.

    Appointments are numbered and listed with their time range, kind
    (event or task) and completion flag. Dateless tasks show no times.

    :return: Formatted string of all appointments, or a message if none exist.
    """
    return format_events()


@mcp.tool()
def show_todo_items() -> str:
    """Displays the todo list in a nicely formatted view.

    :return: Formatted string of all tasks, or a message if none exist.
    """
    return format_todo_items()


if __name__ == "__main__":
    configure_logging(LOG_LEVEL)
    mcp.run()
