"""
Validated façade over the appointment store and the todo projection.

Every outer surface (MCP tools, REST service, CLI) goes through a
Coordinator. It checks input before touching the store, keeps the todo
mirror file in step with the store after each mutation, and notifies
subscribers of what changed.
"""
from __future__ import annotations

import logging
import typing as t
from datetime import date, datetime
from pathlib import Path

from scheduler_server.config import EVENTS_FILE_NAME, TODOS_FILE_NAME
from scheduler_server.errors import ValidationError
from scheduler_server.models import (
    Appointment,
    ChangeKind,
    ChangeNotification,
    Color,
    EventProperties,
    TodoItem,
    random_palette_color,
    wall_clock,
)
from scheduler_server.store import AppointmentStore
from scheduler_server.todo_service import TodoService, split_by_completion

logger = logging.getLogger(__name__)

ChangeCallback = t.Callable[[ChangeNotification], None]


def validate_subject(subject: str) -> None:
    if not subject or not subject.strip():
        raise ValidationError("Subject must not be empty")


def validate_times(start: datetime, end: datetime) -> None:
    if end <= start:
        raise ValidationError(f"End time {end.isoformat()} must be after start time {start.isoformat()}")


def parse_datetime(value: str) -> datetime:
    """Parse an ISO 8601 string into a naive datetime.

    :raises ValidationError: If the string is not ISO 8601.
    """
    try:
        return wall_clock(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
    except (ValueError, AttributeError) as e:
        raise ValidationError(f"Invalid ISO datetime: {value!r}") from e


def parse_color(value: t.Optional[str]) -> t.Optional[Color]:
    """Parse a palette name or hex string; empty input means no color.

    :raises ValidationError: If the value is neither.
    """
    if not value:
        return None
    try:
        return Color.parse(value)
    except ValueError as e:
        raise ValidationError(f"Unknown color: {value!r}") from e


class Coordinator:
    """Entry point for all create/update/delete/toggle operations."""

    def __init__(self, store: AppointmentStore, todo_service: TodoService) -> None:
        self.store = store
        self.todo_service = todo_service
        self._events_with_dates: t.Optional[list[Appointment]] = None
        self._subscribers: list[ChangeCallback] = []

    @classmethod
    def from_data_dir(cls, data_dir: t.Union[str, Path]) -> Coordinator:
        """Open the standard events and todo files inside a data directory."""
        data_dir = Path(data_dir)
        store = AppointmentStore(data_dir / EVENTS_FILE_NAME)
        return cls(store, TodoService(store, data_dir / TODOS_FILE_NAME))

    # Notifications

    def subscribe(self, callback: ChangeCallback) -> t.Callable[[], None]:
        """Register a callback for change notifications.

        :return: A function that removes the callback again.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # Mutations

    def add_new_event(
            self,
            start: datetime,
            end: datetime,
            subject: str,
            color: t.Optional[Color] = None,
            is_completed: bool = False,
            has_date: bool = True,
            is_event: bool = True,
    ) -> Appointment:
        """Create an event or a dated/dateless task.

        :param color: Background color; a random palette color if omitted.
        :raises ValidationError: If the subject is blank or end <= start.
        """
        start, end = wall_clock(start), wall_clock(end)
        validate_subject(subject)
        validate_times(start, end)
        appointment = self.store.add(
            start, end, subject, color or random_palette_color(), is_completed, is_event
        )
        # store.add always records has_date=True
        if not has_date:
            self.store.update_properties(appointment.id, is_completed, has_date, is_event)
        self._after_mutation(ChangeKind.ADDED, appointment.id)
        return appointment

    def add_task_without_date(self, subject: str) -> Appointment:
        validate_subject(subject)
        appointment = self.store.add_task_without_date(subject)
        self._after_mutation(ChangeKind.ADDED, appointment.id)
        return appointment

    def remove_event(self, appointment_id: str) -> bool:
        """Delete an appointment with its properties and todo entry.

        Unknown ids are ignored.
        """
        appointment = self.store.get(appointment_id)
        if appointment is None or not self.store.remove(appointment):
            return False
        self._after_mutation(ChangeKind.REMOVED, appointment_id)
        return True

    def update_event(
            self,
            appointment_id: str,
            start: datetime,
            end: datetime,
            subject: str,
            color: t.Optional[Color] = None,
    ) -> bool:
        """Change times, subject and (optionally) color of an appointment.

        :raises ValidationError: If the subject is blank or end <= start.
        """
        start, end = wall_clock(start), wall_clock(end)
        validate_subject(subject)
        validate_times(start, end)
        appointment = self.store.get(appointment_id)
        if appointment is None:
            return False
        self.store.update(appointment, start, end, subject, color or appointment.background)
        self._after_mutation(ChangeKind.UPDATED, appointment_id)
        return True

    def update_event_properties(
            self,
            appointment_id: str,
            is_completed: bool,
            has_date: bool,
            is_event: bool,
    ) -> None:
        self.store.update_properties(appointment_id, is_completed, has_date, is_event)
        self._after_mutation(ChangeKind.UPDATED, appointment_id)

    def update_completion_status(self, appointment_id: str, is_completed: bool) -> None:
        self.store.update_completion_status(appointment_id, is_completed)
        self._after_mutation(ChangeKind.UPDATED, appointment_id)

    def toggle_completion(self, appointment_id: str) -> bool:
        """Flip the completion flag and return its new value."""
        completed = not self.store.get_properties(appointment_id).is_completed
        self.update_completion_status(appointment_id, completed)
        return completed

    def save_changes(self) -> None:
        self.store.save_changes()

    # Queries

    def get_all_events(self) -> list[Appointment]:
        return self.store.get_all()

    def get_event(self, appointment_id: str) -> t.Optional[Appointment]:
        return self.store.get(appointment_id)

    def get_events_by_date(self, day: t.Union[date, datetime]) -> list[Appointment]:
        return self.store.get_by_date(day)

    def get_event_properties(self, appointment_id: str) -> EventProperties:
        return self.store.get_properties(appointment_id)

    def get_completion_status(self) -> dict[str, bool]:
        return self.store.get_completion_status()

    @property
    def events_with_dates(self) -> list[Appointment]:
        """Appointments that have a date, cached until the next mutation."""
        if self._events_with_dates is None:
            self._events_with_dates = [
                a for a in self.store.get_all() if self.store.get_properties(a.id).has_date
            ]
        return list(self._events_with_dates)

    def get_all_todo_items(self) -> list[TodoItem]:
        return self.todo_service.get_all_todo_items()

    def get_active_todo_items(self) -> list[TodoItem]:
        return split_by_completion(self.get_all_todo_items())[0]

    def get_completed_todo_items(self) -> list[TodoItem]:
        return split_by_completion(self.get_all_todo_items())[1]

    def load_todo_mirror(self) -> list[TodoItem]:
        """Read back the persisted todo file as it is on disk."""
        return self.todo_service.load_todo_items()

    def _after_mutation(self, kind: ChangeKind, appointment_id: str) -> None:
        self._events_with_dates = None
        self.todo_service.save_todo_items(self.todo_service.get_all_todo_items())
        notification = ChangeNotification(kind=kind, appointment_id=appointment_id)
        logger.debug("%s %s", kind.value, appointment_id)
        for callback in list(self._subscribers):
            callback(notification)
