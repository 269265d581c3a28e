# -*- coding: utf-8 -*-
"""
Canonical storage for calendar appointments and their properties.

The store keeps every appointment (events and tasks alike) in insertion
order, plus one EventProperties record per appointment id. The whole set is
rewritten to a single JSON file after every mutation.
"""
from __future__ import annotations

import logging
import typing as t
from datetime import date, datetime, timedelta
from pathlib import Path

from scheduler_server.errors import PersistenceError
from scheduler_server.models import ORANGE, Appointment, Color, EventProperties
from scheduler_server.serialization import dump_appointments, load_appointments

logger = logging.getLogger(__name__)


class AppointmentStore:
    """File-backed list of appointments with a properties map keyed by id.

    Not thread-safe: callers must use a store from a single thread.
    """

    def __init__(self, file_path: t.Union[str, Path]) -> None:
        self.file_path = Path(file_path)
        self._appointments: list[Appointment] = []
        self._properties: dict[str, EventProperties] = {}
        self._load()

    def get_all(self) -> list[Appointment]:
        """Return all appointments in insertion order."""
        return list(self._appointments)

    def get(self, appointment_id: str) -> t.Optional[Appointment]:
        for appointment in self._appointments:
            if appointment.id == appointment_id:
                return appointment
        return None

    def add(
            self,
            start: datetime,
            end: datetime,
            subject: str,
            color: Color,
            is_completed: bool = False,
            is_event: bool = True,
    ) -> Appointment:
        """Append a new dated appointment and persist.

        :param start: Start time.
        :param end: End time.
        :param subject: Title of the appointment.
        :param color: Background color.
        :param is_completed: Initial completion flag.
        :param is_event: True for a calendar event, False for a task.
        :return: The created Appointment.
        """
        appointment = Appointment(start=start, end=end, subject=subject, background=color)
        self._appointments.append(appointment)
        self._properties[appointment.id] = EventProperties(
            is_completed=is_completed, has_date=True, is_event=is_event
        )
        logger.debug("Added appointment %s (%r)", appointment.id, subject)
        self._save()
        return appointment

    def add_task_without_date(self, subject: str) -> Appointment:
        """Append a dateless task.

        Its times are placeholders (now, now + 1h) that are never displayed.
        """
        now = datetime.now()
        appointment = Appointment(start=now, end=now + timedelta(hours=1), subject=subject, background=ORANGE)
        self._appointments.append(appointment)
        self._properties[appointment.id] = EventProperties(is_completed=False, has_date=False, is_event=False)
        logger.debug("Added dateless task %s (%r)", appointment.id, subject)
        self._save()
        return appointment

    def remove(self, appointment: Appointment) -> bool:
        """Remove an appointment and its properties record.

        :return: False if the appointment was not stored.
        """
        stored = self.get(appointment.id)
        if stored is None:
            return False
        self._appointments.remove(stored)
        self._properties.pop(stored.id, None)
        logger.debug("Removed appointment %s", stored.id)
        self._save()
        return True

    def update(
            self,
            appointment: Appointment,
            start: datetime,
            end: datetime,
            subject: str,
            color: Color,
    ) -> bool:
        """Overwrite times, subject and color of a stored appointment in place.

        :return: False if the appointment was not stored.
        """
        stored = self.get(appointment.id)
        if stored is None:
            return False
        stored.start = start
        stored.end = end
        stored.subject = subject
        stored.background = color
        logger.debug("Updated appointment %s", stored.id)
        self._save()
        return True

    def update_properties(
            self,
            appointment_id: str,
            is_completed: bool,
            has_date: bool,
            is_event: bool,
    ) -> None:
        """Insert or replace the properties record of an appointment."""
        self._properties[appointment_id] = EventProperties(
            is_completed=is_completed, has_date=has_date, is_event=is_event
        )
        self._save()

    def update_completion_status(self, appointment_id: str, is_completed: bool) -> None:
        """Set the completion flag, keeping the other properties.

        Unknown ids get a record with event defaults.
        """
        current = self._properties.get(appointment_id)
        if current is None:
            self._properties[appointment_id] = EventProperties(is_completed=is_completed)
        else:
            self._properties[appointment_id] = EventProperties(
                is_completed=is_completed, has_date=current.has_date, is_event=current.is_event
            )
        self._save()

    def get_properties(self, appointment_id: str) -> EventProperties:
        """Return the properties of an appointment.

        Ids without a record get event defaults (not completed, dated, event).
        """
        return self._properties.get(appointment_id, EventProperties())

    def get_completion_status(self) -> dict[str, bool]:
        return {key: props.is_completed for key, props in self._properties.items()}

    def get_by_date(self, day: t.Union[date, datetime]) -> list[Appointment]:
        """Return appointments whose calendar-date range includes the day."""
        if isinstance(day, datetime):
            day = day.date()
        return [a for a in self._appointments if a.start.date() <= day <= a.end.date()]

    def save_changes(self) -> None:
        self._save()

    def _save(self) -> None:
        text = dump_appointments((a, self.get_properties(a.id)) for a in self._appointments)
        try:
            self.file_path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Error writing {self.file_path}: {e}") from e

    def _load(self) -> None:
        if not self.file_path.exists():
            return
        try:
            text = self.file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Error reading {self.file_path}: {e}") from e
        for appointment, properties in load_appointments(text):
            self._appointments.append(appointment)
            self._properties[appointment.id] = properties
        logger.debug("Loaded %d appointment(s) from %s", len(self._appointments), self.file_path)
