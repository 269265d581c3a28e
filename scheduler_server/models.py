"""
Data models for scheduler appointments, their properties and todo items.

This module contains the dataclasses used to represent calendar appointments
(events and tasks alike), the auxiliary completion/date/kind properties kept
per appointment, and the task-only todo projection.
"""
from __future__ import annotations

import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class Color:
    """A solid ARGB color with 0-255 channels."""
    red: int
    green: int
    blue: int
    alpha: int = 255

    @classmethod
    def from_hex(cls, text: str) -> Color:
        """Parse ``#AARRGGBB`` or ``#RRGGBB`` (the leading ``#`` is optional).

        :raises ValueError: If the text is not a 6 or 8 digit hex color.
        """
        digits = text.strip().lstrip("#")
        if len(digits) == 6:
            digits = "FF" + digits
        if len(digits) != 8:
            raise ValueError(f"Invalid hex color: {text!r}")
        value = int(digits, 16)
        return cls(
            alpha=(value >> 24) & 0xFF,
            red=(value >> 16) & 0xFF,
            green=(value >> 8) & 0xFF,
            blue=value & 0xFF,
        )

    @classmethod
    def parse(cls, value: str) -> Color:
        """Build a color from a palette name or a hex string."""
        named = PALETTE.get(value.strip().lower())
        if named is not None:
            return named
        return cls.from_hex(value)

    def to_hex(self) -> str:
        """Return the color as an uppercase ``#AARRGGBB`` string."""
        return f"#{self.alpha:02X}{self.red:02X}{self.green:02X}{self.blue:02X}"


BLUE = Color(0, 0, 255)
GREEN = Color(0, 128, 0)
ORANGE = Color(255, 165, 0)
PURPLE = Color(128, 0, 128)
PINK = Color(255, 192, 203)
TEAL = Color(0, 128, 128)

PALETTE: dict[str, Color] = {
    "blue": BLUE,
    "green": GREEN,
    "orange": ORANGE,
    "purple": PURPLE,
    "pink": PINK,
    "teal": TEAL,
}


def random_palette_color() -> Color:
    """Pick one of the palette colors at random."""
    return random.choice(list(PALETTE.values()))


def new_appointment_id() -> str:
    return uuid.uuid4().hex


def wall_clock(value: datetime) -> datetime:
    """Drop any timezone, keeping the local wall-clock reading."""
    return value.replace(tzinfo=None)


@dataclass
class Appointment:
    """A calendar entry: either a dated event or a task."""
    start: datetime
    end: datetime
    subject: str
    background: Color = ORANGE
    id: str = field(default_factory=new_appointment_id)


@dataclass(frozen=True)
class EventProperties:
    """Completion, date presence and kind of one appointment.

    The defaults describe an open, dated calendar event.
    """
    is_completed: bool = False
    has_date: bool = True
    is_event: bool = True


@dataclass
class TodoItem:
    """Task-list projection of a non-event appointment."""
    appointment_id: str
    subject: str
    start: datetime
    end: datetime
    has_date: bool = True
    is_event: bool = False
    is_completed: bool = False

    @classmethod
    def from_appointment(cls, appointment: Appointment, properties: EventProperties) -> TodoItem:
        return cls(
            appointment_id=appointment.id,
            subject=appointment.subject,
            start=appointment.start,
            end=appointment.end,
            has_date=properties.has_date,
            is_event=properties.is_event,
            is_completed=properties.is_completed,
        )

    @property
    def date_time_info(self) -> str:
        """Display text for the item's schedule, e.g. '15/01/2024 09:00 - 10:00'."""
        if not self.has_date:
            return "No date"
        return f"{self.start.strftime('%d/%m/%Y %H:%M')} - {self.end.strftime('%H:%M')}"

    def update_from_appointment(self, appointment: Appointment) -> None:
        """Refresh subject and times from the appointment this item mirrors."""
        self.subject = appointment.subject
        self.start = appointment.start
        self.end = appointment.end


class ChangeKind(Enum):
    """Kind of mutation reported to subscribers."""
    ADDED = "ADDED"
    REMOVED = "REMOVED"
    UPDATED = "UPDATED"


@dataclass(frozen=True)
class ChangeNotification:
    """Emitted after each successful mutation of the appointment set."""
    kind: ChangeKind
    appointment_id: str
