"""
On-disk schema for appointments and todo items.

This module is the only place that knows the layout of ``unified_events.json``
and ``todos.json``. Records are pydantic models whose aliases are the
PascalCase keys found in the files. There is no schema version field: readers
fill defaults for missing keys so older files keep loading.
"""
from __future__ import annotations

import json
import logging
import typing as t
from datetime import datetime

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from scheduler_server.errors import PersistenceError
from scheduler_server.models import (
    ORANGE,
    Appointment,
    Color,
    EventProperties,
    TodoItem,
    new_appointment_id,
    wall_clock,
)

logger = logging.getLogger(__name__)

# Opaque orange, used whenever a color cannot be determined
DEFAULT_BACKGROUND_HEX = "#FFFFA500"


class SerializableAppointment(BaseModel):
    """Flat storage record of one appointment joined with its properties."""
    model_config = ConfigDict(populate_by_name=True)

    id: t.Optional[str] = Field(default=None, alias="Id")
    start_time: datetime = Field(alias="StartTime")
    end_time: datetime = Field(alias="EndTime")
    subject: t.Optional[str] = Field(default="", alias="Subject")
    background_hex: t.Optional[str] = Field(default=DEFAULT_BACKGROUND_HEX, alias="BackgroundHex")
    is_completed: bool = Field(default=False, alias="IsCompleted")
    has_date: bool = Field(default=True, alias="HasDate")
    is_event: bool = Field(default=True, alias="IsEvent")


class TodoRecord(BaseModel):
    """Flat storage record of one todo item."""
    model_config = ConfigDict(populate_by_name=True)

    appointment_id: t.Optional[str] = Field(default=None, alias="AppointmentId")
    subject: t.Optional[str] = Field(default="", alias="Subject")
    start_time: datetime = Field(alias="StartTime")
    end_time: datetime = Field(alias="EndTime")
    has_date: bool = Field(default=True, alias="HasDate")
    is_event: bool = Field(default=False, alias="IsEvent")
    is_completed: bool = Field(default=False, alias="IsCompleted")


def color_to_hex(color: t.Optional[Color]) -> str:
    """Encode a color as ``#AARRGGBB``; no color maps to opaque orange."""
    if color is None:
        return DEFAULT_BACKGROUND_HEX
    return color.to_hex()


def color_from_hex(text: t.Optional[str]) -> Color:
    """Decode a stored hex string into a solid color.

    Unreadable values fall back to orange instead of failing the whole load.
    """
    if not text:
        return ORANGE
    try:
        return Color.from_hex(text)
    except ValueError:
        logger.warning("Unreadable background color %r, using %s", text, DEFAULT_BACKGROUND_HEX)
        return ORANGE


def to_record(appointment: Appointment, properties: EventProperties) -> SerializableAppointment:
    return SerializableAppointment(
        id=appointment.id,
        start_time=appointment.start,
        end_time=appointment.end,
        subject=appointment.subject,
        background_hex=color_to_hex(appointment.background),
        is_completed=properties.is_completed,
        has_date=properties.has_date,
        is_event=properties.is_event,
    )


def from_record(record: SerializableAppointment) -> tuple[Appointment, EventProperties]:
    """Rebuild an appointment and its properties from a storage record.

    Records written without an ``Id`` get a fresh one.
    """
    appointment = Appointment(
        start=wall_clock(record.start_time),
        end=wall_clock(record.end_time),
        subject=record.subject or "",
        background=color_from_hex(record.background_hex),
        id=record.id or new_appointment_id(),
    )
    properties = EventProperties(
        is_completed=record.is_completed,
        has_date=record.has_date,
        is_event=record.is_event,
    )
    return appointment, properties


def dump_appointments(pairs: t.Iterable[tuple[Appointment, EventProperties]]) -> str:
    """Serialize appointments as a single compact JSON array."""
    records = [
        to_record(appointment, properties).model_dump(mode="json", by_alias=True)
        for appointment, properties in pairs
    ]
    return json.dumps(records, separators=(",", ":"), ensure_ascii=False)


def load_appointments(text: str) -> list[tuple[Appointment, EventProperties]]:
    """Parse the content of ``unified_events.json``.

    :raises PersistenceError: If the text is not a valid appointment array.
    """
    raw = _parse_array(text, "appointments")
    try:
        return [from_record(SerializableAppointment.model_validate(item)) for item in raw]
    except pydantic.ValidationError as e:
        raise PersistenceError(f"Invalid appointment record: {e}") from e


def to_todo_record(item: TodoItem) -> TodoRecord:
    return TodoRecord(
        appointment_id=item.appointment_id,
        subject=item.subject,
        start_time=item.start,
        end_time=item.end,
        has_date=item.has_date,
        is_event=item.is_event,
        is_completed=item.is_completed,
    )


def from_todo_record(record: TodoRecord) -> TodoItem:
    return TodoItem(
        appointment_id=record.appointment_id or "",
        subject=record.subject or "",
        start=wall_clock(record.start_time),
        end=wall_clock(record.end_time),
        has_date=record.has_date,
        is_event=record.is_event,
        is_completed=record.is_completed,
    )


def dump_todo_items(items: t.Iterable[TodoItem]) -> str:
    """Serialize todo items as an indented JSON array."""
    records = [to_todo_record(item).model_dump(mode="json", by_alias=True) for item in items]
    return json.dumps(records, indent=2, ensure_ascii=False)


def load_todo_items(text: str) -> list[TodoItem]:
    """Parse the content of ``todos.json``.

    :raises PersistenceError: If the text is not a valid todo array.
    """
    raw = _parse_array(text, "todo items")
    try:
        return [from_todo_record(TodoRecord.model_validate(item)) for item in raw]
    except pydantic.ValidationError as e:
        raise PersistenceError(f"Invalid todo record: {e}") from e


def _parse_array(text: str, what: str) -> list[t.Any]:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise PersistenceError(f"Malformed {what} file: {e}") from e
    # A literal null is read as an empty collection
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise PersistenceError(f"Expected a JSON array of {what}, got {type(raw).__name__}")
    return raw
