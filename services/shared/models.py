"""
Shared Pydantic models for REST API and MCP tool serialization.

This module contains Pydantic equivalents of the scheduler dataclasses,
ensuring consistent JSON serialization across the REST service, its client
and the MCP server. Colors travel as ``#AARRGGBB`` strings and times as ISO
8601 strings.
"""
from __future__ import annotations

import typing as t
from datetime import datetime

from pydantic import BaseModel, Field

from scheduler_server.models import Appointment, EventProperties, TodoItem
from scheduler_server.serialization import color_to_hex


TodoStatus = t.Literal["all", "active", "completed"]


class AppointmentModel(BaseModel):
    """An appointment joined with its properties."""
    id: str
    start: datetime
    end: datetime
    subject: str
    background_hex: str
    is_completed: bool = False
    has_date: bool = True
    is_event: bool = True

    @classmethod
    def from_appointment(cls, appointment: Appointment, properties: EventProperties) -> AppointmentModel:
        return cls(
            id=appointment.id,
            start=appointment.start,
            end=appointment.end,
            subject=appointment.subject,
            background_hex=color_to_hex(appointment.background),
            is_completed=properties.is_completed,
            has_date=properties.has_date,
            is_event=properties.is_event,
        )


class TodoItemModel(BaseModel):
    """A task from the todo projection."""
    appointment_id: str
    subject: str
    start: datetime
    end: datetime
    has_date: bool = True
    is_event: bool = False
    is_completed: bool = False
    date_time_info: str = ""

    @classmethod
    def from_todo_item(cls, item: TodoItem) -> TodoItemModel:
        return cls(
            appointment_id=item.appointment_id,
            subject=item.subject,
            start=item.start,
            end=item.end,
            has_date=item.has_date,
            is_event=item.is_event,
            is_completed=item.is_completed,
            date_time_info=item.date_time_info,
        )


# Request/Response Models for API endpoints
class CreateEventRequest(BaseModel):
    """Request model for creating an event or a dated task."""
    start: datetime
    end: datetime
    subject: str
    color: t.Optional[str] = None  # palette name or hex; random palette color if omitted
    is_completed: bool = False
    has_date: bool = True
    is_event: bool = True


class CreateTaskRequest(BaseModel):
    """Request model for creating a task without a date."""
    subject: str


class UpdateEventRequest(BaseModel):
    """Request model for changing an appointment's times, subject and color."""
    start: datetime
    end: datetime
    subject: str
    color: t.Optional[str] = None  # keeps the current color if omitted


class UpdatePropertiesRequest(BaseModel):
    """Request model for replacing an appointment's properties."""
    is_completed: bool = False
    has_date: bool = True
    is_event: bool = True


class SetCompletionRequest(BaseModel):
    """Request model for setting the completion flag."""
    is_completed: bool


class MutationResponse(BaseModel):
    """Outcome of an update or removal addressed by id."""
    id: str
    found: bool


class CompletionResponse(BaseModel):
    """Completion flag of one appointment after a change."""
    id: str
    is_completed: bool


class CompletionStatusResponse(BaseModel):
    """Completion flag per appointment id."""
    statuses: dict[str, bool] = Field(default_factory=dict)
