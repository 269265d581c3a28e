"""
HTTP client for the scheduler service.

This module mirrors the Coordinator operations but makes HTTP calls to the
REST service. Responses are parsed back into the shared Pydantic models.
"""
from __future__ import annotations

import typing as t
from datetime import date, datetime

import httpx

from scheduler_server.config import SCHEDULER_SERVICE_URL, STANDARD_TIMEOUT
from scheduler_server.errors import ValidationError
from services.shared.models import (
    AppointmentModel,
    CompletionResponse,
    CompletionStatusResponse,
    CreateEventRequest,
    CreateTaskRequest,
    MutationResponse,
    SetCompletionRequest,
    TodoItemModel,
    TodoStatus,
    UpdateEventRequest,
    UpdatePropertiesRequest,
)


class SchedulerServiceClient:
    """Thin synchronous wrapper around the scheduler REST API.

    :param base_url: Service URL; defaults to ``SCHEDULER_SERVICE_URL``.
    :param client: Optional preconfigured httpx client (its own base URL is used).
    """

    def __init__(self, base_url: t.Optional[str] = None, client: t.Optional[httpx.Client] = None) -> None:
        self._client = client or httpx.Client(
            base_url=base_url or SCHEDULER_SERVICE_URL,
            timeout=STANDARD_TIMEOUT,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> SchedulerServiceClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> t.Any:
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException:
            raise RuntimeError(f"Scheduler request {method} {path} timed out after {STANDARD_TIMEOUT} seconds")
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 400:
                raise ValidationError(e.response.json().get("detail", e.response.text)) from e
            raise RuntimeError(f"HTTP error from scheduler service: {e.response.status_code} {e.response.text}") from e
        except httpx.HTTPError as e:
            raise RuntimeError(f"Error calling scheduler service: {str(e)}") from e
        return response.json()

    def health(self) -> dict[str, str]:
        return self._request("GET", "/health")

    def list_events(self) -> list[AppointmentModel]:
        return [AppointmentModel(**item) for item in self._request("GET", "/events")]

    def list_events_with_dates(self) -> list[AppointmentModel]:
        return [AppointmentModel(**item) for item in self._request("GET", "/events/with-dates")]

    def list_events_by_date(self, day: date) -> list[AppointmentModel]:
        return [AppointmentModel(**item) for item in self._request("GET", f"/events/by-date/{day.isoformat()}")]

    def create_event(
            self,
            start: datetime,
            end: datetime,
            subject: str,
            color: t.Optional[str] = None,
            is_completed: bool = False,
            has_date: bool = True,
            is_event: bool = True,
    ) -> AppointmentModel:
        request = CreateEventRequest(
            start=start,
            end=end,
            subject=subject,
            color=color,
            is_completed=is_completed,
            has_date=has_date,
            is_event=is_event,
        )
        return AppointmentModel(**self._request("POST", "/events", json=request.model_dump(mode="json")))

    def create_task(self, subject: str) -> AppointmentModel:
        request = CreateTaskRequest(subject=subject)
        return AppointmentModel(**self._request("POST", "/tasks", json=request.model_dump(mode="json")))

    def update_event(
            self,
            appointment_id: str,
            start: datetime,
            end: datetime,
            subject: str,
            color: t.Optional[str] = None,
    ) -> bool:
        request = UpdateEventRequest(start=start, end=end, subject=subject, color=color)
        data = self._request("PUT", f"/events/{appointment_id}", json=request.model_dump(mode="json"))
        return MutationResponse(**data).found

    def update_event_properties(
            self,
            appointment_id: str,
            is_completed: bool,
            has_date: bool,
            is_event: bool,
    ) -> UpdatePropertiesRequest:
        request = UpdatePropertiesRequest(is_completed=is_completed, has_date=has_date, is_event=is_event)
        data = self._request("PUT", f"/events/{appointment_id}/properties", json=request.model_dump(mode="json"))
        return UpdatePropertiesRequest(**data)

    def set_completion(self, appointment_id: str, is_completed: bool) -> bool:
        request = SetCompletionRequest(is_completed=is_completed)
        data = self._request("PUT", f"/events/{appointment_id}/completion", json=request.model_dump(mode="json"))
        return CompletionResponse(**data).is_completed

    def toggle_completion(self, appointment_id: str) -> bool:
        data = self._request("POST", f"/events/{appointment_id}/toggle-completion")
        return CompletionResponse(**data).is_completed

    def remove_event(self, appointment_id: str) -> bool:
        return MutationResponse(**self._request("DELETE", f"/events/{appointment_id}")).found

    def list_todo_items(self, status: TodoStatus = "all") -> list[TodoItemModel]:
        return [TodoItemModel(**item) for item in self._request("GET", "/todos", params={"status": status})]

    def get_completion_status(self) -> dict[str, bool]:
        return CompletionStatusResponse(**self._request("GET", "/completion-status")).statuses
