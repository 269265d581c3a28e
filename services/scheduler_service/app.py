"""
FastAPI service for scheduler operations.

This service exposes the Coordinator from scheduler_server as REST API
endpoints. All operations are fast, synchronous store updates backed by the
JSON files in the configured data directory.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import date

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from scheduler_server.config import LOG_LEVEL, SCHEDULER_SERVICE_PORT, get_data_dir
from scheduler_server.coordinator import Coordinator, parse_color
from scheduler_server.errors import ValidationError
from scheduler_server.models import Appointment
from scheduler_server.logging_config import configure_logging
from scheduler_server.todo_service import split_by_completion
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


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the data directory on startup unless a coordinator was provided."""
    if getattr(app.state, "coordinator", None) is None:
        app.state.coordinator = Coordinator.from_data_dir(get_data_dir())
    yield


app = FastAPI(
    title="Scheduler Service",
    description="REST API for calendar events and todo items",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def get_coordinator(request: Request) -> Coordinator:
    coordinator = getattr(request.app.state, "coordinator", None)
    if coordinator is None:
        raise HTTPException(status_code=503, detail="Scheduler store is not initialized")
    return coordinator


def _to_model(coordinator: Coordinator, appointment: Appointment) -> AppointmentModel:
    return AppointmentModel.from_appointment(appointment, coordinator.get_event_properties(appointment.id))


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "service": "scheduler-service"}


@app.get("/events", response_model=list[AppointmentModel])
def list_events(coordinator: Coordinator = Depends(get_coordinator)) -> list[AppointmentModel]:
    """List all appointments, events and tasks, in creation order."""
    return [_to_model(coordinator, a) for a in coordinator.get_all_events()]


@app.get("/events/with-dates", response_model=list[AppointmentModel])
def list_events_with_dates(coordinator: Coordinator = Depends(get_coordinator)) -> list[AppointmentModel]:
    """List the appointments that are shown on the calendar."""
    return [_to_model(coordinator, a) for a in coordinator.events_with_dates]


@app.get("/events/by-date/{day}", response_model=list[AppointmentModel])
def list_events_by_date(day: date, coordinator: Coordinator = Depends(get_coordinator)) -> list[AppointmentModel]:
    """List appointments whose date range includes the given day."""
    return [_to_model(coordinator, a) for a in coordinator.get_events_by_date(day)]


@app.post("/events", response_model=AppointmentModel)
def create_event(request: CreateEventRequest, coordinator: Coordinator = Depends(get_coordinator)) -> AppointmentModel:
    """
    Create an event or a dated/dateless task.

    Returns 400 if the subject is blank or the end is not after the start.
    """
    appointment = coordinator.add_new_event(
        request.start,
        request.end,
        request.subject,
        parse_color(request.color),
        is_completed=request.is_completed,
        has_date=request.has_date,
        is_event=request.is_event,
    )
    return _to_model(coordinator, appointment)


@app.post("/tasks", response_model=AppointmentModel)
def create_task(request: CreateTaskRequest, coordinator: Coordinator = Depends(get_coordinator)) -> AppointmentModel:
    """Create a task without a date."""
    return _to_model(coordinator, coordinator.add_task_without_date(request.subject))


@app.put("/events/{appointment_id}", response_model=MutationResponse)
def update_event(
    appointment_id: str,
    request: UpdateEventRequest,
    coordinator: Coordinator = Depends(get_coordinator),
) -> MutationResponse:
    """Change an appointment's times, subject and optionally its color."""
    found = coordinator.update_event(
        appointment_id, request.start, request.end, request.subject, parse_color(request.color)
    )
    return MutationResponse(id=appointment_id, found=found)


@app.put("/events/{appointment_id}/properties", response_model=UpdatePropertiesRequest)
def update_event_properties(
    appointment_id: str,
    request: UpdatePropertiesRequest,
    coordinator: Coordinator = Depends(get_coordinator),
) -> UpdatePropertiesRequest:
    """Replace the completion, date and kind flags of an appointment."""
    coordinator.update_event_properties(
        appointment_id, request.is_completed, request.has_date, request.is_event
    )
    props = coordinator.get_event_properties(appointment_id)
    return UpdatePropertiesRequest(
        is_completed=props.is_completed, has_date=props.has_date, is_event=props.is_event
    )


@app.put("/events/{appointment_id}/completion", response_model=CompletionResponse)
def set_completion(
    appointment_id: str,
    request: SetCompletionRequest,
    coordinator: Coordinator = Depends(get_coordinator),
) -> CompletionResponse:
    coordinator.update_completion_status(appointment_id, request.is_completed)
    return CompletionResponse(id=appointment_id, is_completed=request.is_completed)


@app.post("/events/{appointment_id}/toggle-completion", response_model=CompletionResponse)
def toggle_completion(appointment_id: str, coordinator: Coordinator = Depends(get_coordinator)) -> CompletionResponse:
    return CompletionResponse(id=appointment_id, is_completed=coordinator.toggle_completion(appointment_id))


@app.delete("/events/{appointment_id}", response_model=MutationResponse)
def remove_event(appointment_id: str, coordinator: Coordinator = Depends(get_coordinator)) -> MutationResponse:
    """Delete an appointment; unknown ids report found=false."""
    return MutationResponse(id=appointment_id, found=coordinator.remove_event(appointment_id))


@app.get("/todos", response_model=list[TodoItemModel])
def list_todos(status: TodoStatus = "all", coordinator: Coordinator = Depends(get_coordinator)) -> list[TodoItemModel]:
    """
    List tasks from the todo projection.

    ``status`` filters to active (not completed) or completed tasks.
    """
    items = coordinator.get_all_todo_items()
    if status != "all":
        active, completed = split_by_completion(items)
        items = active if status == "active" else completed
    return [TodoItemModel.from_todo_item(item) for item in items]


@app.get("/completion-status", response_model=CompletionStatusResponse)
def completion_status(coordinator: Coordinator = Depends(get_coordinator)) -> CompletionStatusResponse:
    return CompletionStatusResponse(statuses=coordinator.get_completion_status())


if __name__ == "__main__":
    import uvicorn
    configure_logging(LOG_LEVEL)
    uvicorn.run(app, host="0.0.0.0", port=SCHEDULER_SERVICE_PORT)
