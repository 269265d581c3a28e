# -*- coding: utf-8 -*-
"""
Todo projection over the appointment store.

The task-only view is computed from the store on demand. A mirror of it is
also written to its own JSON file; failures on that file are logged and
never raised, so callers keep working with stale or empty data.
"""
from __future__ import annotations

import logging
import typing as t
from pathlib import Path

from scheduler_server.errors import PersistenceError
from scheduler_server.models import TodoItem
from scheduler_server.serialization import dump_todo_items, load_todo_items
from scheduler_server.store import AppointmentStore

logger = logging.getLogger(__name__)


class TodoService:
    """Derives todo items from a store and persists the todo mirror."""

    def __init__(self, store: AppointmentStore, file_path: t.Union[str, Path]) -> None:
        self.store = store
        self.file_path = Path(file_path)

    def get_all_todo_items(self) -> list[TodoItem]:
        """Build one TodoItem per appointment whose properties mark it as a task."""
        items = []
        for appointment in self.store.get_all():
            properties = self.store.get_properties(appointment.id)
            if not properties.is_event:
                items.append(TodoItem.from_appointment(appointment, properties))
        return items

    def save_todo_items(self, items: t.Iterable[TodoItem]) -> None:
        """Overwrite the todo file with the given collection.

        Errors are logged and swallowed.
        """
        try:
            self.file_path.write_text(dump_todo_items(items), encoding="utf-8")
        except (OSError, ValueError) as e:
            logger.error("Error saving todos to %s: %s", self.file_path, e)

    def load_todo_items(self) -> list[TodoItem]:
        """Read the todo file, returning an empty list if it is missing or unreadable."""
        if not self.file_path.exists():
            return []
        try:
            return load_todo_items(self.file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError, PersistenceError) as e:
            logger.error("Error loading todos from %s: %s", self.file_path, e)
            return []

    def update_completion_status(self, appointment_id: str, is_completed: bool) -> bool:
        """Set the completion flag of one item directly in the todo file.

        This only touches the todo file; the store's properties record is
        left as it is.

        :return: True if an item with that id was found and saved.
        """
        todos = self.load_todo_items()
        for item in todos:
            if item.appointment_id == appointment_id:
                item.is_completed = is_completed
                self.save_todo_items(todos)
                return True
        logger.warning("No todo item for appointment %s in %s", appointment_id, self.file_path)
        return False


def split_by_completion(items: t.Iterable[TodoItem]) -> tuple[list[TodoItem], list[TodoItem]]:
    """Partition todo items into (active, completed), keeping their order."""
    active: list[TodoItem] = []
    completed: list[TodoItem] = []
    for item in items:
        (completed if item.is_completed else active).append(item)
    return active, completed
