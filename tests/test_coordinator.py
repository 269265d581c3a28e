# -*- coding: utf-8 -*-
"""Tests for the validated scheduler façade."""
import json
from datetime import date, datetime, timedelta, timezone

import pytest

from scheduler_server.coordinator import Coordinator, parse_color, parse_datetime
from scheduler_server.errors import ValidationError
from scheduler_server.models import BLUE, GREEN, PALETTE, ChangeKind, EventProperties


NINE = datetime(2024, 1, 15, 9, 0)
TEN = datetime(2024, 1, 15, 10, 0)


@pytest.fixture
def coordinator(tmp_path):
    return Coordinator.from_data_dir(tmp_path)


def _mirror_ids(tmp_path) -> list[str]:
    records = json.loads((tmp_path / "todos.json").read_text(encoding="utf-8"))
    return [record["AppointmentId"] for record in records]


class TestValidation:
    """Invalid input is rejected before anything is stored."""

    @pytest.mark.parametrize("subject", ["", "   ", "\t\n"])
    def test_blank_subject(self, coordinator, tmp_path, subject):
        with pytest.raises(ValidationError):
            coordinator.add_new_event(NINE, TEN, subject, BLUE)
        with pytest.raises(ValidationError):
            coordinator.add_task_without_date(subject)

        assert coordinator.get_all_events() == []
        assert not (tmp_path / "unified_events.json").exists()

    @pytest.mark.parametrize("end", [NINE, NINE - timedelta(minutes=1)])
    def test_end_not_after_start(self, coordinator, end):
        with pytest.raises(ValidationError):
            coordinator.add_new_event(NINE, end, "Standup", BLUE)

        assert coordinator.get_all_events() == []

    def test_invalid_update_leaves_appointment_unchanged(self, coordinator):
        appointment = coordinator.add_new_event(NINE, TEN, "Standup", BLUE)

        with pytest.raises(ValidationError):
            coordinator.update_event(appointment.id, TEN, NINE, "Standup")
        with pytest.raises(ValidationError):
            coordinator.update_event(appointment.id, NINE, TEN, " ")

        stored = coordinator.get_event(appointment.id)
        assert (stored.start, stored.end, stored.subject) == (NINE, TEN, "Standup")

    def test_every_stored_appointment_ends_after_it_starts(self, coordinator):
        coordinator.add_new_event(NINE, TEN, "Standup", BLUE)
        coordinator.add_task_without_date("Buy milk")
        coordinator.add_new_event(NINE, NINE + timedelta(seconds=1), "Blink", GREEN, is_event=False)

        assert all(a.end > a.start for a in coordinator.get_all_events())


def test_standup_and_milk_scenario(coordinator):
    """Event plus dateless task, then completing the task moves it between filters."""
    standup = coordinator.add_new_event(NINE, TEN, "Standup", BLUE)

    assert coordinator.get_all_events() == [standup]
    assert coordinator.get_event_properties(standup.id) == EventProperties(
        is_completed=False, has_date=True, is_event=True
    )

    milk = coordinator.add_task_without_date("Buy milk")
    todos = coordinator.get_all_todo_items()
    assert len(todos) == 1
    assert todos[0].appointment_id == milk.id
    assert todos[0].has_date is False
    assert [i.appointment_id for i in coordinator.get_active_todo_items()] == [milk.id]
    assert coordinator.get_completed_todo_items() == []

    coordinator.update_completion_status(milk.id, True)

    assert coordinator.get_active_todo_items() == []
    assert [i.appointment_id for i in coordinator.get_completed_todo_items()] == [milk.id]


def test_random_color_when_none_given(coordinator):
    appointment = coordinator.add_new_event(NINE, TEN, "Standup")

    assert appointment.background in PALETTE.values()


def test_dateless_flag_is_applied_after_add(coordinator):
    task = coordinator.add_new_event(NINE, TEN, "Someday", GREEN, is_completed=True, has_date=False, is_event=False)

    assert coordinator.get_event_properties(task.id) == EventProperties(
        is_completed=True, has_date=False, is_event=False
    )
    assert task not in coordinator.events_with_dates


def test_task_without_date_defaults(coordinator):
    task = coordinator.add_task_without_date("Buy milk")

    assert coordinator.get_event_properties(task.id) == EventProperties(False, False, False)
    assert coordinator.get_event_properties("unknown") == EventProperties(False, True, True)


def test_events_with_dates_is_rebuilt_after_add(coordinator):
    standup = coordinator.add_new_event(NINE, TEN, "Standup", BLUE)
    assert coordinator.events_with_dates == [standup]

    coordinator.add_task_without_date("Buy milk")
    retro = coordinator.add_new_event(NINE, TEN, "Retro", GREEN)

    assert coordinator.events_with_dates == [standup, retro]


def test_events_with_dates_follows_property_changes(coordinator):
    standup = coordinator.add_new_event(NINE, TEN, "Standup", BLUE)
    assert coordinator.events_with_dates == [standup]

    coordinator.update_event_properties(standup.id, False, False, True)
    assert coordinator.events_with_dates == []


def test_remove_cascades_to_properties_and_todo_mirror(coordinator, tmp_path):
    task = coordinator.add_new_event(NINE, TEN, "Report", BLUE, is_event=False)
    coordinator.update_completion_status(task.id, True)
    assert _mirror_ids(tmp_path) == [task.id]

    assert coordinator.remove_event(task.id) is True

    assert coordinator.get_all_events() == []
    assert task.id not in coordinator.get_completion_status()
    assert coordinator.get_all_todo_items() == []
    assert _mirror_ids(tmp_path) == []
    assert coordinator.remove_event(task.id) is False


def test_toggling_is_event_moves_item_in_and_out_of_todos(coordinator):
    standup = coordinator.add_new_event(NINE, TEN, "Standup", BLUE)
    assert coordinator.get_all_todo_items() == []

    coordinator.update_event_properties(standup.id, False, True, False)
    assert [i.appointment_id for i in coordinator.get_all_todo_items()] == [standup.id]

    coordinator.update_event_properties(standup.id, False, True, True)
    assert coordinator.get_all_todo_items() == []


def test_mirror_matches_projection_after_each_mutation(coordinator):
    standup = coordinator.add_new_event(NINE, TEN, "Standup", BLUE)
    milk = coordinator.add_task_without_date("Buy milk")
    coordinator.update_event_properties(standup.id, False, True, False)
    coordinator.toggle_completion(milk.id)
    coordinator.update_event(standup.id, NINE, TEN + timedelta(hours=1), "Long standup")

    assert coordinator.load_todo_mirror() == coordinator.get_all_todo_items()
    assert coordinator.load_todo_mirror()[0].subject == "Long standup"


def test_update_event_keeps_color_when_omitted(coordinator):
    standup = coordinator.add_new_event(NINE, TEN, "Standup", BLUE)

    assert coordinator.update_event(standup.id, NINE, TEN, "Daily") is True
    assert coordinator.get_event(standup.id).background == BLUE

    coordinator.update_event(standup.id, NINE, TEN, "Daily", GREEN)
    assert coordinator.get_event(standup.id).background == GREEN


def test_update_unknown_event_is_a_noop(coordinator):
    assert coordinator.update_event("missing", NINE, TEN, "Ghost") is False


def test_toggle_completion_flips_flag(coordinator):
    milk = coordinator.add_task_without_date("Buy milk")

    assert coordinator.toggle_completion(milk.id) is True
    assert coordinator.toggle_completion(milk.id) is False
    assert coordinator.get_completion_status() == {milk.id: False}


def test_events_by_date(coordinator):
    standup = coordinator.add_new_event(NINE, TEN, "Standup", BLUE)

    assert coordinator.get_events_by_date(date(2024, 1, 15)) == [standup]
    assert coordinator.get_events_by_date(date(2024, 1, 16)) == []


def test_timezone_is_dropped_not_converted(coordinator):
    start = datetime(2024, 1, 15, 9, 0, tzinfo=timezone(timedelta(hours=2)))
    appointment = coordinator.add_new_event(start, start + timedelta(hours=1), "Call", BLUE)

    assert appointment.start == NINE
    assert appointment.start.tzinfo is None


def test_state_survives_restart(coordinator, tmp_path):
    standup = coordinator.add_new_event(NINE, TEN, "Standup", BLUE)
    milk = coordinator.add_task_without_date("Buy milk")
    coordinator.update_completion_status(milk.id, True)

    reopened = Coordinator.from_data_dir(tmp_path)

    assert [a.id for a in reopened.get_all_events()] == [standup.id, milk.id]
    assert reopened.get_completed_todo_items()[0].appointment_id == milk.id
    assert reopened.load_todo_mirror() == reopened.get_all_todo_items()


class TestNotifications:
    """Subscribers hear about every successful mutation."""

    def test_notifications_for_each_mutation(self, coordinator):
        received = []
        coordinator.subscribe(received.append)

        standup = coordinator.add_new_event(NINE, TEN, "Standup", BLUE)
        coordinator.update_event(standup.id, NINE, TEN, "Daily")
        coordinator.toggle_completion(standup.id)
        coordinator.remove_event(standup.id)
        coordinator.remove_event(standup.id)

        assert [(n.kind, n.appointment_id) for n in received] == [
            (ChangeKind.ADDED, standup.id),
            (ChangeKind.UPDATED, standup.id),
            (ChangeKind.UPDATED, standup.id),
            (ChangeKind.REMOVED, standup.id),
        ]

    def test_failed_validation_notifies_nobody(self, coordinator):
        received = []
        coordinator.subscribe(received.append)

        with pytest.raises(ValidationError):
            coordinator.add_new_event(TEN, NINE, "Backwards", BLUE)

        assert received == []

    def test_unsubscribe(self, coordinator):
        received = []
        unsubscribe = coordinator.subscribe(received.append)
        unsubscribe()

        coordinator.add_task_without_date("Buy milk")

        assert received == []


def test_parse_helpers():
    assert parse_datetime("2024-01-15T09:00:00") == NINE
    assert parse_datetime("2024-01-15T09:00:00Z") == NINE
    assert parse_color("") is None
    assert parse_color("blue") == BLUE
    with pytest.raises(ValidationError):
        parse_datetime("next tuesday")
    with pytest.raises(ValidationError):
        parse_color("mauve")
