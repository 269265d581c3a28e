# -*- coding: utf-8 -*-
"""Tests for the scheduler command line interface."""
import logging
from datetime import datetime

import pytest
from click.testing import CliRunner

from scheduler_cli.run import format_datetime_human, main, truncate_title
from scheduler_server.coordinator import Coordinator


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def invoke(tmp_path):
    runner = CliRunner()

    def _invoke(*args, **kwargs):
        return runner.invoke(main, ["--data-dir", str(tmp_path), *args], **kwargs)

    return _invoke


def _reopen(tmp_path) -> Coordinator:
    return Coordinator.from_data_dir(tmp_path)


def test_add_event_persists(invoke, tmp_path):
    result = invoke("add-event", "Standup", "--start", "2024-01-15T09:00:00", "--end", "2024-01-15T10:00:00",
                    "--color", "green")

    assert result.exit_code == 0, result.output
    assert "Created event" in result.output

    events = _reopen(tmp_path).get_all_events()
    assert [e.subject for e in events] == ["Standup"]
    assert events[0].background.to_hex() == "#FF008000"


def test_add_dated_task_without_calendar_slot(invoke, tmp_path):
    result = invoke("add-event", "Report", "-s", "2024-01-15T09:00:00", "-e", "2024-01-15T10:00:00",
                    "--task", "--no-date")

    assert result.exit_code == 0, result.output
    coordinator = _reopen(tmp_path)
    appointment = coordinator.get_all_events()[0]
    props = coordinator.get_event_properties(appointment.id)
    assert (props.has_date, props.is_event) == (False, False)
    assert coordinator.events_with_dates == []


@pytest.mark.parametrize(
    "args",
    [
        ("add-event", "Backwards", "-s", "2024-01-15T10:00:00", "-e", "2024-01-15T09:00:00"),
        ("add-event", "Colorful", "-s", "2024-01-15T09:00:00", "-e", "2024-01-15T10:00:00", "-c", "mauve"),
        ("add-task", "   "),
    ],
)
def test_invalid_input_exits_with_error(invoke, tmp_path, args):
    result = invoke(*args)

    assert result.exit_code == 1
    assert _reopen(tmp_path).get_all_events() == []


def test_task_lifecycle(invoke, tmp_path):
    assert invoke("add-task", "Buy milk").exit_code == 0
    task_id = _reopen(tmp_path).get_all_events()[0].id

    assert invoke("complete", task_id).exit_code == 0
    assert _reopen(tmp_path).get_completion_status() == {task_id: True}

    result = invoke("todos", "--status", "completed")
    assert result.exit_code == 0
    assert "Buy milk" in result.output

    assert invoke("toggle", task_id).exit_code == 0
    assert _reopen(tmp_path).get_active_todo_items()[0].appointment_id == task_id

    assert invoke("complete", task_id, "--undo").exit_code == 0
    assert _reopen(tmp_path).get_completion_status() == {task_id: False}


def test_remove_requires_confirmation(invoke, tmp_path):
    invoke("add-task", "Buy milk")
    task_id = _reopen(tmp_path).get_all_events()[0].id

    declined = invoke("remove", task_id, input="n\n")
    assert declined.exit_code == 0
    assert len(_reopen(tmp_path).get_all_events()) == 1

    assert invoke("remove", task_id, "--yes").exit_code == 0
    coordinator = _reopen(tmp_path)
    assert coordinator.get_all_events() == []
    assert coordinator.load_todo_mirror() == []


def test_remove_unknown_id_is_not_an_error(invoke):
    result = invoke("remove", "missing", "--yes")

    assert result.exit_code == 0
    assert "No item" in result.output


def test_listing_commands(invoke):
    assert "No events found" in invoke("list").output

    invoke("add-event", "Standup", "-s", "2024-01-15T09:00:00", "-e", "2024-01-15T10:00:00")

    assert invoke("list").exit_code == 0
    assert invoke("list", "--with-dates").exit_code == 0
    assert "Nothing scheduled" in invoke("day", "2024-01-16").output
    assert invoke("day", "2024-01-15").exit_code == 0


def test_helpers():
    assert format_datetime_human(datetime(2024, 1, 5, 9, 30)) == "01/05 09:30"
    assert truncate_title("short") == "short"
    assert truncate_title("x" * 50) == "x" * 42 + "..."


@pytest.mark.parametrize("command", ["complete", "toggle"])
def test_completion_commands_reject_unknown_ids(invoke, tmp_path, command):
    result = invoke(command, "missing")

    assert result.exit_code == 1
    assert "marked" not in result.output and "is now" not in result.output
    assert _reopen(tmp_path).get_completion_status() == {}
