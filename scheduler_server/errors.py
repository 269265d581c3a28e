# -*- coding: utf-8 -*-
"""Exceptions raised by the scheduler core."""


class SchedulerError(Exception):
    """Base class for scheduler errors."""


class ValidationError(SchedulerError, ValueError):
    """Rejected input: blank subject or an end time not after the start time."""


class PersistenceError(SchedulerError, RuntimeError):
    """Reading or writing one of the JSON data files failed."""
