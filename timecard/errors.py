from __future__ import annotations


class TimecardError(Exception):
    """Base class for failures surfaced by the timecard engine."""


class InputValidationError(TimecardError, ValueError):
    """Input rejected before any computation ran."""


class FetchError(TimecardError):
    """The event source could not be read."""


class ExportError(TimecardError):
    """An export could not be produced; nothing was written."""
