"""
Error hierarchy for the leave notifier.

Each error carries the HTTP status a front end should answer with, so the
trigger API and the scheduled-event handler can map failures without
knowing every subclass.
"""


class LeaveNotifierError(Exception):
    """Base class for every error raised by the notifier."""
    http_code = 500

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# configuration

class ConfigError(LeaveNotifierError):
    """A credential, endpoint or list id is missing."""
    http_code = 500


class AuthError(ConfigError):
    """No task-tracker API token is configured."""


# caller input

class InputValidationError(LeaveNotifierError, ValueError):
    """Malformed request input."""
    http_code = 400


class InvalidDateFormat(InputValidationError):
    """A date parameter is not a valid YYYY-MM-DD calendar date."""

    def __init__(self, value: str):
        super().__init__("Invalid date format. Use YYYY-MM-DD", {"value": value})


# collaborators

class UpstreamError(LeaveNotifierError):
    """The task-tracker API answered with a non-success status."""
    http_code = 502


class UpstreamUnavailable(UpstreamError):
    """The task-tracker API could not be reached at all."""
    http_code = 503


class DeliveryError(LeaveNotifierError):
    """The chat webhook rejected or never received a message."""
    http_code = 502
