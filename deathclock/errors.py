"""
deathclock/errors.py

Exception hierarchy for the countdown engine.

Persistence errors are raised internally by the store's file helpers and
caught at the store boundary, where they are logged. InvalidDateInput is
the only error that reaches a user.
"""


class DeathClockError(Exception):
    """Base exception for countdown engine errors."""
    pass


class PersistenceError(DeathClockError):
    """
    Base exception for preferences file errors.

    Attributes:
        path: The backing file involved, if known.
    """

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class PersistenceReadError(PersistenceError):
    """
    Preferences file could not be read or decoded.

    Raised when:
    - File is missing or unreadable
    - Content is not valid JSON
    - Top-level value is not a JSON object
    """
    pass


class PersistenceWriteError(PersistenceError):
    """
    Preferences file could not be written.

    The previous on-disk copy is left untouched.
    """
    pass


class InvalidDateInput(DeathClockError, ValueError):
    """
    User supplied a target date that is unparseable or not in the future.

    Attributes:
        message: Short, user-facing rejection text.
        text: The raw input that was rejected.
    """

    def __init__(self, message: str, text: str = ""):
        super().__init__(message)
        self.message = message
        self.text = text


class ConfigError(DeathClockError):
    """Service configuration file is missing or invalid."""
    pass
