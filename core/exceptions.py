"""
Habit Ledger exception hierarchy.

- LedgerError: base class for every known error
- ConfigError: configuration file problems
- StoreError: Ledger Store request failures
- MalformedDataError: store returned data that cannot be parsed
- UnknownTaskError / UnknownGoalError / InvalidDayIndexError: bad toggle input
"""
from typing import Optional


class LedgerError(Exception):
    """Habit Ledger base exception.

    Every expected error in the system derives from this class,
    so catching it handles all anticipated failure cases.
    """

    def __init__(self, message: str, hint: Optional[str] = None):
        """
        Args:
            message: error description
            hint: suggested action for the user
        """
        super().__init__(message)
        self.message = message
        self.hint = hint

    def get_user_message(self) -> str:
        """Return a user friendly message."""
        if self.hint:
            return f"{self.message}\nHint: {self.hint}"
        return self.message


class ConfigError(LedgerError):
    """Configuration file is missing, malformed or holds illegal values."""

    def __init__(self, message: str, config_path: Optional[str] = None):
        hint = f"Check the config file: {config_path}" if config_path else "Check the config file format"
        super().__init__(message, hint)
        self.config_path = config_path


class StoreError(LedgerError):
    """A request to the Ledger Store failed."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        status_code: Optional[int] = None,
        hint: Optional[str] = None,
    ):
        self.operation = operation or "unknown"
        self.status_code = status_code
        super().__init__(f"[{self.operation}] {message}", hint)


class StoreConnectionError(StoreError):
    """The Ledger Store could not be reached."""

    def __init__(self, operation: Optional[str] = None, endpoint: Optional[str] = None):
        super().__init__(
            "Cannot connect to the ledger store",
            operation=operation,
            hint=f"Make sure the ledger server is running at {endpoint}" if endpoint else None,
        )
        self.endpoint = endpoint


class StoreTimeoutError(StoreError):
    """The Ledger Store did not answer in time."""

    def __init__(self, operation: Optional[str] = None, timeout_seconds: Optional[float] = None):
        message = "Ledger store request timed out"
        if timeout_seconds:
            message = f"Ledger store request timed out ({timeout_seconds}s)"
        super().__init__(message, operation=operation, hint="Retry later")
        self.timeout_seconds = timeout_seconds


class MalformedDataError(LedgerError):
    """Store data has the wrong shape."""

    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(message, hint="The ledger data may be corrupted")
        self.raw = raw


class UnknownTaskError(LedgerError):
    """Toggle or delete referenced a task that is not in the working copy."""

    def __init__(self, task_id: str):
        super().__init__(f"Unknown daily task: {task_id}")
        self.task_id = task_id


class UnknownGoalError(LedgerError):
    """Toggle referenced a career goal that is not in the working copy."""

    def __init__(self, goal_id: str):
        super().__init__(f"Unknown career goal: {goal_id}")
        self.goal_id = goal_id


class InvalidDayIndexError(LedgerError):
    """Day index outside Monday (0) .. Sunday (6)."""

    def __init__(self, day_index: int):
        super().__init__(
            f"Invalid day index: {day_index}",
            hint="Use 0 (Monday) through 6 (Sunday)",
        )
        self.day_index = day_index
