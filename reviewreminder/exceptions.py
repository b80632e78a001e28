"""Review reminder exception classes."""


class ReminderError(Exception):
    """Base exception for all review reminder errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(ReminderError):
    """Raised when configuration is invalid or missing."""

    pass


class TransportError(ReminderError):
    """Raised when an HTTP call fails or returns a non-success status."""

    def __init__(self, message: str, status: int = 500, url: str | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.url = url

    def __str__(self) -> str:
        return f"[{self.status}] {self.message}"
