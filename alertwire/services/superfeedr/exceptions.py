"""Superfeedr hub exceptions."""


class SuperfeedrError(Exception):
    """Base exception for Superfeedr hub errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SubscriptionError(SuperfeedrError):
    """Hub answered a subscribe request with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message, status_code)
        self.body = body

    @property
    def is_unauthenticated(self) -> bool:
        return self.status_code == 401


class SubscriptionTimeoutError(SuperfeedrError):
    """Subscribe request exceeded the configured timeout."""

    pass
