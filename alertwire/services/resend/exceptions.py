"""Resend email service exceptions."""


class ResendError(Exception):
    """Base Resend exception."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ResendConfigError(ResendError):
    """Config error."""

    pass
