"""Twilio SMS service exceptions."""


class TwilioError(Exception):
    """Base Twilio exception."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TwilioConfigError(TwilioError):
    """Config error."""

    pass
