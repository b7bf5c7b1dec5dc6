"""Market metadata lookup errors."""


class KalshiAPIError(Exception):
    """Event metadata could not be fetched."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class KalshiNotFoundError(KalshiAPIError):
    """No event with that ticker."""


class KalshiRateLimitError(KalshiAPIError):
    """Still throttled after backing off."""
