"""User-actionable alert errors.

Each error carries a stable machine-readable ``code`` and the HTTP status the
API layer answers with.
"""


class AlertError(Exception):
    """Typed error surfaced synchronously to the caller of an alert operation."""

    code: str = "alert_error"
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MalformedTickerError(AlertError):
    """Ticker does not have at least a series and an event segment."""

    code = "malformed_ticker"
    status_code = 400


class CategoryUnsupportedError(AlertError):
    """Market belongs to a blocked category."""

    code = "unsupported_category"
    status_code = 400


class DuplicateAlertError(AlertError):
    """User already has an alert for this market."""

    code = "already_exists"
    status_code = 409


class AlertQuotaExceededError(AlertError):
    """User is at the alert limit for their tier."""

    code = "quota_exceeded"
    status_code = 403


class NotFoundError(AlertError):
    code = "not_found"
    status_code = 404


class ForbiddenError(AlertError):
    code = "forbidden"
    status_code = 403


class SubscriptionUnavailableError(AlertError):
    """Hub subscribe failed hard or timed out; nothing was persisted."""

    code = "try_again"
    status_code = 503
