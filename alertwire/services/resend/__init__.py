from .client import ResendClient, create_resend_client
from .config import ResendConfig
from .exceptions import ResendConfigError, ResendError
from .models import EmailMessage

__all__ = [
    "ResendClient",
    "create_resend_client",
    "ResendConfig",
    "ResendConfigError",
    "ResendError",
    "EmailMessage",
]
