from .client import KalshiClient, create_kalshi_client
from .config import KalshiConfig
from .exceptions import KalshiAPIError, KalshiNotFoundError, KalshiRateLimitError
from .models import Event

__all__ = [
    "KalshiClient",
    "create_kalshi_client",
    "KalshiConfig",
    "KalshiAPIError",
    "KalshiNotFoundError",
    "KalshiRateLimitError",
    "Event",
]
