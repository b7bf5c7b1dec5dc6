from pydantic import BaseModel


class KalshiConfig(BaseModel):
    """Public market-data endpoint used for event category checks."""

    base_url: str = "https://api.elections.kalshi.com/trade-api/v2"
    timeout_seconds: float = 5.0
    max_connections: int = 10
    max_keepalive_connections: int = 5
    max_retries: int = 2
    backoff_seconds: float = 1.0
