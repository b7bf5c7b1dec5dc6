"""Resend email service config."""

from pydantic import BaseModel


class ResendConfig(BaseModel):
    """Resend config."""

    api_key: str = ""
    from_address: str = "alerts@alertwire.app"
    api_base_url: str = "https://api.resend.com"
    timeout_seconds: float = 5.0

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)
