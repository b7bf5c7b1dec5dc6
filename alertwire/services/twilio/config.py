"""Twilio SMS service config."""

from pydantic import BaseModel


class TwilioConfig(BaseModel):
    """Twilio config."""

    account_sid: str = ""
    auth_token: str = ""
    from_number: str = ""
    api_base_url: str = "https://api.twilio.com/2010-04-01"
    timeout_seconds: float = 5.0

    @property
    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)
