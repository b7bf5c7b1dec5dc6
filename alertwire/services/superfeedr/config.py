"""Superfeedr hub config."""

from pydantic import BaseModel


class SuperfeedrConfig(BaseModel):
    """Superfeedr hub config."""

    hub_url: str = "https://push.superfeedr.com"
    track_url: str = "http://track.superfeedr.com/"
    callback_url: str = ""
    login: str = ""
    token: str = ""
    timeout_seconds: float = 10.0

    @property
    def has_credentials(self) -> bool:
        return bool(self.login and self.token)
