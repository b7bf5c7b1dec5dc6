"""Channel delivery result shared by the email and SMS clients."""

from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, Field


class Channel(StrEnum):
    EMAIL = "email"
    SMS = "sms"


class DeliveryResult(BaseModel):
    """Outcome of one channel send. Senders return this instead of raising."""

    success: bool
    channel: Channel
    recipient: str
    provider_message_id: str | None = None
    sent_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    error: str | None = None

    def __str__(self) -> str:
        """Human-readable status."""
        if self.success:
            return f"Sent {self.channel} to {self.recipient} (id: {self.provider_message_id})"
        return f"Failed {self.channel} to {self.recipient}: {self.error}"
