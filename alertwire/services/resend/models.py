"""Resend email models."""

from pydantic import BaseModel, Field


class EmailMessage(BaseModel):
    """Payload for POST /emails."""

    from_address: str = Field(serialization_alias="from")
    to: list[str]
    subject: str
    html: str
    text: str

    def to_api(self) -> dict:
        return self.model_dump(by_alias=True)
