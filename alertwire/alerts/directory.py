"""User directory and entitlement lookups backed by the user_contacts table."""

from __future__ import annotations

import logging
from typing import Sequence

from pydantic import BaseModel

from alertwire.config import AlertsConfig
from alertwire.storage.registry import WebhookRegistry

logger = logging.getLogger(__name__)

UNLIMITED = -1


class Contact(BaseModel):
    """Where to deliver notifications for one user."""

    user_id: str
    email: str | None = None
    phone_number: str | None = None
    tier: str = "FREE"

    @property
    def has_phone(self) -> bool:
        return bool(self.phone_number)


class UserDirectory:
    """Resolves users to contact details and tier-based alert limits."""

    def __init__(self, registry: WebhookRegistry, config: AlertsConfig | None = None):
        self.registry = registry
        self.config = config or AlertsConfig()

    async def get_contacts(self, user_ids: Sequence[str]) -> dict[str, Contact]:
        rows = await self.registry.get_contacts(user_ids)
        return {
            user_id: Contact(
                user_id=row.user_id,
                email=row.email,
                phone_number=row.phone_number,
                tier=row.tier or self.config.default_tier,
            )
            for user_id, row in rows.items()
        }

    async def get_contact(self, user_id: str) -> Contact | None:
        return (await self.get_contacts([user_id])).get(user_id)

    async def save_contact(
        self,
        user_id: str,
        email: str | None,
        phone_number: str | None = None,
        tier: str | None = None,
    ) -> Contact:
        row = await self.registry.upsert_contact(user_id, email, phone_number, tier)
        return Contact(
            user_id=row.user_id,
            email=row.email,
            phone_number=row.phone_number,
            tier=row.tier,
        )

    async def get_tier(self, user_id: str) -> str:
        contact = await self.get_contact(user_id)
        return contact.tier if contact else self.config.default_tier

    async def get_alert_limit(self, user_id: str) -> int:
        """Max alerts for the user's tier; -1 means unlimited."""
        tier = (await self.get_tier(user_id)).upper()
        limits = self.config.tier_limits
        if tier in limits:
            return limits[tier]
        logger.warning(f"Unknown tier {tier!r} for {user_id}, using {self.config.default_tier}")
        return limits.get(self.config.default_tier.upper(), UNLIMITED)
