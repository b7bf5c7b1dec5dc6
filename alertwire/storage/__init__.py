from .database import (
    Base,
    close_db,
    create_engine,
    create_session_factory,
    get_engine,
    get_session_factory,
    init_db,
)
from .models import AlertStatus, EventWebhook, UserAlert, UserContact, WebhookStatus
from .registry import WebhookConflictError, WebhookRegistry

__all__ = [
    "Base",
    "close_db",
    "create_engine",
    "create_session_factory",
    "get_engine",
    "get_session_factory",
    "init_db",
    "AlertStatus",
    "EventWebhook",
    "UserAlert",
    "UserContact",
    "WebhookStatus",
    "WebhookConflictError",
    "WebhookRegistry",
]
