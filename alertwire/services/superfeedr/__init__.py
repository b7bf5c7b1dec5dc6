from .client import (
    SuperfeedrClient,
    build_topic_url,
    compute_signature,
    create_superfeedr_client,
    generate_secret,
    verify_signature,
)
from .config import SuperfeedrConfig
from .exceptions import SubscriptionError, SubscriptionTimeoutError, SuperfeedrError
from .models import HubActor, HubItem, HubMode, HubNotification, HubStatus

__all__ = [
    "SuperfeedrClient",
    "SuperfeedrConfig",
    "SuperfeedrError",
    "SubscriptionError",
    "SubscriptionTimeoutError",
    "HubActor",
    "HubItem",
    "HubMode",
    "HubNotification",
    "HubStatus",
    "build_topic_url",
    "compute_signature",
    "create_superfeedr_client",
    "generate_secret",
    "verify_signature",
]
