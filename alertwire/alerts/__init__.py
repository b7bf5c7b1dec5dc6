from .directory import Contact, UserDirectory
from .lifecycle import AlertLifecycleManager, AlertView, create_lifecycle_manager

__all__ = [
    "AlertLifecycleManager",
    "AlertView",
    "Contact",
    "UserDirectory",
    "create_lifecycle_manager",
]
