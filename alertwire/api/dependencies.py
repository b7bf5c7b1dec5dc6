"""FastAPI dependency injection: app.state holds singletons; Depends() resolves them."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request

from alertwire.alerts import AlertLifecycleManager
from alertwire.config import Settings
from alertwire.notifications import NotificationDispatcher


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_lifecycle(request: Request) -> AlertLifecycleManager:
    """Resolve the lifecycle manager created at startup."""
    return request.app.state.lifecycle


def get_dispatcher(request: Request) -> NotificationDispatcher:
    """Resolve the notification dispatcher created at startup."""
    return request.app.state.dispatcher


def get_user_id(x_user_id: Annotated[str | None, Header()] = None) -> str:
    """Caller identity, set by the authentication layer in front of this service."""
    if not x_user_id:
        raise HTTPException(401, detail="Missing X-User-Id header")
    return x_user_id


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
LifecycleDep = Annotated[AlertLifecycleManager, Depends(get_lifecycle)]
DispatcherDep = Annotated[NotificationDispatcher, Depends(get_dispatcher)]
UserIdDep = Annotated[str, Depends(get_user_id)]
