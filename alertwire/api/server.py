"""FastAPI application: hub webhook endpoints and alert management routes."""

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from alertwire import __version__
from alertwire.alerts import AlertLifecycleManager, create_lifecycle_manager
from alertwire.config import WEBHOOK_PATH, Settings, get_settings
from alertwire.exceptions import AlertError
from alertwire.notifications import Article, NotificationDispatcher
from alertwire.observability import initialize_logfire
from alertwire.queries import create_query_generator
from alertwire.services.kalshi import create_kalshi_client
from alertwire.services.resend import create_resend_client
from alertwire.services.superfeedr import create_superfeedr_client
from alertwire.services.twilio import create_twilio_client
from alertwire.storage import WebhookRegistry, create_engine, create_session_factory, init_db

from .dependencies import DispatcherDep, LifecycleDep, SettingsDep, UserIdDep
from .schemas import (
    AlertResponse,
    CreateAlertRequest,
    RemoveAlertResponse,
    TestDeliveryRequest,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create clients and services at startup; close them on shutdown."""
    if getattr(app.state, "lifecycle", None) is not None:
        yield
        return

    settings: Settings = app.state.settings
    async with AsyncExitStack() as stack:
        engine = create_engine(settings.database_url)
        stack.push_async_callback(engine.dispose)
        await init_db(engine)
        registry = WebhookRegistry(create_session_factory(engine))

        hub = await stack.enter_async_context(create_superfeedr_client(settings))
        kalshi = await stack.enter_async_context(create_kalshi_client(settings))
        email = await stack.enter_async_context(create_resend_client(settings))
        sms = await stack.enter_async_context(create_twilio_client(settings))

        lifecycle = create_lifecycle_manager(
            registry,
            hub,
            create_query_generator(settings),
            settings,
            market_lookup=kalshi,
        )
        app.state.lifecycle = lifecycle
        app.state.dispatcher = NotificationDispatcher(
            registry, lifecycle.directory, email, sms, settings
        )

        logger.info(f"Alertwire API ready (environment={settings.environment})")
        yield
        logger.info("Shutting down Alertwire API")


async def _alert_error_handler(request: Request, exc: AlertError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.message},
    )


def create_app(
    settings: Settings | None = None,
    lifecycle: AlertLifecycleManager | None = None,
    dispatcher: NotificationDispatcher | None = None,
) -> FastAPI:
    """Build the app. Passing services skips creating them in the lifespan."""
    settings = settings or get_settings()

    app = FastAPI(title="Alertwire API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.lifecycle = lifecycle
    app.state.dispatcher = dispatcher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.app_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(AlertError, _alert_error_handler)

    initialize_logfire(settings, app)

    @app.get("/health")
    async def health(settings: SettingsDep):
        return {
            "status": "ok",
            "service": "alertwire",
            "version": __version__,
            "environment": settings.environment,
        }

    # ------------------------------------------------------------------
    # Hub webhook
    # ------------------------------------------------------------------

    @app.get(WEBHOOK_PATH)
    async def verify_hub(challenge: str | None = Query(default=None, alias="hub.challenge")):
        """Push-protocol handshake: echo the challenge back."""
        if challenge:
            return PlainTextResponse(challenge)
        return {"status": "Superfeedr webhook endpoint"}

    @app.post(WEBHOOK_PATH)
    async def receive_delivery(request: Request, dispatcher: DispatcherDep):
        raw_body = await request.body()
        signature = request.headers.get("X-Hub-Signature")
        status_code, body = await dispatcher.handle_delivery(raw_body, signature)
        return JSONResponse(status_code=status_code, content=body)

    @app.post(f"{WEBHOOK_PATH}/test")
    async def test_delivery(
        payload: TestDeliveryRequest,
        settings: SettingsDep,
        dispatcher: DispatcherDep,
    ):
        """Unsigned synthetic delivery, for development only."""
        if not settings.webhook_test_enabled:
            return JSONResponse(
                status_code=403,
                content={"error": "Test endpoint disabled in production"},
            )
        if not payload.event_ticker:
            return JSONResponse(status_code=400, content={"error": "eventTicker is required"})

        article = None
        if payload.article is not None:
            given = payload.article
            article = Article(
                title=given.title or f"Test Alert: {payload.event_ticker}",
                summary=given.summary
                or "This is a test notification to verify your webhook integration is working correctly.",
                url=given.url or "https://example.com/test-article",
                source=given.source or "Webhook Test",
                published_at=datetime.now(timezone.utc),
            )
        return await dispatcher.send_test_notification(payload.event_ticker, article)

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    @app.get("/api/alerts", response_model=list[AlertResponse])
    async def list_alerts(user_id: UserIdDep, lifecycle: LifecycleDep):
        views = await lifecycle.list_alerts(user_id)
        return [AlertResponse.model_validate(view.model_dump()) for view in views]

    @app.post("/api/alerts", response_model=AlertResponse, status_code=201)
    async def add_alert(
        payload: CreateAlertRequest,
        user_id: UserIdDep,
        lifecycle: LifecycleDep,
    ):
        alert = await lifecycle.add_alert(user_id, payload.market_ticker, payload.event_title)
        return AlertResponse(
            id=alert.id,
            market_ticker=alert.market_ticker,
            event_ticker=alert.event_ticker,
            status=alert.status,
            created_at=alert.created_at,
            event_title=payload.event_title,
        )

    @app.delete("/api/alerts/{alert_id}", response_model=RemoveAlertResponse)
    async def remove_alert(alert_id: str, user_id: UserIdDep, lifecycle: LifecycleDep):
        await lifecycle.remove_alert(user_id, alert_id)
        return RemoveAlertResponse()

    @app.post("/api/alerts/{alert_id}/toggle", response_model=AlertResponse)
    async def toggle_alert(alert_id: str, user_id: UserIdDep, lifecycle: LifecycleDep):
        alert = await lifecycle.toggle_alert(user_id, alert_id)
        return AlertResponse(
            id=alert.id,
            market_ticker=alert.market_ticker,
            event_ticker=alert.event_ticker,
            status=alert.status,
            created_at=alert.created_at,
        )

    return app
