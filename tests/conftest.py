"""Shared fixtures: isolated settings, a temporary SQLite registry and fakes."""

import asyncio

import pytest

from alertwire.alerts import AlertLifecycleManager, UserDirectory
from alertwire.config import Settings
from alertwire.notifications import NotificationDispatcher
from alertwire.queries import RuleBasedQueryGenerator
from alertwire.services.delivery import Channel, DeliveryResult
from alertwire.services.superfeedr import build_topic_url
from alertwire.storage import WebhookRegistry, create_engine, create_session_factory, init_db


class FakeHub:
    """Records subscribe/unsubscribe calls instead of talking to the hub."""

    def __init__(self, subscribe_error: Exception | None = None, unsubscribe_ok: bool = True):
        self.subscribe_error = subscribe_error
        self.unsubscribe_ok = unsubscribe_ok
        self.subscribed: list[tuple[str, str]] = []
        self.unsubscribed: list[str] = []
        self.on_subscribe = None

    def topic_for(self, query: str) -> str:
        return build_topic_url(query)

    async def subscribe(self, topic: str, secret: str, callback_url: str | None = None) -> None:
        self.subscribed.append((topic, secret))
        if self.on_subscribe is not None:
            await self.on_subscribe(topic, secret)
        if self.subscribe_error is not None:
            raise self.subscribe_error

    async def unsubscribe(self, topic: str, callback_url: str | None = None) -> bool:
        self.unsubscribed.append(topic)
        return self.unsubscribe_ok


class FakeMarketLookup:
    def __init__(self, category: str | None = None, error: Exception | None = None):
        self.category = category
        self.error = error
        self.calls: list[str] = []

    async def get_event_category(self, event_ticker: str) -> str | None:
        self.calls.append(event_ticker)
        if self.error is not None:
            raise self.error
        return self.category


class FakeEmailClient:
    def __init__(self, failing: set[str] | None = None):
        self.failing = failing or set()
        self.sent: list[dict] = []

    async def send_email(self, to: str, subject: str, html: str, text: str) -> DeliveryResult:
        self.sent.append({"to": to, "subject": subject, "html": html, "text": text})
        if to in self.failing:
            return DeliveryResult(
                success=False, channel=Channel.EMAIL, recipient=to, error="Resend API error 500"
            )
        return DeliveryResult(
            success=True, channel=Channel.EMAIL, recipient=to, provider_message_id=f"em_{len(self.sent)}"
        )


class FakeSmsClient:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[tuple[str, str]] = []

    async def send_sms(self, to: str, body: str) -> DeliveryResult:
        self.sent.append((to, body))
        if self.fail:
            return DeliveryResult(success=False, channel=Channel.SMS, recipient=to, error="Twilio down")
        return DeliveryResult(success=True, channel=Channel.SMS, recipient=to, provider_message_id="SM1")


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        data_dir=tmp_path,
        environment="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'alertwire.db'}",
        app_url="https://alerts.example.com/",
        superfeedr_login="login",
        superfeedr_token="token",
        openai_api_key="",
        anthropic_api_key="",
        resend_api_key="re_test",
        twilio_account_sid="AC123",
        twilio_auth_token="secret",
        twilio_phone_number="+15550000000",
        logfire_token="",
    )


@pytest.fixture
def registry(settings) -> WebhookRegistry:
    engine = create_engine(settings.database_url)
    asyncio.run(init_db(engine))
    return WebhookRegistry(create_session_factory(engine))


@pytest.fixture
def directory(registry, settings) -> UserDirectory:
    return UserDirectory(registry, settings.alerts)


@pytest.fixture
def hub() -> FakeHub:
    return FakeHub()


@pytest.fixture
def manager(registry, hub, directory, settings) -> AlertLifecycleManager:
    return AlertLifecycleManager(
        registry=registry,
        hub=hub,
        query_generator=RuleBasedQueryGenerator(),
        directory=directory,
        settings=settings,
    )


@pytest.fixture
def email_client() -> FakeEmailClient:
    return FakeEmailClient()


@pytest.fixture
def sms_client() -> FakeSmsClient:
    return FakeSmsClient()


@pytest.fixture
def dispatcher(registry, directory, email_client, sms_client, settings) -> NotificationDispatcher:
    return NotificationDispatcher(registry, directory, email_client, sms_client, settings)


@pytest.fixture
def pro_users(directory):
    """Contacts on the PRO tier so quota never interferes."""

    async def create(*user_ids: str, phone: str | None = None) -> None:
        for user_id in user_ids:
            await directory.save_contact(user_id, f"{user_id}@example.com", phone, "PRO")

    return create


@pytest.fixture
def make_hub():
    return FakeHub


@pytest.fixture
def make_lookup():
    return FakeMarketLookup


@pytest.fixture
def make_manager(registry, directory, settings):
    """Lifecycle manager over the shared registry with custom collaborators."""

    def build(hub=None, market_lookup=None, query_generator=None) -> AlertLifecycleManager:
        return AlertLifecycleManager(
            registry=registry,
            hub=hub or FakeHub(),
            query_generator=query_generator or RuleBasedQueryGenerator(),
            directory=directory,
            market_lookup=market_lookup,
            settings=settings,
        )

    return build


@pytest.fixture
def make_email_client():
    return FakeEmailClient
