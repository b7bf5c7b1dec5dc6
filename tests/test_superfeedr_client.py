"""Tests for the Superfeedr hub client and signature helpers."""

import asyncio
import hashlib
import hmac
from urllib.parse import parse_qs

import httpx
import pytest

from alertwire.services.superfeedr import (
    SubscriptionError,
    SubscriptionTimeoutError,
    SuperfeedrClient,
    SuperfeedrConfig,
    build_topic_url,
    compute_signature,
    create_superfeedr_client,
    generate_secret,
    verify_signature,
)

BODY = b'{"status":{"feed":"http://track.superfeedr.com/?query=x"},"items":[]}'
SECRET = "0123456789abcdef0123456789abcdef"


def _config() -> SuperfeedrConfig:
    return SuperfeedrConfig(
        callback_url="https://alerts.example.com/api/webhooks/superfeedr",
        login="login",
        token="token",
        timeout_seconds=1.0,
    )


def _run_with(handler, action):
    async def run():
        async with SuperfeedrClient(_config(), transport=httpx.MockTransport(handler)) as client:
            return await action(client)

    return asyncio.run(run())


def test_signature_round_trip() -> None:
    header = "sha1=" + hmac.new(SECRET.encode(), BODY, hashlib.sha1).hexdigest()

    assert compute_signature(BODY, SECRET) == header
    assert verify_signature(BODY, header, SECRET) is True
    assert verify_signature(BODY.decode(), header, SECRET) is True


def test_signature_rejects_mutations() -> None:
    header = compute_signature(BODY, SECRET)

    assert verify_signature(BODY[:-1] + b"]", header, SECRET) is False
    assert verify_signature(BODY, header, SECRET[:-1] + "0") is False


@pytest.mark.parametrize(
    "header",
    [None, "", "md5=abc", "sha1=", "sha1=zz", "sha256=" + "0" * 40, "sha1=ünïcode" + "0" * 30],
)
def test_malformed_signature_headers_return_false(header) -> None:
    assert verify_signature(BODY, header, SECRET) is False


def test_generate_secret_is_random_hex() -> None:
    first, second = generate_secret(), generate_secret()

    assert len(first) == 32
    int(first, 16)
    assert first != second


def test_topic_url_encodes_like_encode_uri_component() -> None:
    topic = build_topic_url('("federal reserve" | "fed rate") -"all time" popularity:medium')

    assert topic == (
        "http://track.superfeedr.com/?query="
        "(%22federal%20reserve%22%20%7C%20%22fed%20rate%22)%20-%22all%20time%22%20popularity%3Amedium"
    )


def test_subscribe_posts_form_with_basic_auth() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["authorization"]
        seen["form"] = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
        return httpx.Response(204)

    _run_with(handler, lambda c: c.subscribe("http://track.superfeedr.com/?query=btc", SECRET))

    assert seen["auth"].startswith("Basic ")
    assert seen["form"] == {
        "hub.mode": "subscribe",
        "hub.topic": "http://track.superfeedr.com/?query=btc",
        "hub.callback": "https://alerts.example.com/api/webhooks/superfeedr",
        "hub.secret": SECRET,
        "hub.verify": "sync",
        "format": "json",
    }


def test_subscribe_non_2xx_raises_with_status_and_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, text="Invalid topic")

    with pytest.raises(SubscriptionError) as exc_info:
        _run_with(handler, lambda c: c.subscribe("topic", SECRET))

    assert exc_info.value.status_code == 422
    assert exc_info.value.body == "Invalid topic"
    assert exc_info.value.is_unauthenticated is False


def test_subscribe_401_is_flagged_unauthenticated() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text="Unauthorized")

    with pytest.raises(SubscriptionError) as exc_info:
        _run_with(handler, lambda c: c.subscribe("topic", SECRET))

    assert exc_info.value.is_unauthenticated is True


def test_subscribe_timeout_is_distinct() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(SubscriptionTimeoutError):
        _run_with(handler, lambda c: c.subscribe("topic", SECRET))


def test_unsubscribe_success_and_failure_never_raise() -> None:
    forms = []

    def ok(request: httpx.Request) -> httpx.Response:
        forms.append(parse_qs(request.content.decode()))
        return httpx.Response(204)

    def rejected(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    assert _run_with(ok, lambda c: c.unsubscribe("topic")) is True
    assert forms[0]["hub.mode"] == ["unsubscribe"]
    assert "hub.secret" not in forms[0]
    assert _run_with(rejected, lambda c: c.unsubscribe("topic")) is False
    assert _run_with(unreachable, lambda c: c.unsubscribe("topic")) is False


def test_factory_uses_settings(settings) -> None:
    client = create_superfeedr_client(settings)

    assert client.config.callback_url == "https://alerts.example.com/api/webhooks/superfeedr"
    assert client.config.has_credentials
    assert client.topic_for("x y") == "http://track.superfeedr.com/?query=x%20y"
