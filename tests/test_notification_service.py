"""Tests for outbound delivery."""

import httpx
import pytest

from app.core.exceptions import DeliveryError
from app.services.notification_service import NotificationDispatcher
from app.services.telegram_service import TelegramService


def make_telegram(handler, token="test-token"):
    return TelegramService(
        token=token,
        api_base="https://telegram.test",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


async def test_notify_plain_text(notifier, telegram_requests):
    outcome = await notifier.notify("12345", "hello")

    assert outcome.delivered
    assert outcome.message_id == 1
    method, body = telegram_requests[0]
    assert method == "sendMessage"
    assert body == {
        "chat_id": "12345",
        "text": "hello",
        "parse_mode": "HTML",
        "disable_web_page_preview": True,
    }


async def test_request_url_carries_token():
    seen = []

    def handler(request):
        seen.append(str(request.url))
        return httpx.Response(200, json={"ok": True, "result": {"message_id": 9}})

    await make_telegram(handler).send_message("1", {"text": "hi"})

    assert seen == ["https://telegram.test/bottest-token/sendMessage"]


async def test_api_error_is_an_outcome_not_an_exception():
    def handler(request):
        return httpx.Response(400, json={"ok": False, "description": "Bad Request: chat not found"})

    outcome = await NotificationDispatcher(make_telegram(handler)).notify("1", "hi")

    assert not outcome.delivered
    assert outcome.error


async def test_transport_error_is_an_outcome():
    def handler(request):
        raise httpx.ConnectError("connection refused")

    outcome = await NotificationDispatcher(make_telegram(handler)).notify("1", "hi")

    assert not outcome.delivered


async def test_timeout_is_an_outcome():
    def handler(request):
        raise httpx.ReadTimeout("timed out")

    outcome = await NotificationDispatcher(make_telegram(handler)).notify("1", "hi")

    assert not outcome.delivered
    assert "timeout" in outcome.error.lower()


async def test_unconfigured_token_raises_delivery_error():
    telegram = make_telegram(lambda request: httpx.Response(200), token="")

    with pytest.raises(DeliveryError):
        await telegram.send_message("1", {"text": "hi"})


async def test_acknowledge(notifier, telegram_requests):
    outcome = await notifier.acknowledge("q1")

    assert outcome.delivered
    assert telegram_requests == [("answerCallbackQuery", {"callback_query_id": "q1"})]


async def test_acknowledge_without_query(notifier, telegram_requests):
    outcome = await notifier.acknowledge(None)

    assert not outcome.delivered
    assert telegram_requests == []
