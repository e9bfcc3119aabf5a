"""Tests for Telegram update parsing."""

import inspect
import warnings

from pydantic.warnings import PydanticDeprecatedSince20

from app.schemas import telegram as telegram_schema
from app.schemas.telegram import IncomingMessage, parse_telegram_update


def message_update(text="/start", key="message"):
    return {
        "update_id": 5,
        key: {
            "message_id": 1,
            "chat": {"id": 12345, "type": "private"},
            "from": {"id": 12345, "first_name": "Ada", "last_name": "Lovelace"},
            "text": text,
        },
    }


class TestParseUpdate:
    def test_text_message(self):
        message = parse_telegram_update(message_update())

        assert message.chat_id == "12345"
        assert message.name == "Ada Lovelace"
        assert message.text == "/start"
        assert message.is_command
        assert not message.is_callback
        assert message.update_id == 5

    def test_callback_query(self):
        message = parse_telegram_update({
            "update_id": 6,
            "callback_query": {
                "id": "q-1",
                "from": {"id": 12345, "username": "ada"},
                "message": {"chat": {"id": 12345}},
                "data": "join_group_3",
            },
        })

        assert message.is_callback
        assert message.callback_data == "join_group_3"
        assert message.callback_query_id == "q-1"
        assert message.name == "ada"

    def test_edited_message_is_not_input(self):
        assert parse_telegram_update(message_update("/create", key="edited_message")) is None

    def test_message_without_text(self):
        update = message_update()
        del update["message"]["text"]
        assert parse_telegram_update(update) is None

    def test_message_without_chat(self):
        update = message_update()
        del update["message"]["chat"]
        assert parse_telegram_update(update) is None


class TestIncomingMessageSchema:
    def test_schema_example(self):
        schema = IncomingMessage.model_json_schema()
        assert schema["example"]["chat_id"] == "12345"

    def test_no_deprecated_config(self):
        assert "class Config" not in inspect.getsource(telegram_schema)

        with warnings.catch_warnings():
            warnings.simplefilter("error", PydanticDeprecatedSince20)
            IncomingMessage(chat_id="1", text="hi").model_dump()
