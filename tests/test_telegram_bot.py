"""Tests for the Telegram adapter, update handlers, and application factory.

WHY: The adapter is the only code that reads raw Telegram fields; if it
misclassifies a message, the pipeline does the wrong thing with it. The
handlers and factory decide what reaches the pipeline at all.

HOW: Telegram Message and Update objects are stood in for with
SimpleNamespace, telegram.Bot with AsyncMock. create_app() is built with a
fake token; nothing connects to Telegram until the app is initialized.

RULES:
- No real Telegram, Notion, or Groq calls
- Each test is independent
"""

from __future__ import annotations

import asyncio
import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from telegram.constants import ParseMode
from telegram.ext import CommandHandler, MessageHandler

from notion_taskbot.chat.adapter import TelegramChat, to_inbound_message, to_payload
from notion_taskbot.chat.bot import (
    GROQ_KEY,
    PIPELINE_KEY,
    REPOSITORY_KEY,
    create_app,
    handle_error,
    handle_message,
    handle_start,
)
from notion_taskbot.config import Settings
from notion_taskbot.core.models import (
    AudioPayload,
    InboundMessage,
    OtherPayload,
    Sender,
    TextPayload,
    VoicePayload,
)
from notion_taskbot.core.pipeline import Outcome, TaskPipeline


def _tg_message(**fields):
    """A Telegram-like message with every content field empty by default."""
    defaults = dict(
        text=None,
        voice=None,
        audio=None,
        photo=None,
        video=None,
        video_note=None,
        document=None,
        animation=None,
        sticker=None,
        location=None,
        contact=None,
        poll=None,
        chat_id=2000,
        from_user=SimpleNamespace(id=2000, username="alice"),
    )
    defaults.update(fields)
    return SimpleNamespace(**defaults)


# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------


class TestToPayload:
    def test_text(self):
        assert to_payload(_tg_message(text="Buy milk")) == TextPayload("Buy milk")

    def test_empty_text_is_still_text(self):
        assert to_payload(_tg_message(text="")) == TextPayload("")

    def test_voice(self):
        voice = SimpleNamespace(file_id="VOICE_1", mime_type="audio/ogg")
        assert to_payload(_tg_message(voice=voice)) == VoicePayload("VOICE_1", "audio/ogg")

    def test_audio(self):
        audio = SimpleNamespace(file_id="AUDIO_1", mime_type="audio/mpeg", file_name="call.mp3")
        assert to_payload(_tg_message(audio=audio)) == AudioPayload("AUDIO_1", "audio/mpeg", "call.mp3")

    def test_photo_is_other(self):
        assert to_payload(_tg_message(photo=[object()])) == OtherPayload("photo")

    def test_unknown_is_other(self):
        assert to_payload(_tg_message()) == OtherPayload("other")


class TestToInboundMessage:
    def test_converts(self):
        inbound = to_inbound_message(_tg_message(text="hi", chat_id=-100500))
        assert inbound == InboundMessage(
            chat_id=-100500,
            sender=Sender(id=2000, username="alice"),
            payload=TextPayload("hi"),
        )

    def test_missing_username_kept_as_none(self):
        inbound = to_inbound_message(_tg_message(text="hi", from_user=SimpleNamespace(id=7, username=None)))
        assert inbound.sender == Sender(id=7, username=None)

    def test_no_sender(self):
        assert to_inbound_message(_tg_message(text="hi", from_user=None)) is None


class TestTelegramChat:
    def test_send_message_uses_html(self):
        bot = AsyncMock()
        asyncio.run(TelegramChat(bot).send_message(42, "<b>hi</b>"))
        bot.send_message.assert_awaited_once_with(chat_id=42, text="<b>hi</b>", parse_mode=ParseMode.HTML)

    def test_resolve_file_url(self):
        bot = AsyncMock()
        bot.get_file.return_value = SimpleNamespace(file_path="https://api.telegram.org/file/botX/v.oga")

        url = asyncio.run(TelegramChat(bot).resolve_file_url("VOICE_1"))

        assert url == "https://api.telegram.org/file/botX/v.oga"
        bot.get_file.assert_awaited_once_with("VOICE_1")

    def test_resolve_without_path(self):
        bot = AsyncMock()
        bot.get_file.return_value = SimpleNamespace(file_path=None)
        with pytest.raises(RuntimeError, match="VOICE_1"):
            asyncio.run(TelegramChat(bot).resolve_file_url("VOICE_1"))


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _context(pipeline=None):
    return SimpleNamespace(bot_data={PIPELINE_KEY: pipeline}, error=None)


class TestHandleMessage:
    def test_routes_to_pipeline(self):
        pipeline = AsyncMock()
        pipeline.handle.return_value = Outcome.DONE
        update = SimpleNamespace(effective_message=_tg_message(text="Buy milk"))

        asyncio.run(handle_message(update, _context(pipeline)))

        inbound = pipeline.handle.await_args.args[0]
        assert inbound.payload == TextPayload("Buy milk")
        assert inbound.sender.username == "alice"

    def test_ignores_update_without_message(self):
        pipeline = AsyncMock()
        asyncio.run(handle_message(SimpleNamespace(effective_message=None), _context(pipeline)))
        pipeline.handle.assert_not_awaited()

    def test_ignores_message_without_sender(self):
        pipeline = AsyncMock()
        update = SimpleNamespace(effective_message=_tg_message(text="post", from_user=None))
        asyncio.run(handle_message(update, _context(pipeline)))
        pipeline.handle.assert_not_awaited()

    def test_pipeline_error_propagates(self):
        pipeline = AsyncMock()
        pipeline.handle.side_effect = RuntimeError("notion down")
        update = SimpleNamespace(effective_message=_tg_message(text="Buy milk"))
        with pytest.raises(RuntimeError):
            asyncio.run(handle_message(update, _context(pipeline)))


class TestHandleStart:
    def test_replies_with_id(self):
        message = SimpleNamespace(reply_text=AsyncMock())
        update = SimpleNamespace(effective_user=SimpleNamespace(id=4242), effective_message=message)

        asyncio.run(handle_start(update, _context()))

        text = message.reply_text.await_args.args[0]
        assert "<code>4242</code>" in text
        assert message.reply_text.await_args.kwargs["parse_mode"] == ParseMode.HTML

    def test_no_user(self):
        message = SimpleNamespace(reply_text=AsyncMock())
        update = SimpleNamespace(effective_user=None, effective_message=message)
        asyncio.run(handle_start(update, _context()))
        message.reply_text.assert_not_awaited()


class TestHandleError:
    def test_logs_error(self, caplog):
        context = SimpleNamespace(error=RuntimeError("boom"))
        with caplog.at_level(logging.ERROR, logger="notion_taskbot.chat.bot"):
            asyncio.run(handle_error(object(), context))

        record = caplog.records[-1]
        assert "Failed to handle update" in record.getMessage()
        assert record.exc_info[1] is context.error


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def _settings(groq_token=None):
    return Settings(
        telegram_bot_token="123:ABC",
        notion_token="secret_notion",
        notion_task_db="db-123",
        owner_id=1000,
        allow_ids=frozenset({2000}),
        groq_token=groq_token,
    )


class TestCreateApp:
    def test_handlers_registered(self):
        app = create_app(_settings())

        handlers = app.handlers[0]
        assert isinstance(handlers[0], CommandHandler)
        assert "start" in handlers[0].commands
        assert isinstance(handlers[1], MessageHandler)
        assert app.error_handlers

    def test_pipeline_without_groq(self):
        app = create_app(_settings())

        pipeline = app.bot_data[PIPELINE_KEY]
        assert isinstance(pipeline, TaskPipeline)
        assert app.bot_data[GROQ_KEY] is None
        assert app.bot_data[REPOSITORY_KEY] is not None
        assert pipeline.is_authorized(1000)
        assert pipeline.is_authorized(2000)
        assert not pipeline.is_authorized(3000)

    def test_groq_client_when_configured(self):
        app = create_app(_settings(groq_token="gsk_test"))
        assert app.bot_data[GROQ_KEY] is not None
