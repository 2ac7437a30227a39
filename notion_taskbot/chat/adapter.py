"""Telegram boundary: typed inbound messages and the outbound chat port.

WHY: python-telegram-bot hands us a Message object where the content kind
is implied by which optional field is set. The pipeline wants an explicit
payload variant and a tiny "send text / resolve file" interface. This
module is the only place that reads raw Telegram message fields.

HOW: to_inbound_message() probes text, voice, and audio in that order and
builds the matching payload; anything else becomes OtherPayload labelled
with the first attachment field found. TelegramChat implements the
pipeline's ChatPort on top of telegram.Bot.

RULES:
- Messages without a from_user (channel posts) are not converted (None)
- Replies are sent with ParseMode.HTML; callers pass escaped text
- resolve_file_url returns File.file_path, which PTB fills with the full
  download URL
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from telegram import Bot, Message
from telegram.constants import ParseMode

from notion_taskbot.core.models import (
    AudioPayload,
    InboundMessage,
    OtherPayload,
    Payload,
    Sender,
    TextPayload,
    VoicePayload,
)

logger = logging.getLogger(__name__)

# Attachment fields used only to label unsupported messages in logs.
_OTHER_KINDS = (
    "photo",
    "video",
    "video_note",
    "document",
    "animation",
    "sticker",
    "location",
    "contact",
    "poll",
)


def _describe_other(message: Any) -> str:
    for kind in _OTHER_KINDS:
        if getattr(message, kind, None):
            return kind
    return "other"


def to_payload(message: Message) -> Payload:
    """Classify a Telegram message into a payload variant."""
    if message.text is not None:
        return TextPayload(text=message.text)
    if message.voice:
        return VoicePayload(file_ref=message.voice.file_id, mime_type=message.voice.mime_type)
    if message.audio:
        return AudioPayload(
            file_ref=message.audio.file_id,
            mime_type=message.audio.mime_type,
            file_name=message.audio.file_name,
        )
    return OtherPayload(kind=_describe_other(message))


def to_inbound_message(message: Message) -> Optional[InboundMessage]:
    """Convert a Telegram message, or return None if it has no sender."""
    user = message.from_user
    if user is None:
        return None
    return InboundMessage(
        chat_id=message.chat_id,
        sender=Sender(id=user.id, username=user.username),
        payload=to_payload(message),
    )


class TelegramChat:
    """ChatPort implementation backed by a telegram.Bot."""

    def __init__(self, bot: Bot) -> None:
        self._bot = bot

    async def send_message(self, chat_id: int, text: str) -> None:
        await self._bot.send_message(chat_id=chat_id, text=text, parse_mode=ParseMode.HTML)

    async def resolve_file_url(self, file_ref: str) -> str:
        tg_file = await self._bot.get_file(file_ref)
        if not tg_file.file_path:
            raise RuntimeError(f"Telegram returned no download path for file {file_ref}")
        return tg_file.file_path
