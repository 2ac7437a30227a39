"""Typed inbound message model and task handle.

WHY: Telegram messages are loosely shaped — a message "is" a voice note
only because its voice field happens to be set. The pipeline should never
probe raw fields. This module defines an explicit tagged union of payload
kinds that the Telegram adapter produces at the boundary.

HOW: Frozen dataclasses, one per payload kind. Payload is the union of
all of them; the pipeline dispatches with isinstance checks.

RULES:
- InboundMessage lives only for the handling of one update
- mime_type is None when Telegram did not report one
- AudioPayload.file_name is the uploader's original name, if any
- OtherPayload.kind is a short label for logging only
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Sender:
    """Who sent the message. username is None for accounts without a handle."""

    id: int
    username: str | None = None


@dataclass(frozen=True)
class TextPayload:
    text: str


@dataclass(frozen=True)
class VoicePayload:
    file_ref: str
    mime_type: str | None = None


@dataclass(frozen=True)
class AudioPayload:
    file_ref: str
    mime_type: str | None = None
    file_name: str | None = None


@dataclass(frozen=True)
class OtherPayload:
    kind: str = "other"


Payload = Union[TextPayload, VoicePayload, AudioPayload, OtherPayload]


@dataclass(frozen=True)
class InboundMessage:
    """One chat message, already classified by payload kind."""

    chat_id: int
    sender: Sender
    payload: Payload


@dataclass(frozen=True)
class TaskHandle:
    """Identifier of a created task page (Notion page UUID)."""

    id: str
