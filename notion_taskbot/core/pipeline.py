"""Message router and task-creation pipeline.

WHY: Every inbound chat message takes the same route from sender check to
confirmation. Keeping that route in one class, with every external service
injected, makes the whole flow testable with fakes and keeps Telegram and
HTTP details out of it.

HOW: TaskPipeline.handle() walks the per-message state machine:

    Received → Authorizing → Rejected | Classifying
    Classifying → TextPath | AudioPath | Unsupported
    TextPath/AudioPath → Persisting → Notifying → Done

and returns an Outcome naming the terminal state. Errors from the chat
port, the transcriber, or the repository propagate out of handle(); the
caller (the Telegram error handler) logs them. Summarization is the only
step whose failure is absorbed.

RULES:
- Authorized iff sender is the owner or in the allow-list
- Unauthorized senders get ACCESS_DENIED and nothing else happens
- Senders without a username are dropped silently (logged)
- Audio needs a transcriber; without one the sender gets a config notice
- The repository write is the single commit point: no task before it,
  exactly one task after it
- The summarizer sees at most MAX_SUMMARY_INPUT_CHARS of the transcript
- The owner is notified only when the sender is someone else
"""

from __future__ import annotations

import enum
import logging
from typing import Iterable, Protocol, Sequence

from notion_taskbot.core import replies
from notion_taskbot.core.audio import audio_file_name, derive_audio_title
from notion_taskbot.core.blocks import Block, build_audio_blocks
from notion_taskbot.core.models import (
    AudioPayload,
    InboundMessage,
    TaskHandle,
    TextPayload,
    VoicePayload,
)
from notion_taskbot.core.summary import SummaryResult
from notion_taskbot.core.text import extract_first_url, remove_url_from_text

logger = logging.getLogger(__name__)

MAX_SUMMARY_INPUT_CHARS = 12000


# ---------------------------------------------------------------------------
# Ports
# ---------------------------------------------------------------------------


class ChatPort(Protocol):
    async def send_message(self, chat_id: int, text: str) -> None: ...

    async def resolve_file_url(self, file_ref: str) -> str: ...


class TaskRepository(Protocol):
    async def create(
        self,
        title: str,
        author_tag: str,
        source_url: str | None = None,
        body: str | None = None,
        blocks: Sequence[Block] | None = None,
    ) -> TaskHandle: ...

    def page_url(self, handle: TaskHandle) -> str: ...


class Transcriber(Protocol):
    async def transcribe(
        self, file_url: str, file_name: str, mime_type: str | None = None
    ) -> str: ...


class SummaryGateway(Protocol):
    async def summarize(self, text: str) -> SummaryResult: ...


class Outcome(str, enum.Enum):
    """Terminal state of one handled message.

    A failed message has no Outcome: its exception propagates instead.
    """

    REJECTED = "rejected"
    DROPPED = "dropped"
    UNSUPPORTED = "unsupported"
    NOT_CONFIGURED = "not_configured"
    DONE = "done"


def derive_text_title(text: str) -> tuple[str, str | None]:
    """Title and source URL for a text message.

    Returns:
        (title, normalized URL or None). With a URL, the title is the text
        without it, or the URL itself when nothing else is left.
    """
    extracted = extract_first_url(text)
    if extracted is None:
        return text, None
    title = remove_url_from_text(text, extracted) or extracted.normalized
    return title, extracted.normalized


class TaskPipeline:
    """Turns authorized chat messages into tasks.

    RULES:
    - All collaborators are injected; none are looked up globally
    - transcriber=None disables the audio path (graceful notice)
    - summarizer=None means audio tasks never get a TLDR
    """

    def __init__(
        self,
        chat: ChatPort,
        repository: TaskRepository,
        owner_id: int,
        allow_ids: Iterable[int] = (),
        transcriber: Transcriber | None = None,
        summarizer: SummaryGateway | None = None,
    ) -> None:
        self._chat = chat
        self._repository = repository
        self._owner_id = owner_id
        self._allow_ids = frozenset(allow_ids)
        self._transcriber = transcriber
        self._summarizer = summarizer

    def is_authorized(self, sender_id: int) -> bool:
        return sender_id == self._owner_id or sender_id in self._allow_ids

    async def handle(self, message: InboundMessage) -> Outcome:
        """Process one inbound message end to end."""
        sender = message.sender
        payload = message.payload
        logger.info("New message from %s (%s)", sender.id, type(payload).__name__)

        if not self.is_authorized(sender.id):
            logger.info("Rejected message from unauthorized sender %s", sender.id)
            await self._chat.send_message(message.chat_id, replies.ACCESS_DENIED)
            return Outcome.REJECTED

        if not isinstance(payload, (TextPayload, VoicePayload, AudioPayload)):
            await self._chat.send_message(message.chat_id, replies.UNSUPPORTED_CONTENT)
            return Outcome.UNSUPPORTED

        if not sender.username:
            logger.warning("Dropping message from %s: empty username", sender.id)
            return Outcome.DROPPED

        if isinstance(payload, TextPayload):
            await self.create_text_task(message, payload)
            return Outcome.DONE

        if self._transcriber is None:
            await self._chat.send_message(message.chat_id, replies.TRANSCRIPTION_NOT_CONFIGURED)
            return Outcome.NOT_CONFIGURED

        await self.create_audio_task(message, payload)
        return Outcome.DONE

    # ------------------------------------------------------------------
    # Text path
    # ------------------------------------------------------------------

    async def create_text_task(self, message: InboundMessage, payload: TextPayload) -> TaskHandle:
        title, source_url = derive_text_title(payload.text)
        handle = await self._repository.create(
            title,
            message.sender.username or "",
            source_url=source_url,
        )
        await self._confirm(message, title, handle)
        return handle

    # ------------------------------------------------------------------
    # Audio path
    # ------------------------------------------------------------------

    async def create_audio_task(
        self,
        message: InboundMessage,
        payload: VoicePayload | AudioPayload,
    ) -> TaskHandle:
        """Transcribe, summarize, and file an audio message.

        WHY: Transcription can take tens of seconds, so the sender gets a
        "processing" notice first. The summary is optional decoration: a
        task with only the transcript is still useful.
        """
        if self._transcriber is None:
            raise RuntimeError("Audio tasks need a transcriber")

        file_url = await self._chat.resolve_file_url(payload.file_ref)
        await self._chat.send_message(message.chat_id, replies.AUDIO_PROCESSING)

        transcript = await self._transcriber.transcribe(
            file_url, audio_file_name(payload), payload.mime_type
        )

        transcript_url = extract_first_url(transcript)
        summary = await self._summarize(transcript)
        title = derive_audio_title(transcript, transcript_url, summary)
        blocks = build_audio_blocks(transcript, summary.bullets if summary else None)

        handle = await self._repository.create(
            title,
            message.sender.username or "",
            source_url=transcript_url.normalized if transcript_url else None,
            blocks=blocks,
        )
        await self._confirm(message, title, handle)
        return handle

    async def _summarize(self, transcript: str) -> SummaryResult | None:
        """Summarize the transcript; any failure means "no summary"."""
        if self._summarizer is None:
            return None
        try:
            return await self._summarizer.summarize(transcript[:MAX_SUMMARY_INPUT_CHARS])
        except Exception:
            logger.exception("Summarization failed; creating task without summary")
            return None

    # ------------------------------------------------------------------
    # Notifying
    # ------------------------------------------------------------------

    async def _confirm(self, message: InboundMessage, title: str, handle: TaskHandle) -> None:
        confirmation = replies.task_created(title, self._repository.page_url(handle))
        await self._chat.send_message(message.chat_id, confirmation)
        logger.info("Task %s created for %s", handle.id, message.sender.id)

        if message.sender.id != self._owner_id:
            await self._chat.send_message(
                self._owner_id,
                replies.owner_notification(confirmation, message.sender.username or ""),
            )
