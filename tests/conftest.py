"""Shared fixtures for the notion_taskbot test suite.

WHY: Pipeline tests need stand-ins for Telegram, Notion, and Groq that
record what they were asked to do. Centralizing them here keeps each
test focused on behaviour, not setup.

HOW: Small recording fakes implement the pipeline ports. Fixtures hand
out the chat and repository fakes directly, and factories for the
transcriber, summarizer, and a TaskPipeline wired to them.

RULES:
- No network access anywhere in the suite
- The fake repository always returns the same dashed page id
- The fake chat resolves every file ref to the same download URL
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pytest

from notion_taskbot.core.models import TaskHandle
from notion_taskbot.core.pipeline import TaskPipeline
from notion_taskbot.core.summary import SummaryResult


class FakeChat:
    """Records sent messages; resolves any file ref to file_url."""

    file_url = "https://api.telegram.org/file/bot123:ABC/voice/file_1.oga"

    def __init__(self) -> None:
        self.sent: List[Tuple[int, str]] = []
        self.resolved: List[str] = []

    async def send_message(self, chat_id: int, text: str) -> None:
        self.sent.append((chat_id, text))

    async def resolve_file_url(self, file_ref: str) -> str:
        self.resolved.append(file_ref)
        return self.file_url


class FakeRepository:
    """Records create() calls and returns a fixed page handle."""

    page_id = "0b1c2d3e-4f50-6172-8394-a5b6c7d8e9f0"
    page_link = "https://www.notion.so/0b1c2d3e4f5061728394a5b6c7d8e9f0"

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.created: List[Dict[str, Any]] = []
        self._error = error

    async def create(
        self,
        title: str,
        author_tag: str,
        source_url: Optional[str] = None,
        body: Optional[str] = None,
        blocks: Optional[Sequence[Any]] = None,
    ) -> TaskHandle:
        if self._error is not None:
            raise self._error
        self.created.append({
            "title": title,
            "author_tag": author_tag,
            "source_url": source_url,
            "body": body,
            "blocks": list(blocks) if blocks is not None else None,
        })
        return TaskHandle(id=self.page_id)

    def page_url(self, handle: TaskHandle) -> str:
        return "https://www.notion.so/" + handle.id.replace("-", "")


class FakeTranscriber:
    def __init__(self, text: str = "", error: Optional[Exception] = None) -> None:
        self.text = text
        self.error = error
        self.calls: List[Tuple[str, str, Optional[str]]] = []

    async def transcribe(self, file_url: str, file_name: str, mime_type: Optional[str] = None) -> str:
        self.calls.append((file_url, file_name, mime_type))
        if self.error is not None:
            raise self.error
        return self.text


class FakeSummarizer:
    def __init__(self, result: Optional[SummaryResult] = None, error: Optional[Exception] = None) -> None:
        self.result = result
        self.error = error
        self.inputs: List[str] = []

    async def summarize(self, text: str) -> SummaryResult:
        self.inputs.append(text)
        if self.error is not None:
            raise self.error
        assert self.result is not None
        return self.result


@pytest.fixture
def chat() -> FakeChat:
    return FakeChat()


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def make_repository():
    """Factory: FakeRepository(error=None); create() raises error if given."""
    return FakeRepository


@pytest.fixture
def make_transcriber():
    """Factory: FakeTranscriber(text="", error=None)."""
    return FakeTranscriber


@pytest.fixture
def make_summarizer():
    """Factory: FakeSummarizer(result=None, error=None)."""
    return FakeSummarizer


@pytest.fixture
def make_pipeline(chat: FakeChat, repository: FakeRepository):
    """Factory for a TaskPipeline wired to the chat and repository fakes."""

    def _make(
        owner_id: int,
        allow_ids: Iterable[int] = (),
        transcriber: Optional[FakeTranscriber] = None,
        summarizer: Optional[FakeSummarizer] = None,
        repository_override: Optional[FakeRepository] = None,
    ) -> TaskPipeline:
        return TaskPipeline(
            chat=chat,
            repository=repository_override or repository,
            owner_id=owner_id,
            allow_ids=allow_ids,
            transcriber=transcriber,
            summarizer=summarizer,
        )

    return _make
