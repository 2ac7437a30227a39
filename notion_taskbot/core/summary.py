"""Transcript summarization: prompt, reply parsing, and shape validation.

WHY: A raw voice-note transcript makes a poor task title. A language
model can produce a short title and a few TLDR bullets, but its reply is
free-form text that may wrap the JSON in prose or code fences, or omit
fields. The pipeline must only ever see a complete, valid summary.

HOW: Summarizer sends fixed Russian system instructions plus the text to
a chat-completion callable (GroqClient.complete in production). The reply
is parsed with parse_summary(): strict json.loads first, then the span
from the first "{" to the last "}". The parsed object is validated with
jsonschema and normalized into a SummaryResult.

RULES:
- A summary needs a non-empty title and at least one non-empty bullet
- Bullets are stripped, empty ones dropped, at most 7 kept
- Every parse or shape failure raises SummaryValidationError
- The caller decides whether a failure is fatal (the pipeline tolerates it)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import jsonschema

from notion_taskbot.core.blocks import MAX_SUMMARY_BULLETS

logger = logging.getLogger(__name__)

SUMMARY_SYSTEM_PROMPT = (
    "Ты помощник, который превращает расшифровку голосового сообщения в задачу. "
    "Отвечай только на русском языке. "
    "Верни строго JSON-объект вида "
    '{"title": "...", "bullets": ["...", "..."]} без какого-либо другого текста. '
    "title — короткий заголовок задачи, не длиннее 80 символов. "
    "bullets — от 3 до 7 коротких пунктов с сутью сообщения, "
    "каждый не длиннее 140 символов."
)

SUMMARY_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["title", "bullets"],
    "properties": {
        "title": {"type": "string", "pattern": r"\S"},
        "bullets": {
            "type": "array",
            "minItems": 1,
            "items": {"type": "string"},
        },
    },
}

CompletionFn = Callable[[list[dict[str, str]]], Awaitable[str]]


class SummaryValidationError(ValueError):
    """Raised when the model reply is not a usable summary."""


@dataclass(frozen=True)
class SummaryResult:
    """A validated summary: non-empty title and 1..7 non-empty bullets."""

    title: str
    bullets: tuple[str, ...]


def _load_json_object(reply: str) -> Any:
    """Parse reply as JSON, falling back to the outermost brace span."""
    try:
        return json.loads(reply)
    except json.JSONDecodeError:
        pass

    start = reply.find("{")
    end = reply.rfind("}")
    if start == -1 or end <= start:
        raise SummaryValidationError("Model reply contains no JSON object")

    try:
        return json.loads(reply[start:end + 1])
    except json.JSONDecodeError as exc:
        raise SummaryValidationError(f"Model reply is not valid JSON: {exc}") from exc


def parse_summary(reply: str) -> SummaryResult:
    """Turn a raw model reply into a SummaryResult.

    Raises:
        SummaryValidationError: If the reply cannot be parsed or lacks a
            non-empty title or any non-empty bullet.
    """
    data = _load_json_object(reply)

    try:
        jsonschema.validate(instance=data, schema=SUMMARY_SCHEMA)
    except jsonschema.ValidationError as exc:
        raise SummaryValidationError(f"Summary has the wrong shape: {exc.message}") from exc

    title = data["title"].strip()
    bullets = tuple(b.strip() for b in data["bullets"] if b.strip())[:MAX_SUMMARY_BULLETS]
    if not bullets:
        raise SummaryValidationError("Summary has no non-empty bullets")

    return SummaryResult(title=title, bullets=bullets)


class Summarizer:
    """Summarization gateway over a chat-completion function."""

    def __init__(self, complete: CompletionFn, system_prompt: str = SUMMARY_SYSTEM_PROMPT) -> None:
        self._complete = complete
        self._system_prompt = system_prompt

    async def summarize(self, text: str) -> SummaryResult:
        messages = [
            {"role": "system", "content": self._system_prompt},
            {"role": "user", "content": text},
        ]
        reply = await self._complete(messages)
        logger.debug("Summary reply: %d chars", len(reply))
        return parse_summary(reply)
