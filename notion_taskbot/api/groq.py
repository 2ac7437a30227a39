"""Async HTTP client for the Groq OpenAI-compatible API.

WHY: Voice notes must become text before they can become tasks, and long
transcripts read better with a short title and a TLDR. Groq serves both
Whisper transcription and chat completions behind one token. This module
keeps all Groq HTTP details in one class so the pipeline only sees
"audio URL in, text out" and "messages in, reply text out".

HOW: Wraps httpx.AsyncClient with Bearer token auth. GroqClient is an
async context manager — enter it to open the connection pool, exit to
close it. transcribe() downloads the Telegram file and uploads it as
multipart form data; complete() posts a chat-completion request and
returns the first choice's message content.

RULES:
- Always use the async context manager (async with GroqClient(...) as groq:)
- Transcription language is fixed (TRANSCRIPTION_LANGUAGE, default "ru")
- Non-2xx responses raise UpstreamError with status and the body cut to 500 chars
- An empty transcription result raises TranscriptionError
- The file download uses its own client without the Groq auth header
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from notion_taskbot.config import (
    GROQ_BASE_URL,
    GROQ_SUMMARY_MODEL,
    GROQ_TRANSCRIPTION_MODEL,
    TRANSCRIPTION_LANGUAGE,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_ERROR_BODY_MAX_CHARS = 500
_DEFAULT_MIME_TYPE = "application/octet-stream"


class UpstreamError(Exception):
    """Raised when Groq (or the file host) returns a non-success response.

    WHY: Callers and logs need the HTTP status and what the service said,
    not just "request failed".

    RULES:
    - Always include status_code and message
    - message is the response body truncated to 500 characters
    """

    def __init__(self, status_code: int, message: str, service: str = "Groq") -> None:
        self.status_code = status_code
        self.message = message[:_ERROR_BODY_MAX_CHARS]
        self.service = service
        super().__init__(f"{service} error {status_code}: {self.message}")


class TranscriptionError(Exception):
    """Raised when transcription succeeds at HTTP level but yields no text."""


class GroqClient:
    """Async client for Groq transcription and chat completions.

    RULES:
    - Use as: async with GroqClient(api_key) as groq: ...
    - base_url and models default to the values in notion_taskbot.config
    - transport is for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        transcription_model: str | None = None,
        summary_model: str | None = None,
        language: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = (base_url or GROQ_BASE_URL).rstrip("/")
        self._transcription_model = transcription_model or GROQ_TRANSCRIPTION_MODEL
        self._summary_model = summary_model or GROQ_SUMMARY_MODEL
        self._language = language or TRANSCRIPTION_LANGUAGE
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> GroqClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=httpx.Timeout(300.0, connect=30.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "GroqClient must be used as an async context manager: "
                "async with GroqClient(api_key) as groq: ..."
            )
        return self._client

    # ------------------------------------------------------------------
    # Transcription
    # ------------------------------------------------------------------

    async def download(self, file_url: str) -> bytes:
        """Fetch the raw audio bytes from the chat platform's file URL."""
        # Separate client: the Groq auth header must not be sent to the file host.
        async with httpx.AsyncClient(timeout=120.0, transport=self._transport) as http:
            resp = await http.get(file_url)
        if resp.status_code != 200:
            raise UpstreamError(resp.status_code, resp.text, service="File download")
        return resp.content

    async def transcribe(
        self,
        file_url: str,
        file_name: str,
        mime_type: str | None = None,
    ) -> str:
        """Transcribe an audio file to plain text.

        WHY: Voice notes are the main source of audio tasks; the pipeline
        only has the Telegram download URL.

        HOW: Downloads the file, then POSTs it to /audio/transcriptions
        with the Whisper model, fixed language, JSON response format and
        temperature 0.

        Args:
            file_url: Downloadable URL of the audio file.
            file_name: Name sent with the upload; Groq infers the codec from it.
            mime_type: Content type of the upload, if known.

        Returns:
            The transcription text.

        Raises:
            UpstreamError: On a non-2xx download or transcription response.
            TranscriptionError: If the response carries no text.
        """
        client = self._ensure_client()
        logger.info("Transcribing %s", file_name)

        audio = await self.download(file_url)

        resp = await client.post(
            "/audio/transcriptions",
            files={"file": (file_name, audio, mime_type or _DEFAULT_MIME_TYPE)},
            data={
                "model": self._transcription_model,
                "language": self._language,
                "response_format": "json",
                "temperature": "0",
            },
        )

        if resp.status_code != 200:
            raise UpstreamError(resp.status_code, resp.text)

        text = resp.json().get("text") or ""
        if not text.strip():
            raise TranscriptionError("Groq transcription returned empty text")

        logger.info("Transcribed %s: %d chars", file_name, len(text))
        return text

    # ------------------------------------------------------------------
    # Chat completions
    # ------------------------------------------------------------------

    async def complete(
        self,
        messages: list[dict[str, str]],
        temperature: float = 0.2,
        json_mode: bool = True,
    ) -> str:
        """Run a chat completion and return the assistant message text.

        Raises:
            UpstreamError: On a non-2xx response.
        """
        client = self._ensure_client()

        body: dict[str, Any] = {
            "model": self._summary_model,
            "messages": messages,
            "temperature": temperature,
        }
        if json_mode:
            body["response_format"] = {"type": "json_object"}

        resp = await client.post("/chat/completions", json=body)

        if resp.status_code != 200:
            raise UpstreamError(resp.status_code, resp.text)

        data = resp.json()
        choices = data.get("choices") or []
        if not choices:
            return ""
        return (choices[0].get("message") or {}).get("content") or ""
