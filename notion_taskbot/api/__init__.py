"""External service clients — Groq (speech-to-text, chat) and Notion.

WHY: The pipeline needs to transcribe audio, summarize text, and create
task pages. This package keeps every HTTP and SDK detail behind small
classes so the core only deals in strings, summaries, and task handles.

HOW: GroqClient wraps httpx.AsyncClient; NotionTaskRepository wraps
notion_client.AsyncClient. Both are constructed once in the composition
root and injected into the pipeline.

RULES:
- No direct httpx or notion_client usage outside this package
- Non-success Groq responses raise UpstreamError
- Notion errors propagate as notion_client.APIResponseError
"""

from notion_taskbot.api.groq import GroqClient, TranscriptionError, UpstreamError
from notion_taskbot.api.notion import NotionTaskRepository

__all__ = ["GroqClient", "NotionTaskRepository", "TranscriptionError", "UpstreamError"]
