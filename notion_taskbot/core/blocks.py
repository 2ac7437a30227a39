"""Task content blocks and the audio task layout.

WHY: An audio task carries more than a title: a short TLDR produced by
the language model and the full transcript. Notion stores page content as
a list of typed blocks with per-block size limits and a per-request block
limit. Building the layout as plain typed values keeps the pipeline
testable without Notion JSON in the assertions.

HOW: Four frozen dataclasses model the block kinds the bot writes. Each
renders itself to the Notion API block dict with to_notion().
build_audio_blocks() assembles the fixed audio layout.

RULES:
- Layout: [TLDR heading + up to 7 bullets] → divider → Transcript heading
  → transcript chunks
- Transcript chunks are at most TRANSCRIPT_CHUNK_SIZE characters
- At most MAX_TRANSCRIPT_CHUNKS chunks are written; the rest is dropped
- The TLDR section is omitted entirely when there is no summary
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence, Union

from notion_taskbot.core.text import split_into_chunks

# Notion caps rich text at 2000 chars per item; 1900 leaves headroom.
TRANSCRIPT_CHUNK_SIZE = 1900
# Notion accepts at most 100 children per pages.create call.
MAX_TRANSCRIPT_CHUNKS = 70
MAX_SUMMARY_BULLETS = 7

TLDR_HEADING = "TLDR"
TRANSCRIPT_HEADING = "Transcript"


def _rich_text(text: str) -> list[dict[str, Any]]:
    return [{"type": "text", "text": {"content": text}}]


@dataclass(frozen=True)
class Paragraph:
    text: str

    def to_notion(self) -> dict[str, Any]:
        return {
            "object": "block",
            "type": "paragraph",
            "paragraph": {"rich_text": _rich_text(self.text)},
        }


@dataclass(frozen=True)
class Heading:
    text: str

    def to_notion(self) -> dict[str, Any]:
        return {
            "object": "block",
            "type": "heading_2",
            "heading_2": {"rich_text": _rich_text(self.text)},
        }


@dataclass(frozen=True)
class BulletItem:
    text: str

    def to_notion(self) -> dict[str, Any]:
        return {
            "object": "block",
            "type": "bulleted_list_item",
            "bulleted_list_item": {"rich_text": _rich_text(self.text)},
        }


@dataclass(frozen=True)
class Divider:
    def to_notion(self) -> dict[str, Any]:
        return {"object": "block", "type": "divider", "divider": {}}


Block = Union[Paragraph, Heading, BulletItem, Divider]


def paragraphs_from_text(text: str, max_blocks: int) -> list[Block]:
    """Split free text into paragraph blocks, keeping the first max_blocks."""
    chunks = split_into_chunks(text, TRANSCRIPT_CHUNK_SIZE)[:max_blocks]
    return [Paragraph(chunk) for chunk in chunks]


def build_audio_blocks(
    transcript: str,
    bullets: Sequence[str] | None = None,
) -> list[Block]:
    """Build the content layout for a transcribed audio task.

    Args:
        transcript: Full transcription text.
        bullets: Summary bullet points, or None/empty when no summary.

    Returns:
        Blocks in display order, ready for the task repository.
    """
    blocks: list[Block] = []

    if bullets:
        blocks.append(Heading(TLDR_HEADING))
        blocks.extend(BulletItem(b) for b in bullets[:MAX_SUMMARY_BULLETS])

    blocks.append(Divider())
    blocks.append(Heading(TRANSCRIPT_HEADING))
    blocks.extend(paragraphs_from_text(transcript, MAX_TRANSCRIPT_CHUNKS))

    return blocks
