"""Notion task repository: creates one database page per task.

WHY: Notion is where the tasks are triaged. The pipeline should only say
"create a task with this title, author, link and content"; the property
names, select values, and block JSON of the task database live here.

HOW: Wraps notion_client.AsyncClient. create() builds the page properties
(Name, TGAuthor, Status, Source, optional URL) and the children blocks,
then calls pages.create once. Content blocks are rendered with their own
to_notion(); flat body text is split into paragraph blocks.

RULES:
- Status is always "Backlog" and Source is always "Telegram"
- The URL property is only set when a source URL exists
- blocks take precedence over body; with neither, the page has no children
- body text is split into 1900-char paragraphs, at most 90 of them
- Notion API errors (notion_client.APIResponseError) propagate unchanged
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from notion_client import AsyncClient

from notion_taskbot.config import NOTION_PAGE_HOST
from notion_taskbot.core.blocks import Block, paragraphs_from_text
from notion_taskbot.core.models import TaskHandle

logger = logging.getLogger(__name__)

MAX_BODY_BLOCKS = 90

STATUS_BACKLOG = "Backlog"
SOURCE_TELEGRAM = "Telegram"


def build_task_properties(
    title: str,
    author_tag: str,
    source_url: str | None = None,
) -> dict[str, Any]:
    """Build the Notion property dict for a task page."""
    properties: dict[str, Any] = {
        "Name": {
            "type": "title",
            "title": [{"type": "text", "text": {"content": title}}],
        },
        "TGAuthor": {
            "type": "rich_text",
            "rich_text": [{"type": "text", "text": {"content": author_tag}}],
        },
        "Status": {"type": "select", "select": {"name": STATUS_BACKLOG}},
        "Source": {"type": "select", "select": {"name": SOURCE_TELEGRAM}},
    }
    if source_url:
        properties["URL"] = {"type": "url", "url": source_url}
    return properties


class NotionTaskRepository:
    """Creates task pages in one Notion database.

    RULES:
    - client defaults to AsyncClient(auth=token); tests pass a fake
    - database_id is the task database, fixed for the process lifetime
    """

    def __init__(
        self,
        database_id: str,
        token: str | None = None,
        client: Any = None,
        page_host: str | None = None,
    ) -> None:
        if client is None:
            if not token:
                raise ValueError("NotionTaskRepository needs a token or a client")
            client = AsyncClient(auth=token)
        self._client = client
        self._database_id = database_id
        self._page_host = page_host or NOTION_PAGE_HOST

    async def create(
        self,
        title: str,
        author_tag: str,
        source_url: str | None = None,
        body: str | None = None,
        blocks: Sequence[Block] | None = None,
    ) -> TaskHandle:
        """Create a task page and return its handle.

        Args:
            title: Page title (Name property).
            author_tag: Telegram username of the author.
            source_url: Link found in the message, stored in the URL property.
            body: Flat text content, used only when blocks is not given.
            blocks: Structured content blocks.

        Returns:
            TaskHandle with the new page id.
        """
        logger.info(
            "Creating task %r from %s%s",
            title, author_tag, f" with url {source_url}" if source_url else "",
        )

        if blocks:
            children = [block.to_notion() for block in blocks]
        elif body:
            children = [block.to_notion() for block in paragraphs_from_text(body, MAX_BODY_BLOCKS)]
        else:
            children = None

        request: dict[str, Any] = {
            "parent": {"database_id": self._database_id},
            "properties": build_task_properties(title, author_tag, source_url),
        }
        if children:
            request["children"] = children

        page = await self._client.pages.create(**request)
        handle = TaskHandle(id=page["id"])
        logger.info("Created task %s", handle.id)
        return handle

    @staticmethod
    def to_reference_id(handle: TaskHandle) -> str:
        """Page id without dashes, as used in notion.so links."""
        return handle.id.replace("-", "")

    def page_url(self, handle: TaskHandle) -> str:
        return f"https://{self._page_host}/{self.to_reference_id(handle)}"

    async def aclose(self) -> None:
        close = getattr(self._client, "aclose", None)
        if close is not None:
            await close()
