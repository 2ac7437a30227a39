"""Telegram bot: composition root, update handlers, and entry point.

WHY: Something has to own the long-lived service handles (Telegram bot,
Notion client, Groq HTTP pool), wire them into the pipeline, and feed it
updates. Keeping that in one module leaves the pipeline free of globals.

HOW: create_app() builds a python-telegram-bot Application with
concurrent update handling, constructs the Notion repository, the
optional Groq client and summarizer, and stores the TaskPipeline in
bot_data. post_init/post_shutdown open and close the HTTP clients.
handle_message() converts each update and hands it to the pipeline; any
exception it raises reaches handle_error(), which logs it, so one failed
message never stops the bot.

RULES:
- /start is answered for everyone (it shows the id to allow-list)
- Every other message goes to TaskPipeline.handle()
- Updates are processed concurrently; no per-chat ordering
- run_polling() stops on SIGINT/SIGTERM; in-flight handlers finish
- Runnable as: python -m notion_taskbot (or the notion-taskbot script)
"""

from __future__ import annotations

import logging
from typing import Optional

from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from notion_taskbot.api.groq import GroqClient
from notion_taskbot.api.notion import NotionTaskRepository
from notion_taskbot.chat.adapter import TelegramChat, to_inbound_message
from notion_taskbot.config import LOG_LEVEL, Settings, load_settings
from notion_taskbot.core import replies
from notion_taskbot.core.pipeline import TaskPipeline
from notion_taskbot.core.summary import Summarizer

logger = logging.getLogger(__name__)

PIPELINE_KEY = "pipeline"
GROQ_KEY = "groq"
REPOSITORY_KEY = "repository"


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def handle_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Greet the user and show their Telegram id."""
    user = update.effective_user
    message = update.effective_message
    if user is None or message is None:
        return
    await message.reply_text(replies.welcome(user.id), parse_mode=ParseMode.HTML)


async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Route one message through the task pipeline."""
    message = update.effective_message
    if message is None:
        return

    inbound = to_inbound_message(message)
    if inbound is None:
        logger.info("Ignoring message without sender in chat %s", message.chat_id)
        return

    pipeline: TaskPipeline = context.bot_data[PIPELINE_KEY]
    outcome = await pipeline.handle(inbound)
    logger.info("Message from %s finished: %s", inbound.sender.id, outcome.value)


async def handle_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Log errors raised while handling an update; the bot keeps running."""
    update_id = update.update_id if isinstance(update, Update) else None
    logger.error("Failed to handle update %s", update_id, exc_info=context.error)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


async def _open_clients(application: Application) -> None:
    groq: Optional[GroqClient] = application.bot_data.get(GROQ_KEY)
    if groq is not None:
        await groq.__aenter__()
    logger.info("Bot started")


async def _close_clients(application: Application) -> None:
    groq: Optional[GroqClient] = application.bot_data.get(GROQ_KEY)
    if groq is not None:
        await groq.__aexit__(None, None, None)
    repository: Optional[NotionTaskRepository] = application.bot_data.get(REPOSITORY_KEY)
    if repository is not None:
        await repository.aclose()
    logger.info("Bot stopped")


def create_app(settings: Settings) -> Application:
    """Build the Telegram application with all services wired in.

    WHY: Factory function so tests can build an app from explicit
    Settings without touching the environment or the network.

    RULES:
    - Groq client and summarizer exist only when settings.groq_token is set
    - All handlers are registered before returning
    """
    application = (
        ApplicationBuilder()
        .token(settings.telegram_bot_token)
        .concurrent_updates(True)
        .post_init(_open_clients)
        .post_shutdown(_close_clients)
        .build()
    )

    repository = NotionTaskRepository(settings.notion_task_db, token=settings.notion_token)
    groq = GroqClient(settings.groq_token) if settings.groq_token else None

    pipeline = TaskPipeline(
        chat=TelegramChat(application.bot),
        repository=repository,
        owner_id=settings.owner_id,
        allow_ids=settings.allow_ids,
        transcriber=groq,
        summarizer=Summarizer(groq.complete) if groq else None,
    )

    application.bot_data[PIPELINE_KEY] = pipeline
    application.bot_data[GROQ_KEY] = groq
    application.bot_data[REPOSITORY_KEY] = repository

    # Same group: /start is matched first, everything else falls through.
    application.add_handler(CommandHandler("start", handle_start))
    application.add_handler(MessageHandler(filters.UpdateType.MESSAGE, handle_message))
    application.add_error_handler(handle_error)

    return application


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Start the bot with long polling.

    RULES:
    - Missing required settings raise ConfigurationError before polling starts
    - Blocks until SIGINT/SIGTERM
    """
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    # httpx logs full request URLs, and Telegram URLs contain the bot token.
    logging.getLogger("httpx").setLevel(logging.WARNING)

    settings = load_settings()
    application = create_app(settings)

    logger.info("Owner id: %s, allow-listed ids: %d", settings.owner_id, len(settings.allow_ids))
    if not settings.transcription_enabled:
        logger.warning("GROQ_TOKEN not set: audio messages will not be transcribed")

    application.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()
