"""User-facing reply texts and confirmation builders.

WHY: Every text the bot sends lives here, so wording can change without
touching the pipeline, and tests can assert against the same constants.

HOW: Fixed notices are module constants. Confirmations are built from the
task title and page URL; user-provided parts are HTML-escaped here, at
render time, and nowhere else.

RULES:
- Replies use Telegram's HTML parse mode
- escape_html is applied exactly once, to user-derived text only
- The owner notification is the sender confirmation plus an author line
"""

from __future__ import annotations

from notion_taskbot.core.text import escape_html

ACCESS_DENIED = "Вы не имеете доступа к постановке задач"
UNSUPPORTED_CONTENT = "Сообщение может быть только текстовым или аудио!"
TRANSCRIPTION_NOT_CONFIGURED = (
    "Расшифровка аудио не настроена: не задан GROQ_TOKEN. "
    "Отправьте задачу текстом."
)
AUDIO_PROCESSING = "Аудио получено, расшифровываю…"


def welcome(user_id: int) -> str:
    """Reply to /start; shows the id the owner needs for the allow-list."""
    return (
        "Добро пожаловать в бот для задач. Пишите свою задачу!\n"
        f"Ваш Telegram id - <code>{user_id}</code>"
    )


def task_created(title: str, page_url: str) -> str:
    """Confirmation linking to the created task."""
    return f'Новая задача - <a href="{escape_html(page_url)}">{escape_html(title)}</a>'


def owner_notification(confirmation: str, username: str) -> str:
    """Confirmation forwarded to the owner with the author's handle."""
    return f"{confirmation}\nАвтор: @{escape_html(username)}"
