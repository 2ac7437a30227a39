"""Configuration constants, .env loading, and startup settings.

WHY: The bot needs three sets of credentials (Telegram, Notion, Groq) and
an access list. Keeping every environment lookup in one module makes it
obvious what must be set before the bot can start, and keeps the rest of
the package free of os.getenv calls.

HOW: python-dotenv loads the .env file on import. Optional tuning values
are module-level constants with defaults. load_settings() reads the
required values into a frozen Settings dataclass and raises
ConfigurationError with a clear message when something is missing.

RULES:
- TELEGRAM_BOT_TOKEN, NOTION_TOKEN, NOTION_TASK_DB, TELEGRAM_OWNER_ID are required
- GROQ_TOKEN is optional: without it audio messages get a graceful reply
- TELEGRAM_ALLOW_IDS is a comma- or whitespace-separated list of integers
- Settings are read once at startup and never mutated
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Load .env from the project root (where the bot is started from)
load_dotenv()

# ---------------------------------------------------------------------------
# Service defaults
# ---------------------------------------------------------------------------

GROQ_BASE_URL = os.getenv("GROQ_BASE_URL", "https://api.groq.com/openai/v1")
GROQ_TRANSCRIPTION_MODEL = os.getenv("GROQ_TRANSCRIPTION_MODEL", "whisper-large-v3")
GROQ_SUMMARY_MODEL = os.getenv("GROQ_SUMMARY_MODEL", "llama-3.3-70b-versatile")
TRANSCRIPTION_LANGUAGE = os.getenv("TRANSCRIPTION_LANGUAGE", "ru")

NOTION_PAGE_HOST = os.getenv("NOTION_PAGE_HOST", "www.notion.so")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

_ID_SEPARATORS = re.compile(r"[\s,;]+")


class ConfigurationError(ValueError):
    """Raised when a required setting is missing or malformed.

    WHY: A bot started without its tokens fails much later with confusing
    HTTP 401s. Failing at startup with the variable name is clearer.

    RULES:
    - Message always names the offending environment variable
    """


@dataclass(frozen=True)
class Settings:
    """Startup configuration for one bot process.

    RULES:
    - owner_id and allow_ids form the authorization context
    - groq_token is None when transcription is not configured
    """

    telegram_bot_token: str
    notion_token: str
    notion_task_db: str
    owner_id: int
    allow_ids: frozenset[int] = field(default_factory=frozenset)
    groq_token: str | None = None

    @property
    def transcription_enabled(self) -> bool:
        return bool(self.groq_token)


def _require(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise ConfigurationError(
            f"{name} is not configured. Add it to the environment or the .env file."
        )
    return value


def parse_telegram_id(name: str, raw: str) -> int:
    """Parse one Telegram id, raising ConfigurationError on junk."""
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(
            f"{name} must contain integer Telegram ids, got {raw!r}"
        ) from None


def parse_allow_ids(raw: str) -> frozenset[int]:
    """Parse TELEGRAM_ALLOW_IDS into a set of integer ids.

    Accepts commas, semicolons, and whitespace as separators. An empty
    string yields an empty set.
    """
    parts = [p for p in _ID_SEPARATORS.split(raw.strip()) if p]
    return frozenset(parse_telegram_id("TELEGRAM_ALLOW_IDS", p) for p in parts)


def load_settings() -> Settings:
    """Read all required settings from the environment.

    WHY: Every credential is needed before the first update arrives, so
    the composition root calls this once and passes the result down.

    RULES:
    - Raises ConfigurationError if a required value is missing or invalid
    - GROQ_TOKEN absence is not an error
    """
    groq_token = os.getenv("GROQ_TOKEN", "").strip() or None
    return Settings(
        telegram_bot_token=_require("TELEGRAM_BOT_TOKEN"),
        notion_token=_require("NOTION_TOKEN"),
        notion_task_db=_require("NOTION_TASK_DB"),
        owner_id=parse_telegram_id("TELEGRAM_OWNER_ID", _require("TELEGRAM_OWNER_ID")),
        allow_ids=parse_allow_ids(os.getenv("TELEGRAM_ALLOW_IDS", "")),
        groq_token=groq_token,
    )
