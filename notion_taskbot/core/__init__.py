"""Core message-to-task logic, independent of Telegram and HTTP.

WHY: The interesting behaviour — URL extraction, title derivation, audio
orchestration, block layout — must be testable without a bot token or a
network. The core only talks to injected ports.

HOW: models.py defines the inbound message union, text.py the pure text
helpers, blocks.py the Notion content layout, summary.py the summary
parsing, audio.py the audio naming and title rules, and pipeline.py the
per-message state machine.

RULES:
- No telegram, httpx, or notion_client imports in this package
- All derived text is stored unescaped; escaping happens when rendering replies
"""
