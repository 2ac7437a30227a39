"""Telegram integration for the task bot.

WHY: Users send tasks from Telegram. This package is the only code that
knows about python-telegram-bot: it converts updates into the core's
typed messages, sends replies, and runs the polling loop.

HOW: adapter.py converts Message objects and implements the chat port;
bot.py builds the Application, registers handlers, and provides main().

RULES:
- The core package never imports from here
- Requires TELEGRAM_BOT_TOKEN (see notion_taskbot.config)
"""
