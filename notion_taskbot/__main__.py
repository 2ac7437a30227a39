"""Package entry point for ``python -m notion_taskbot``.

WHY: The bot is usually started as a module from the project folder,
next to its .env file.

HOW: Delegates to notion_taskbot.chat.bot.main(), which loads settings,
builds the Telegram application, and starts long polling.
"""

from notion_taskbot.chat.bot import main

if __name__ == "__main__":
    main()
