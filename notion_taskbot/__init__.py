"""Notion Task Bot — Telegram messages in, Notion tasks out.

WHY: Tasks arrive as quick Telegram messages: a line of text, a link, or a
voice note recorded on the go. Retyping them into Notion is friction. This
package turns each accepted message into a Notion task and tells the
sender (and the owner) where it landed.

HOW: Three layers — chat (Telegram adapter and entry point), core (typed
message model, text helpers, task-creation pipeline), and api (Groq and
Notion clients). The core never touches Telegram or HTTP types directly;
it talks to injected ports so every path is testable with fakes.

RULES:
- One task per accepted message, written once, never updated
- Audio is transcribed and summarized before the task is created
- Only the owner and allow-listed Telegram ids may create tasks
"""

__version__ = "0.1.0"
