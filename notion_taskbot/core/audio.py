"""Audio upload naming and audio task title rules.

WHY: Whisper infers the codec from the upload's file name, and Telegram
voice notes have no name at all. Audio tasks also need a title: the
summary's title when there is one, otherwise something readable cut from
the transcript.

HOW: guess_audio_extension() maps a MIME type to a file extension by
substring, audio_file_name() picks the explicit name or builds
"voice.<ext>"/"audio.<ext>". derive_audio_title() applies the title
priority list and the length cap.

RULES:
- MIME mapping: ogg→ogg, mp3/mpeg→mp3, webm→webm, wav→wav, mp4/m4a→m4a, else bin
- Only audio files keep their own name; voice notes are always "voice.<ext>"
- Title priority: summary title (URL stripped) → transcript minus its URL
  (or the URL itself) → transcript
- Titles are trimmed, cut to 80 characters, trimmed again; empty → "Аудио"
"""

from __future__ import annotations

from notion_taskbot.core.models import AudioPayload, VoicePayload
from notion_taskbot.core.summary import SummaryResult
from notion_taskbot.core.text import ExtractedUrl, extract_first_url, remove_url_from_text

MAX_TITLE_CHARS = 80
FALLBACK_AUDIO_TITLE = "Аудио"

# Checked in order; the first substring found in the MIME type wins.
_MIME_EXTENSIONS = (
    (("ogg",), "ogg"),
    (("mp3", "mpeg"), "mp3"),
    (("webm",), "webm"),
    (("wav",), "wav"),
    (("mp4", "m4a"), "m4a"),
)


def guess_audio_extension(mime_type: str | None) -> str:
    """Guess a file extension for an audio MIME type ("bin" if unknown)."""
    mime = (mime_type or "").lower()
    for needles, ext in _MIME_EXTENSIONS:
        if any(n in mime for n in needles):
            return ext
    return "bin"


def audio_file_name(payload: VoicePayload | AudioPayload) -> str:
    """File name to send with the transcription upload."""
    if isinstance(payload, AudioPayload):
        if payload.file_name:
            return payload.file_name
        stem = "audio"
    else:
        stem = "voice"
    return f"{stem}.{guess_audio_extension(payload.mime_type)}"


def strip_url(text: str) -> str:
    """Remove the first URL in text, if any, and tidy whitespace."""
    extracted = extract_first_url(text)
    if extracted is None:
        return text.strip()
    return remove_url_from_text(text, extracted)


def derive_audio_title(
    transcript: str,
    transcript_url: ExtractedUrl | None,
    summary: SummaryResult | None,
) -> str:
    """Pick the task title for a transcribed audio message."""
    title = ""

    if summary is not None:
        title = strip_url(summary.title)

    if not title and transcript_url is not None:
        title = remove_url_from_text(transcript, transcript_url) or transcript_url.normalized

    if not title:
        title = transcript

    title = title.strip()[:MAX_TITLE_CHARS].strip()
    return title or FALLBACK_AUDIO_TITLE
