"""
Speaker classification for CallSync transcripts.

Maps a free-text speaker label to exactly one ``SpeakerCategory``.
Rules are checked in order; the first match wins and ``AGENT`` is the
default.
"""

from __future__ import annotations

from cs_common.models import SpeakerCategory

# Ordered (category, substrings) rules, matched case-insensitively.
SPEAKER_RULES: tuple[tuple[SpeakerCategory, tuple[str, ...]], ...] = (
    (SpeakerCategory.BOT, ("virtual agent", "bot")),
    (SpeakerCategory.CUSTOMER, ("customer", "caller")),
)
DEFAULT_CATEGORY = SpeakerCategory.AGENT


def classify_speaker(speaker: str | None) -> SpeakerCategory:
    """Return the display category for *speaker*.

    Args:
        speaker: Speaker label from a transcript entry (``None`` is
            treated as empty).

    Returns:
        ``BOT`` for virtual agents and bots, ``CUSTOMER`` for customers
        and callers, ``AGENT`` otherwise.
    """
    label = (speaker or "").lower()
    for category, needles in SPEAKER_RULES:
        if any(needle in label for needle in needles):
            return category
    return DEFAULT_CATEGORY


def speaker_css_class(speaker: str | None) -> str:
    """CSS class string for a speaker label, e.g. ``entry-speaker speaker-bot``."""
    return f"entry-speaker speaker-{classify_speaker(speaker).value}"
