"""
Rule-based entity extraction.

Extracts: date/time, attendee name, notes.

Each extractor works on its own and takes a list of already-consumed
segments to blank out first, so the pipeline is composed by span
exclusion: date first, then attendee, then notes.
"""

import logging
import re
from typing import Iterable, Optional

from .datetime_parser import DateTimeParser, get_datetime_parser
from .types import ExtractedSlots

logger = logging.getLogger(__name__)


_NAME_BOUNDARY = r"(?=\s+(?:about|regarding|at|on)\b|[,.!?]|$)"

WITH_PATTERN = re.compile(rf"\bwith\s+([a-z0-9\s\-'.]+?){_NAME_BOUNDARY}", re.IGNORECASE)
CALL_PATTERN = re.compile(rf"\bcall\s+([a-z0-9\s\-'.]+?){_NAME_BOUNDARY}", re.IGNORECASE)
NOTES_PATTERN = re.compile(r"\b(?:about|regarding)\s+([^.,!?]+)", re.IGNORECASE)

_ROLE_NOUNS = re.compile(r"\b(?:call|meeting|appointment|demo|chat)\b", re.IGNORECASE)
_NON_NAME_CHARS = re.compile(r"[^a-z\s\-'.]", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def exclude_segments(text: str, exclude: Iterable[Optional[str]] = ()) -> str:
    """Blank out the first occurrence of each consumed segment."""
    working = text
    for segment in exclude:
        if segment:
            working = working.replace(segment, " ", 1)
    return working


def format_name(raw: str) -> Optional[str]:
    """
    Normalize a captured name.

    Strips role nouns and non-name characters, collapses whitespace and
    capitalizes each word. "jamie o'neil" -> "Jamie O'neil".

    Returns:
        Display name, or None when nothing is left
    """
    cleaned = _ROLE_NOUNS.sub(" ", raw)
    cleaned = _NON_NAME_CHARS.sub(" ", cleaned)
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()

    if not cleaned:
        return None

    return " ".join(part[0].upper() + part[1:].lower() for part in cleaned.split(" "))


def extract_attendee(text: str, exclude: Iterable[Optional[str]] = ()) -> Optional[str]:
    """Find an attendee after "with", falling back to "call"."""
    working = exclude_segments(text, exclude)

    for pattern in (WITH_PATTERN, CALL_PATTERN):
        match = pattern.search(working)
        if match:
            # A cue that captures only noise ("call  ") yields nothing
            return format_name(match.group(1))

    return None


def extract_notes(text: str, exclude: Iterable[Optional[str]] = ()) -> Optional[str]:
    """Find the "about ..." / "regarding ..." clause, up to punctuation."""
    working = exclude_segments(text, exclude)

    match = NOTES_PATTERN.search(working)
    if not match:
        return None

    note = _WHITESPACE.sub(" ", match.group(1)).strip()
    if not note:
        return None

    return note[0].upper() + note[1:]


class SlotExtractor:
    """Runs the date, attendee and notes extractors in order."""

    def __init__(self, datetime_parser: Optional[DateTimeParser] = None):
        """Initialize extractor.

        Args:
            datetime_parser: Optional parser (for testing with a fixed clock)
        """
        self._datetime_parser = datetime_parser

    def _get_parser(self) -> DateTimeParser:
        if self._datetime_parser is None:
            self._datetime_parser = get_datetime_parser()
        return self._datetime_parser

    def extract(self, message: str) -> ExtractedSlots:
        """
        Extract slots from a message.

        Args:
            message: User's utterance

        Returns:
            ExtractedSlots with any found entities
        """
        message = message.strip()
        if not message:
            return ExtractedSlots()

        when = self._get_parser().extract(message)
        datetime_text = when.text if when else None

        attendee = extract_attendee(message, [datetime_text])
        notes = extract_notes(message, [datetime_text, attendee])

        slots = ExtractedSlots(
            attendee=attendee,
            scheduled_at=when.value if when else None,
            datetime_text=datetime_text,
            notes=notes,
        )
        logger.debug(f"Extracted slots: {slots.to_dict()}")
        return slots

    def fallback_attendee(self, message: str, slots: ExtractedSlots) -> Optional[str]:
        """Treat whatever is left of a reply as a name.

        Used when the user answers "who?" with a bare name ("Priya").
        The date span and any notes clause are removed first so
        "Friday at 3pm" is not a name.
        """
        working = exclude_segments(message, [slots.datetime_text])
        return format_name(NOTES_PATTERN.sub(" ", working))


# Singleton
_extractor: Optional[SlotExtractor] = None


def get_slot_extractor() -> SlotExtractor:
    """Get singleton SlotExtractor."""
    global _extractor
    if _extractor is None:
        _extractor = SlotExtractor()
    return _extractor


def extract_slots(message: str) -> ExtractedSlots:
    """Convenience function to extract slots."""
    return get_slot_extractor().extract(message)
