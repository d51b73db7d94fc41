"""
Natural-language date/time extraction.

Wraps dateparser's search to find the first temporal expression in an
utterance and resolve it to a concrete datetime, preferring the nearest
future occurrence. Only the first expression is used; later mentions in
the same utterance are ignored.
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Callable, Optional

from dateparser.search import search_dates

from callflow.config import settings
from .types import DateTimeMatch

logger = logging.getLogger(__name__)


# Hour assigned when only a part of day is named
DAY_PERIOD_HOURS = {
    "morning": 9,
    "afternoon": 14,
    "evening": 18,
    "tonight": 20,
    "night": 20,
}

_WEEKDAYS = r"mon(?:day)?|tue(?:s|sday)?|wed(?:nesday)?|thu(?:r|rs|rsday)?|fri(?:day)?|sat(?:urday)?|sun(?:day)?"
_MONTHS = (
    r"jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t|tember)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?"
)

# A candidate must carry one of these to count as temporal
_TEMPORAL_TOKEN = re.compile(
    rf"\d|\b(?:today|tomorrow|tonight|noon|midnight|next|{_WEEKDAYS}|{_MONTHS})\b",
    re.IGNORECASE,
)

_DATE_WORD = re.compile(
    rf"\b(?:today|tomorrow|tonight|next|{_WEEKDAYS}|{_MONTHS})\b"
    r"|\b\d{1,2}[/-]\d{1,2}\b|\b\d{1,2}(?:st|nd|rd|th)\b|\b\d{4}\b",
    re.IGNORECASE,
)

_CLOCK_TIME = re.compile(
    r"\b(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\s*(?P<meridiem>am|pm|a\.m\.|p\.m\.)(?![a-z])"
    r"|\b(?P<hour24>\d{1,2}):(?P<minute24>\d{2})\b"
    r"|\b(?P<word>noon|midnight)\b",
    re.IGNORECASE,
)

_DURATION = re.compile(r"\b(?:hours?|hrs?|minutes?|mins?)\b", re.IGNORECASE)

_JOINER = re.compile(r"^\s*(?:at|@|,|around|by)?\s*$", re.IGNORECASE)

_PERIOD_IN_SPAN = re.compile(r"\b(morning|afternoon|evening|tonight|night)\b", re.IGNORECASE)

_PERIOD_AFTER_SPAN = re.compile(
    r"^\s*(?:in the\s+)?(morning|afternoon|evening|tonight|night)\b",
    re.IGNORECASE,
)

# dateparser sometimes swallows the cue word after a date ("at 3pm about")
_TRAILING_FILLER = re.compile(r"(?:\s+(?:about|regarding|with|on|at|for))+\s*$", re.IGNORECASE)

_MONTH_WORD = re.compile(rf"^(?:{_MONTHS})$", re.IGNORECASE)
_WEEKDAY_WORD = re.compile(rf"^(?:{_WEEKDAYS})$", re.IGNORECASE)
_LEADING_NAME_CUE = re.compile(r"^(with|call)\s+", re.IGNORECASE)
_NAME_CUE_BEFORE = re.compile(r"\b(with|call)\s+$", re.IGNORECASE)


def clock_time(match: re.Match) -> Optional[tuple[int, int]]:
    """Hour and minute named by a ``_CLOCK_TIME`` match, or None if invalid."""
    if match.group("word"):
        return (12, 0) if match.group("word").lower() == "noon" else (0, 0)

    if match.group("hour24"):
        hour, minute = int(match.group("hour24")), int(match.group("minute24"))
    else:
        hour, minute = int(match.group("hour")), int(match.group("minute") or 0)
        if hour < 1 or hour > 12:
            return None
        is_pm = match.group("meridiem").lower().startswith("p")
        hour = hour % 12 + (12 if is_pm else 0)

    if hour > 23 or minute > 59:
        return None
    return hour, minute


def reads_as_name(text: str, index: int, fragment: str) -> bool:
    """
    A bare month or weekday right after a name cue is part of a name.

    "with April Jones" is a person. "call May" is too, but "call Friday"
    still names a day, so weekdays only count after "with".
    """
    word = fragment.strip()
    cue = _LEADING_NAME_CUE.match(word)
    if cue:
        word = word[cue.end():]
    else:
        cue = _NAME_CUE_BEFORE.search(text[:index])
        if cue is None:
            return False

    if _MONTH_WORD.match(word):
        return True
    return cue.group(1).lower() == "with" and _WEEKDAY_WORD.match(word) is not None


class DateTimeParser:
    """Finds the first date/time expression in an utterance."""

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        default_hour: Optional[int] = None,
    ):
        """Initialize parser.

        Args:
            clock: Returns "now" for relative expressions (for testing)
            default_hour: Hour for date-only expressions
        """
        self._clock = clock or datetime.now
        self._default_hour = settings.default_hour if default_hour is None else default_hour

    def extract(self, text: str) -> Optional[DateTimeMatch]:
        """
        Extract the first temporal expression from text.

        dateparser supplies the date. The time of day comes from the
        matched text itself: a clock time if one is named, else a part of
        day, else the default hour.

        Args:
            text: User utterance

        Returns:
            DateTimeMatch with the resolved datetime and matched span,
            or None when the utterance has no temporal expression
        """
        if not text or not text.strip():
            return None

        now = self._clock()
        candidates = self._locate(text, self._search(text, now))
        if not candidates:
            return None

        start, end, value = candidates[0]
        span = text[start:end]

        # "Friday" followed by "at 3pm" reads as one expression
        if not _CLOCK_TIME.search(span) and len(candidates) > 1:
            next_start, next_end, _ = candidates[1]
            next_span = text[next_start:next_end]
            if (
                _JOINER.match(text[end:next_start])
                and _CLOCK_TIME.search(next_span)
                and not _DATE_WORD.search(next_span)
            ):
                end = next_end
                span = text[start:end]

        clock = _CLOCK_TIME.search(span)
        named_time = clock_time(clock) if clock else None

        if named_time is not None:
            value = value.replace(hour=named_time[0], minute=named_time[1])
            if not _DATE_WORD.search(span) and not _DURATION.search(span) and value <= now:
                value = value + timedelta(days=1)
        elif clock is None and not _DURATION.search(span):
            period = _PERIOD_IN_SPAN.search(span)
            if period is None:
                period = _PERIOD_AFTER_SPAN.match(text[end:])
                if period is not None:
                    end += period.end()
                    span = text[start:end]
            hour = DAY_PERIOD_HOURS[period.group(1).lower()] if period else self._default_hour
            value = value.replace(hour=hour, minute=0)

        value = value.replace(second=0, microsecond=0)
        logger.debug(f"Parsed '{span.strip()}' as {value.isoformat()}")
        return DateTimeMatch(value=value, text=span.strip())

    def _search(self, text: str, now: datetime) -> list[tuple[str, datetime]]:
        """Run dateparser and drop candidates with no temporal token."""
        try:
            found = search_dates(
                text,
                languages=["en"],
                settings={
                    "PREFER_DATES_FROM": "future",
                    "RELATIVE_BASE": now,
                    "RETURN_AS_TIMEZONE_AWARE": False,
                },
            )
        except Exception as e:
            logger.warning(f"Date search failed for '{text}': {e}")
            return []

        candidates = []
        for fragment, value in found or []:
            fragment = _TRAILING_FILLER.sub("", fragment)
            if _TEMPORAL_TOKEN.search(fragment):
                candidates.append((fragment, value))
        return candidates

    def _locate(
        self,
        text: str,
        found: list[tuple[str, datetime]],
    ) -> list[tuple[int, int, datetime]]:
        """Map matched fragments back to positions in the utterance."""
        lowered = text.lower()
        located = []
        cursor = 0
        for fragment, value in found:
            index = lowered.find(fragment.lower(), cursor)
            if index < 0:
                continue
            cursor = index + len(fragment)
            if reads_as_name(text, index, fragment):
                logger.debug(f"Skipping '{fragment}', reads as part of a name")
                continue
            located.append((index, index + len(fragment), value))
        return located


# Singleton
_parser: Optional[DateTimeParser] = None


def get_datetime_parser() -> DateTimeParser:
    """Get singleton DateTimeParser."""
    global _parser
    if _parser is None:
        _parser = DateTimeParser()
    return _parser


def extract_datetime(text: str) -> Optional[DateTimeMatch]:
    """Convenience function to extract the first date/time."""
    return get_datetime_parser().extract(text)
