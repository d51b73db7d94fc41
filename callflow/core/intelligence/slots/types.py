"""Slot types for entity extraction."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class DateTimeMatch:
    """A temporal expression found in an utterance."""

    value: datetime  # Resolved point in time
    text: str        # Matched span as it appears in the utterance


@dataclass
class ExtractedSlots:
    """Entities extracted from one utterance."""

    attendee: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    datetime_text: Optional[str] = None  # "tomorrow at 9am", "Friday"
    notes: Optional[str] = None

    def has_any(self) -> bool:
        """Check if any slots were extracted."""
        return any([self.attendee, self.scheduled_at, self.notes])

    @property
    def has_booking_details(self) -> bool:
        """An attendee or a time was found."""
        return self.attendee is not None or self.scheduled_at is not None

    def to_dict(self) -> dict:
        """Convert to dict, excluding None values."""
        result = {}
        if self.attendee:
            result["attendee"] = self.attendee
        if self.scheduled_at:
            result["scheduled_at"] = self.scheduled_at.isoformat()
        if self.datetime_text:
            result["datetime_text"] = self.datetime_text
        if self.notes:
            result["notes"] = self.notes
        return result
