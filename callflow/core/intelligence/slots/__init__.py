"""Slot extraction module."""

from .types import ExtractedSlots, DateTimeMatch
from .datetime_parser import (
    DateTimeParser,
    get_datetime_parser,
    extract_datetime,
)
from .extractor import (
    SlotExtractor,
    get_slot_extractor,
    extract_slots,
    extract_attendee,
    extract_notes,
    format_name,
)

__all__ = [
    # Types
    "ExtractedSlots",
    "DateTimeMatch",
    # Date/time
    "DateTimeParser",
    "get_datetime_parser",
    "extract_datetime",
    # Extractor
    "SlotExtractor",
    "get_slot_extractor",
    "extract_slots",
    "extract_attendee",
    "extract_notes",
    "format_name",
]
