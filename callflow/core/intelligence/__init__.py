"""
Intelligence Layer Module

Provides rule-based intent classification, slot extraction and the
dialogue data model for the scheduling engine.

Usage:
    from callflow.core.intelligence import (
        classify_intent,
        extract_slots,
        ProcessContext,
    )

    # Classify intent
    result = classify_intent("Cancel my call with Jamie")
    print(result.intent)  # Intent.CANCELLATION

    # Extract slots
    slots = extract_slots("Book a call with Jamie tomorrow at 9am about onboarding")
    print(slots.attendee)  # "Jamie"
    print(slots.notes)  # "Onboarding"
"""

# Intent Classification
from callflow.core.intelligence.intent.types import Intent, IntentResult
from callflow.core.intelligence.intent.classifier import (
    IntentClassifier,
    get_intent_classifier,
    classify_intent,
    has_schedule_intent,
)

# Slot Extraction
from callflow.core.intelligence.slots.types import ExtractedSlots, DateTimeMatch
from callflow.core.intelligence.slots.datetime_parser import (
    DateTimeParser,
    get_datetime_parser,
    extract_datetime,
)
from callflow.core.intelligence.slots.extractor import (
    SlotExtractor,
    get_slot_extractor,
    extract_slots,
)

# Dialogue State
from callflow.core.intelligence.session.models import (
    Appointment,
    PendingBooking,
    ProcessContext,
    ProcessOutcome,
)
from callflow.core.intelligence.session.state import (
    DialogueState,
    MissingField,
    state_of,
    get_missing_field,
)

__all__ = [
    # Intent
    "Intent",
    "IntentResult",
    "IntentClassifier",
    "get_intent_classifier",
    "classify_intent",
    "has_schedule_intent",
    # Slots
    "ExtractedSlots",
    "DateTimeMatch",
    "DateTimeParser",
    "get_datetime_parser",
    "extract_datetime",
    "SlotExtractor",
    "get_slot_extractor",
    "extract_slots",
    # Dialogue State
    "Appointment",
    "PendingBooking",
    "ProcessContext",
    "ProcessOutcome",
    "DialogueState",
    "MissingField",
    "state_of",
    "get_missing_field",
]
