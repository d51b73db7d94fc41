"""Dialogue state machine."""

from enum import Enum
from typing import Optional

from .models import PendingBooking


class DialogueState(str, Enum):
    """States of a scheduling conversation."""

    # No draft: the next utterance is classified from scratch
    IDLE = "idle"

    # Draft exists: the next utterance fills in missing fields
    AWAITING_FIELD = "awaiting_field"


class MissingField(str, Enum):
    """Draft fields the engine can prompt for, in prompt order."""

    ATTENDEE = "attendee"
    DATETIME = "datetime"


def state_of(pending: Optional[PendingBooking]) -> DialogueState:
    """Derive the dialogue state from the pending draft."""
    return DialogueState.IDLE if pending is None else DialogueState.AWAITING_FIELD


def get_missing_field(draft: PendingBooking) -> Optional[MissingField]:
    """First missing required field. Attendee is asked for before time."""
    if not draft.attendee:
        return MissingField.ATTENDEE
    if draft.scheduled_at is None:
        return MissingField.DATETIME
    return None

