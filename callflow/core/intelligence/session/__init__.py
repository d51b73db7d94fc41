"""Dialogue state: appointments, drafts and the Idle/AwaitingField machine."""

from .models import (
    Appointment,
    PendingBooking,
    ProcessContext,
    ProcessOutcome,
    new_id,
)
from .state import (
    DialogueState,
    MissingField,
    state_of,
    get_missing_field,
)

__all__ = [
    # Models
    "Appointment",
    "PendingBooking",
    "ProcessContext",
    "ProcessOutcome",
    "new_id",
    # State
    "DialogueState",
    "MissingField",
    "state_of",
    "get_missing_field",
]
