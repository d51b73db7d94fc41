"""
Response Generator for CallFlow.

Deterministic reply templates. Every reply the engine sends is built
here so wording stays stable for tests and speech playback.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from callflow.core.intelligence.session.models import Appointment
from callflow.core.intelligence.session.state import MissingField

logger = logging.getLogger(__name__)


DateFormatter = Callable[[datetime], str]

INTRO_MESSAGE = (
    "Hi, I'm CallFlow. Tell me who you need to speak with and when, "
    "and I'll handle the scheduling."
)

SUGGESTION_PRESETS = [
    "Book a call with Jamie tomorrow at 9am about onboarding",
    "Reschedule my chat with Alex to Friday at 2pm",
    "List my upcoming appointments",
]


def format_display_datetime(value: datetime) -> str:
    """Format like "Tue, Jan 3, 2:30 PM"."""
    hour = value.hour % 12 or 12
    return f"{value:%a, %b} {value.day}, {hour}:{value:%M} {value:%p}"


class ResponseGenerator:
    """
    Template-based reply builder.

    The date formatter is supplied by the caller and must be stable for
    the lifetime of a session.
    """

    def __init__(self, formatter: Optional[DateFormatter] = None):
        """Initialize generator.

        Args:
            formatter: Maps a datetime to display text
        """
        self._format = formatter or format_display_datetime

    # === Input Problems ===

    def not_understood(self) -> str:
        return "I didn't catch that. Could you try again?"

    def fallback(self) -> str:
        return (
            "I'm here to manage your calls. Ask me to book a meeting, "
            "reschedule one, or review your upcoming schedule."
        )

    # === Small Talk ===

    def help(self) -> str:
        return (
            "You can ask me to book, list, reschedule, or cancel calls. "
            "Try something like “Book a call with Priya tomorrow at 2pm” "
            "or “Reschedule my demo with James to Friday morning.”"
        )

    def greeting(self) -> str:
        return "Hi there! I can help you book, reschedule, or cancel calls whenever you're ready."

    # === Listing ===

    def list_appointments(self, appointments: list[Appointment]) -> str:
        """Bulleted schedule, one line per appointment."""
        if not appointments:
            return "Your calendar is wide open — no calls booked yet."

        lines = []
        for appt in appointments:
            notes_part = f" ({appt.notes})" if appt.notes else ""
            lines.append(f"• {appt.attendee} — {self._format(appt.scheduled_at)}{notes_part}")

        return "Here's what's coming up:\n" + "\n".join(lines)

    # === Draft Prompts ===

    def prompt_new_booking(self, missing: MissingField) -> str:
        """First question after a booking request that lacks a field."""
        if missing == MissingField.ATTENDEE:
            return "Sure — who should I book the call with?"
        return "Great. What date and time should I set?"

    def prompt_follow_up(self, missing: MissingField) -> str:
        """Repeat question while the draft is still incomplete."""
        if missing == MissingField.ATTENDEE:
            return "Who should I set the call with?"
        return "What date and time works for that call?"

    def prompt_reschedule_time(self, attendee: str) -> str:
        return f"Sure, what new time works for your call with {attendee}?"

    def draft_abandoned(self) -> str:
        return "No problem, I won't make any changes."

    # === Outcomes ===

    def booking_confirmed(self, attendee: str, when: datetime, notes: Optional[str] = None) -> str:
        """Confirmation summary. The notes clause appears only with notes."""
        summary = f"All set. I've scheduled a call with {attendee} for {self._format(when)}"
        if notes:
            return f"{summary} about {notes}."
        return f"{summary}."

    def booking_conflict(self, conflict: Appointment) -> str:
        return (
            f"You already have {conflict.attendee} at {self._format(conflict.scheduled_at)}. "
            "Want to pick another time?"
        )

    def rescheduled(self, attendee: str, when: datetime) -> str:
        return f"Got it. I've moved your call with {attendee} to {self._format(when)}."

    def reschedule_target_missing(self) -> str:
        return "I couldn't find that meeting anymore. Let's start over with the new details."

    def reschedule_ambiguous(self) -> str:
        return "I couldn't tell which meeting to move. Let me know who it's with or the original time."

    def cancelled(self, appointment: Appointment) -> str:
        return (
            f"Done. I've canceled your call with {appointment.attendee} "
            f"on {self._format(appointment.scheduled_at)}."
        )

    def cancel_ambiguous(self) -> str:
        return (
            "I couldn't find a matching appointment to cancel. "
            "Try mentioning who it's with or when it is."
        )

    # === Speech ===

    @staticmethod
    def to_speech(reply: str) -> str:
        """Render reply segments as sentences for speech playback."""
        return reply.replace("\n", ". ")


# Singleton
_generator: Optional[ResponseGenerator] = None


def get_response_generator() -> ResponseGenerator:
    """Get singleton ResponseGenerator."""
    global _generator
    if _generator is None:
        _generator = ResponseGenerator()
    return _generator
