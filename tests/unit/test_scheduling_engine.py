"""Tests for Scheduling Engine."""

import pytest
from datetime import datetime

from callflow.core.intelligence.session.models import PendingBooking, ProcessContext
from callflow.core.scheduling.engine import SchedulingEngine


class TestSchedulingEngine:
    """Test SchedulingEngine end to end with real extraction."""

    @pytest.fixture
    def engine(self, clock, id_factory):
        """Create engine with frozen clock and sequential ids."""
        return SchedulingEngine(clock=clock, id_factory=id_factory, conflict_window_minutes=45)

    @pytest.fixture
    def alex_wednesday(self, make_appointment):
        return make_appointment("alex-1", "Alex", datetime(2025, 1, 8, 10, 0))

    # === Booking ===

    def test_book_in_one_utterance(self, engine, now):
        """Test a complete request is booked immediately."""
        outcome = engine.process(
            "Book a call with Jamie tomorrow at 9am about onboarding",
            ProcessContext(),
        )

        assert "scheduled a call with Jamie" in outcome.reply
        assert outcome.pending is None
        assert len(outcome.appointments) == 1
        appt = outcome.appointments[0]
        assert appt.attendee == "Jamie"
        assert appt.scheduled_at == datetime(2025, 1, 7, 9, 0)
        assert appt.notes == "Onboarding"
        assert appt.created_at == now

    def test_missing_time_then_provided(self, engine):
        """Test two-turn booking when the time comes second."""
        first = engine.process("Book a call with Sam", ProcessContext())

        assert first.reply == "Great. What date and time should I set?"
        assert first.pending == PendingBooking(attendee="Sam")
        assert first.appointments == []

        second = engine.process(
            "Friday at 3pm",
            ProcessContext(appointments=first.appointments, pending=first.pending),
        )

        assert second.pending is None
        assert len(second.appointments) == 1
        assert second.appointments[0].attendee == "Sam"
        assert second.appointments[0].scheduled_at == datetime(2025, 1, 10, 15, 0)

    def test_missing_attendee_then_bare_name(self, engine):
        """Test a bare name answers the "who?" question."""
        first = engine.process("Set up a meeting tomorrow at 2pm", ProcessContext())

        assert first.reply == "Sure — who should I book the call with?"
        assert first.pending.scheduled_at == datetime(2025, 1, 7, 14, 0)

        second = engine.process("Priya", ProcessContext(pending=first.pending))

        assert second.pending is None
        assert second.appointments[0].attendee == "Priya"
        assert second.appointments[0].scheduled_at == datetime(2025, 1, 7, 14, 0)

    def test_follow_up_reprompts_without_overwriting(self, engine):
        """Test a follow-up without a time keeps the draft and asks again."""
        context = ProcessContext(pending=PendingBooking(attendee="Sam"))

        outcome = engine.process("with Priya", context)

        assert outcome.reply == "What date and time works for that call?"
        assert outcome.pending.attendee == "Sam"

    def test_conflict_keeps_draft_without_time(self, engine, alex_wednesday):
        """Test double-booking is refused and the time is asked for again."""
        existing = [alex_wednesday]
        first = engine.process("Book a call with Priya", ProcessContext(appointments=existing))

        second = engine.process(
            "Wednesday at 10:30am",
            ProcessContext(appointments=first.appointments, pending=first.pending),
        )

        assert second.reply.startswith("You already have Alex at Wed, Jan 8, 10:00 AM")
        assert second.pending is not None
        assert second.pending.attendee == "Priya"
        assert second.pending.scheduled_at is None
        assert second.appointments == existing

    def test_bookings_stay_sorted(self, engine):
        """Test appointments come back in chronological order."""
        context = ProcessContext()
        for message in (
            "Book a call with Sam Friday at 3pm",
            "Book a call with Jamie tomorrow at 9am",
            "Book a call with Priya Wednesday at 1pm",
        ):
            outcome = engine.process(message, context)
            context = ProcessContext(appointments=outcome.appointments, pending=outcome.pending)

        times = [appt.scheduled_at for appt in context.appointments]
        assert len(times) == 3
        assert times == sorted(times)

    # === Abandon ===

    def test_never_mind_restores_idle(self, engine, alex_wednesday):
        """Test abandoning a draft leaves appointments untouched."""
        existing = [alex_wednesday]
        first = engine.process("Book a call with Priya", ProcessContext(appointments=existing))

        second = engine.process(
            "never mind",
            ProcessContext(appointments=first.appointments, pending=first.pending),
        )

        assert second.reply == "No problem, I won't make any changes."
        assert second.pending is None
        assert second.appointments == existing

    # === Cancellation ===

    def test_cancel_single_appointment(self, engine, alex_wednesday):
        """Test "Cancel it" with exactly one appointment."""
        outcome = engine.process("Cancel it", ProcessContext(appointments=[alex_wednesday]))

        assert outcome.reply == "Done. I've canceled your call with Alex on Wed, Jan 8, 10:00 AM."
        assert outcome.appointments == []
        assert outcome.pending is None

    def test_cancel_by_name(self, engine, alex_wednesday, make_appointment):
        jamie = make_appointment("jamie-1", "Jamie", datetime(2025, 1, 7, 9, 0))

        outcome = engine.process(
            "Cancel my call with Jamie",
            ProcessContext(appointments=[jamie, alex_wednesday]),
        )

        assert [appt.id for appt in outcome.appointments] == ["alex-1"]

    def test_cancel_ambiguous(self, engine, alex_wednesday, make_appointment):
        """Test no target is guessed among several appointments."""
        jamie = make_appointment("jamie-1", "Jamie", datetime(2025, 1, 7, 9, 0))
        existing = [jamie, alex_wednesday]

        outcome = engine.process("Cancel my call", ProcessContext(appointments=existing))

        assert outcome.reply.startswith("I couldn't find a matching appointment to cancel.")
        assert outcome.appointments == existing

    # === Reschedule ===

    def test_reschedule_by_name(self, engine, alex_wednesday, make_appointment):
        """Test moving a named call keeps its id and re-sorts."""
        james = make_appointment("james-1", "James", datetime(2025, 1, 7, 11, 0))

        outcome = engine.process(
            "Reschedule my chat with James to Friday morning",
            ProcessContext(appointments=[james, alex_wednesday]),
        )

        assert outcome.pending is None
        assert [appt.id for appt in outcome.appointments] == ["alex-1", "james-1"]
        moved = outcome.appointments[1]
        assert moved.scheduled_at.weekday() == 4
        assert moved.scheduled_at == datetime(2025, 1, 10, 9, 0)
        assert "moved your call with James" in outcome.reply

    def test_reschedule_asks_for_time(self, engine, alex_wednesday):
        """Test a reschedule without a new time opens a reschedule draft."""
        first = engine.process("Move my call with Alex", ProcessContext(appointments=[alex_wednesday]))

        assert first.reply == "Sure, what new time works for your call with Alex?"
        assert first.pending.reschedule_id == "alex-1"
        assert first.pending.attendee == "Alex"

        second = engine.process(
            "Thursday at 4pm",
            ProcessContext(appointments=first.appointments, pending=first.pending),
        )

        assert second.pending is None
        assert [appt.id for appt in second.appointments] == ["alex-1"]
        assert second.appointments[0].scheduled_at == datetime(2025, 1, 9, 16, 0)

    def test_reschedule_target_removed_meanwhile(self, engine):
        """Test a stale reschedule draft finishes softly."""
        pending = PendingBooking(attendee="Alex", reschedule_id="gone")

        outcome = engine.process("Thursday at 4pm", ProcessContext(pending=pending))

        assert outcome.reply.startswith("I couldn't find that meeting anymore.")
        assert outcome.pending is None
        assert outcome.appointments == []

    def test_reschedule_ambiguous(self, engine):
        outcome = engine.process("Reschedule my call", ProcessContext())

        assert outcome.reply.startswith("I couldn't tell which meeting to move.")
        assert outcome.pending is None

    # === Listing And Small Talk ===

    def test_list_empty(self, engine):
        outcome = engine.process("List my upcoming appointments", ProcessContext())

        assert outcome.reply == "Your calendar is wide open — no calls booked yet."
        assert outcome.pending is None
        assert outcome.appointments == []

    def test_list_upcoming_calls_empty(self, engine):
        outcome = engine.process("any upcoming calls?", ProcessContext())

        assert outcome.reply == "Your calendar is wide open — no calls booked yet."

    def test_list_appointments(self, engine, alex_wednesday):
        outcome = engine.process("show my schedule", ProcessContext(appointments=[alex_wednesday]))

        assert outcome.reply == "Here's what's coming up:\n• Alex — Wed, Jan 8, 10:00 AM"

    def test_help(self, engine):
        outcome = engine.process("help", ProcessContext())

        assert outcome.reply.startswith("You can ask me to book, list, reschedule, or cancel calls.")

    def test_greeting(self, engine):
        outcome = engine.process("hello there", ProcessContext())

        assert outcome.reply.startswith("Hi there!")

    def test_fallback(self, engine, alex_wednesday):
        """Test unrecognized input changes nothing."""
        context = ProcessContext(appointments=[alex_wednesday])

        outcome = engine.process("what's the weather like", context)

        assert outcome.reply.startswith("I'm here to manage your calls.")
        assert outcome.appointments == context.appointments
        assert outcome.pending is None

    # === Empty Input ===

    @pytest.mark.parametrize("message", ["", "   ", "\n"])
    def test_empty_input_idle(self, engine, message):
        outcome = engine.process(message, ProcessContext())

        assert outcome.reply == "I didn't catch that. Could you try again?"
        assert outcome.pending is None

    def test_empty_input_keeps_draft(self, engine, alex_wednesday):
        """Test blank input leaves the pending draft alone."""
        context = ProcessContext(appointments=[alex_wednesday], pending=PendingBooking(attendee="Sam"))

        outcome = engine.process("  ", context)

        assert outcome.reply == "I didn't catch that. Could you try again?"
        assert outcome.pending == context.pending
        assert outcome.appointments == context.appointments

    def test_context_not_mutated(self, engine, alex_wednesday):
        """Test the caller's list is never modified."""
        existing = [alex_wednesday]

        engine.process("Book a call with Jamie tomorrow at 9am", ProcessContext(appointments=existing))

        assert existing == [alex_wednesday]

    # === Extraction Edge Cases ===

    def test_notes_after_time(self, engine):
        """Test the notes clause survives when it follows the time."""
        outcome = engine.process("Set up a call with Jamie at 3pm about pricing", ProcessContext())

        appt = outcome.appointments[0]
        assert appt.attendee == "Jamie"
        assert appt.notes == "Pricing"
        assert appt.scheduled_at == datetime(2025, 1, 6, 15, 0)

    def test_month_name_is_attendee(self, engine):
        """Test "April" in a name does not become a date."""
        outcome = engine.process("Book a call with April Jones", ProcessContext())

        assert outcome.reply == "Great. What date and time should I set?"
        assert outcome.pending == PendingBooking(attendee="April Jones")
        assert outcome.appointments == []
