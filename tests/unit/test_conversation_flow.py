"""Tests for draft completion and finalize."""

import pytest
from datetime import datetime

from callflow.core.intelligence.session.models import PendingBooking, ProcessContext
from callflow.core.intelligence.slots.types import ExtractedSlots
from callflow.core.scheduling.flow import ConversationFlow
from callflow.core.scheduling.response import ResponseGenerator


class TestConversationFlow:
    """Test ConversationFlow."""

    @pytest.fixture
    def flow(self, clock, id_factory):
        """Create flow with frozen clock and sequential ids."""
        return ConversationFlow(
            response_generator=ResponseGenerator(formatter=lambda value: value.strftime("%Y-%m-%d %H:%M")),
            clock=clock,
            id_factory=id_factory,
            conflict_window_minutes=45,
        )

    @pytest.fixture
    def booked(self, make_appointment):
        """Context with Alex on Wednesday at 10:00."""
        return ProcessContext(
            appointments=[make_appointment("alex-1", "Alex", datetime(2025, 1, 8, 10, 0))],
        )

    # === Start Booking ===

    def test_start_missing_attendee(self, flow):
        """Test attendee is asked for first."""
        slots = ExtractedSlots(scheduled_at=datetime(2025, 1, 7, 14, 0))

        outcome = flow.start_booking(slots, ProcessContext())

        assert outcome.reply == "Sure — who should I book the call with?"
        assert outcome.pending == PendingBooking(scheduled_at=datetime(2025, 1, 7, 14, 0))
        assert outcome.appointments == []

    def test_start_missing_datetime(self, flow):
        outcome = flow.start_booking(ExtractedSlots(attendee="Sam"), ProcessContext())

        assert outcome.reply == "Great. What date and time should I set?"
        assert outcome.pending.attendee == "Sam"

    def test_start_complete_books(self, flow, now):
        """Test a complete request is committed immediately."""
        slots = ExtractedSlots(attendee="Jamie", scheduled_at=datetime(2025, 1, 7, 9, 0), notes="Onboarding")

        outcome = flow.start_booking(slots, ProcessContext())

        assert outcome.pending is None
        assert len(outcome.appointments) == 1
        appt = outcome.appointments[0]
        assert appt.id == "appt-1"
        assert appt.attendee == "Jamie"
        assert appt.notes == "Onboarding"
        assert appt.created_at == now

    # === Continue Draft ===

    def test_continue_fills_missing_time(self, flow):
        context = ProcessContext(pending=PendingBooking(attendee="Sam"))
        slots = ExtractedSlots(scheduled_at=datetime(2025, 1, 10, 15, 0))

        outcome = flow.continue_draft(slots, context)

        assert outcome.pending is None
        assert outcome.appointments[0].attendee == "Sam"
        assert outcome.appointments[0].scheduled_at == datetime(2025, 1, 10, 15, 0)

    def test_continue_never_overwrites(self, flow):
        """Test present fields survive a follow-up that names others."""
        context = ProcessContext(pending=PendingBooking(attendee="Sam", notes="Pricing"))
        slots = ExtractedSlots(attendee="Priya", notes="Roadmap")

        outcome = flow.continue_draft(slots, context)

        assert outcome.pending == PendingBooking(attendee="Sam", notes="Pricing")
        assert outcome.reply == "What date and time works for that call?"

    def test_continue_uses_fallback_attendee(self, flow):
        context = ProcessContext(pending=PendingBooking(scheduled_at=datetime(2025, 1, 7, 14, 0)))

        outcome = flow.continue_draft(ExtractedSlots(), context, fallback_attendee="Priya")

        assert outcome.appointments[0].attendee == "Priya"

    def test_continue_reprompts_attendee(self, flow):
        context = ProcessContext(pending=PendingBooking())

        outcome = flow.continue_draft(ExtractedSlots(), context)

        assert outcome.reply == "Who should I set the call with?"
        assert outcome.pending == PendingBooking()

    # === Finalize ===

    def test_conflict_drops_time(self, flow, booked):
        """Test conflicting draft keeps attendee and loses its time."""
        draft = PendingBooking(attendee="Priya", scheduled_at=datetime(2025, 1, 8, 10, 30), notes="Intro")

        outcome = flow.finalize(draft, booked)

        assert outcome.reply == "You already have Alex at 2025-01-08 10:00. Want to pick another time?"
        assert outcome.pending == PendingBooking(attendee="Priya", notes="Intro")
        assert outcome.appointments == booked.appointments

    def test_blank_notes_omitted(self, flow):
        draft = PendingBooking(attendee="Sam", scheduled_at=datetime(2025, 1, 10, 15, 0), notes="   ")

        outcome = flow.finalize(draft, ProcessContext())

        assert outcome.appointments[0].notes is None
        assert outcome.reply.endswith("2025-01-10 15:00.")

    def test_reschedule_moves_in_place(self, flow, booked):
        """Test a reschedule draft keeps the id and skips the conflict check."""
        draft = PendingBooking(
            attendee="Alex",
            scheduled_at=datetime(2025, 1, 8, 10, 15),
            reschedule_id="alex-1",
        )

        outcome = flow.finalize(draft, booked)

        assert outcome.pending is None
        assert outcome.reply == "Got it. I've moved your call with Alex to 2025-01-08 10:15."
        assert [appt.id for appt in outcome.appointments] == ["alex-1"]
        assert outcome.appointments[0].scheduled_at == datetime(2025, 1, 8, 10, 15)

    def test_reschedule_target_gone(self, flow):
        """Test a stale reschedule draft is dropped softly."""
        draft = PendingBooking(
            attendee="Alex",
            scheduled_at=datetime(2025, 1, 9, 16, 0),
            reschedule_id="missing",
        )

        outcome = flow.finalize(draft, ProcessContext())

        assert outcome.reply == "I couldn't find that meeting anymore. Let's start over with the new details."
        assert outcome.pending is None
        assert outcome.appointments == []

    # === Abandon ===

    def test_abandon(self, flow, booked):
        context = ProcessContext(appointments=booked.appointments, pending=PendingBooking(attendee="Priya"))

        outcome = flow.abandon(context)

        assert outcome.reply == "No problem, I won't make any changes."
        assert outcome.pending is None
        assert outcome.appointments == booked.appointments
