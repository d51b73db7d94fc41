"""
Conversation Flow Manager.

Owns the pending-draft half of the dialogue: merging follow-up answers
into a draft, deciding what to ask next, and committing a complete draft
to the appointment collection.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from callflow.core.intelligence.session.models import (
    Appointment,
    PendingBooking,
    ProcessContext,
    ProcessOutcome,
    new_id,
)
from callflow.core.intelligence.session.state import get_missing_field
from callflow.core.intelligence.slots.types import ExtractedSlots
from callflow.core.scheduling import store
from callflow.core.scheduling.response import ResponseGenerator, get_response_generator

logger = logging.getLogger(__name__)


class ConversationFlow:
    """
    Draft completion and finalize.

    Drafts only ever gain fields while a dialogue is open. The single
    exception is a conflicting time, which finalize drops so the user is
    asked for another one.
    """

    def __init__(
        self,
        response_generator: Optional[ResponseGenerator] = None,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
        conflict_window_minutes: Optional[int] = None,
    ):
        """Initialize flow manager.

        Args:
            response_generator: Reply templates
            clock: Source of creation timestamps (for testing)
            id_factory: Source of appointment ids (for testing)
            conflict_window_minutes: Override for the conflict window
        """
        self._responses = response_generator or get_response_generator()
        self._clock = clock or datetime.now
        self._new_id = id_factory or new_id
        self._window = conflict_window_minutes

    def start_booking(self, slots: ExtractedSlots, context: ProcessContext) -> ProcessOutcome:
        """Open a new booking from a fresh utterance."""
        draft = PendingBooking(
            attendee=slots.attendee,
            scheduled_at=slots.scheduled_at,
            notes=slots.notes,
        )

        missing = get_missing_field(draft)
        if missing:
            logger.debug(f"New draft missing {missing.value}")
            return ProcessOutcome(
                reply=self._responses.prompt_new_booking(missing),
                appointments=context.appointments,
                pending=draft,
            )

        return self.finalize(draft, context)

    def continue_draft(
        self,
        slots: ExtractedSlots,
        context: ProcessContext,
        fallback_attendee: Optional[str] = None,
    ) -> ProcessOutcome:
        """
        Merge a follow-up answer into the pending draft.

        Args:
            slots: Entities extracted from the follow-up
            context: Current context, ``pending`` must be set
            fallback_attendee: Name to use when no "with"/"call" pattern
                matched and the draft still lacks an attendee

        Returns:
            A re-prompt with the merged draft, or the finalize outcome
        """
        merged = self.merge(context.pending, slots, fallback_attendee)

        missing = get_missing_field(merged)
        if missing:
            logger.debug(f"Draft still missing {missing.value}")
            return ProcessOutcome(
                reply=self._responses.prompt_follow_up(missing),
                appointments=context.appointments,
                pending=merged,
            )

        return self.finalize(merged, context)

    def merge(
        self,
        draft: PendingBooking,
        slots: ExtractedSlots,
        fallback_attendee: Optional[str] = None,
    ) -> PendingBooking:
        """Fill the draft's empty fields from new slots."""
        return draft.merge(
            attendee=slots.attendee or fallback_attendee,
            scheduled_at=slots.scheduled_at,
            notes=slots.notes,
        )

    def abandon(self, context: ProcessContext) -> ProcessOutcome:
        """Drop the pending draft without touching appointments."""
        logger.debug("Draft abandoned")
        return ProcessOutcome.settled(self._responses.draft_abandoned(), context.appointments)

    def finalize(self, draft: PendingBooking, context: ProcessContext) -> ProcessOutcome:
        """
        Commit a complete draft.

        Reschedule drafts move their target in place. New drafts are
        conflict-checked first; on conflict the draft comes back without
        its time.
        """
        notes = draft.notes.strip() if draft.notes and draft.notes.strip() else None

        if draft.is_reschedule:
            return self._finalize_reschedule(draft, notes, context)

        conflict = store.find_conflict(context.appointments, draft.scheduled_at, self._window)
        if conflict:
            logger.info(f"Booking for {draft.attendee} conflicts with {conflict.id}")
            return ProcessOutcome(
                reply=self._responses.booking_conflict(conflict),
                appointments=context.appointments,
                pending=draft.without_time(),
            )

        appointment = Appointment(
            id=self._new_id(),
            attendee=draft.attendee,
            scheduled_at=draft.scheduled_at,
            created_at=self._clock(),
            notes=notes,
        )
        logger.info(f"Booked {appointment.id} with {appointment.attendee}")

        return ProcessOutcome.settled(
            self._responses.booking_confirmed(draft.attendee, draft.scheduled_at, notes),
            store.add_appointment(context.appointments, appointment),
        )

    def _finalize_reschedule(
        self,
        draft: PendingBooking,
        notes: Optional[str],
        context: ProcessContext,
    ) -> ProcessOutcome:
        target = store.find_by_id(context.appointments, draft.reschedule_id)
        if target is None:
            logger.info(f"Reschedule target {draft.reschedule_id} no longer exists")
            return ProcessOutcome.settled(
                self._responses.reschedule_target_missing(),
                context.appointments,
            )

        updated = store.update_appointment(
            context.appointments,
            target.id,
            attendee=draft.attendee,
            scheduled_at=draft.scheduled_at,
            notes=notes,
        )
        logger.info(f"Moved {target.id} to {draft.scheduled_at.isoformat()}")

        return ProcessOutcome.settled(
            self._responses.rescheduled(draft.attendee, draft.scheduled_at),
            updated,
        )
