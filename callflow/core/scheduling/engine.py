"""
Scheduling Engine - Main Orchestrator.

Turns one utterance plus the current (appointments, pending draft) pair
into a reply and the next pair. The engine keeps no state of its own;
callers thread the outcome back in as the next context.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from callflow.core.intelligence import (
    Intent,
    IntentClassifier,
    IntentResult,
    ProcessContext,
    ProcessOutcome,
    PendingBooking,
    SlotExtractor,
    DateTimeParser,
    DialogueState,
    state_of,
)
from callflow.core.scheduling import store
from callflow.core.scheduling.flow import ConversationFlow
from callflow.core.scheduling.response import (
    DateFormatter,
    ResponseGenerator,
)

logger = logging.getLogger(__name__)


class SchedulingEngine:
    """
    Dialogue engine.

    Coordinates:
    - Intent classification
    - Slot extraction
    - Appointment lookups
    - Draft completion (via ConversationFlow)
    - Reply construction

    Every input produces a reply; no path raises for malformed text.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
        formatter: Optional[DateFormatter] = None,
        conflict_window_minutes: Optional[int] = None,
        classifier: Optional[IntentClassifier] = None,
        slot_extractor: Optional[SlotExtractor] = None,
    ):
        """Initialize engine with optional dependencies.

        Args:
            clock: Current time source for date parsing and timestamps
            id_factory: Appointment id generator
            formatter: Display formatter for dates in replies
            conflict_window_minutes: Override for the conflict window
            classifier: Intent classifier
            slot_extractor: Entity extractor
        """
        self._clock = clock or datetime.now
        self._window = conflict_window_minutes
        self._responses = ResponseGenerator(formatter)
        self._classifier = classifier or IntentClassifier()
        self._extractor = slot_extractor or SlotExtractor(DateTimeParser(clock=self._clock))
        self._flow = ConversationFlow(
            response_generator=self._responses,
            clock=self._clock,
            id_factory=id_factory,
            conflict_window_minutes=conflict_window_minutes,
        )

    def process(self, message: str, context: ProcessContext) -> ProcessOutcome:
        """Process a user utterance.

        Args:
            message: Transcribed or typed utterance
            context: Appointments and pending draft from the previous turn

        Returns:
            ProcessOutcome with reply, next appointments and next draft
        """
        text = message.strip()
        if not text:
            return ProcessOutcome.unchanged(self._responses.not_understood(), context)

        state = state_of(context.pending)
        intent = self._classifier.classify(text, awaiting_field=state == DialogueState.AWAITING_FIELD)

        if state == DialogueState.AWAITING_FIELD:
            outcome = self._handle_follow_up(text, intent, context)
        else:
            outcome = self._handle_fresh(text, intent, context)

        logger.debug(
            f"Turn handled: intent={intent.intent.value} "
            f"{state.value} -> {state_of(outcome.pending).value}"
        )
        return outcome

    def _handle_follow_up(
        self,
        text: str,
        intent: IntentResult,
        context: ProcessContext,
    ) -> ProcessOutcome:
        """Interpret an utterance relative to the pending draft."""
        if intent.intent == Intent.ABANDON_DRAFT:
            return self._flow.abandon(context)

        slots = self._extractor.extract(text)
        fallback = None
        if not context.pending.attendee and not slots.attendee:
            fallback = self._extractor.fallback_attendee(text, slots)

        return self._flow.continue_draft(slots, context, fallback_attendee=fallback)

    def _handle_fresh(
        self,
        text: str,
        intent: IntentResult,
        context: ProcessContext,
    ) -> ProcessOutcome:
        """Classify-and-act for an utterance with no draft open."""
        if intent.intent == Intent.HELP:
            return ProcessOutcome.settled(self._responses.help(), context.appointments)

        if intent.intent == Intent.LIST:
            return ProcessOutcome.settled(
                self._responses.list_appointments(context.appointments),
                context.appointments,
            )

        if intent.intent == Intent.CANCELLATION:
            return self._handle_cancellation(text, context)

        if intent.intent == Intent.RESCHEDULE:
            return self._handle_reschedule(text, context)

        slots = self._extractor.extract(text)
        if intent.intent == Intent.SCHEDULING or slots.has_booking_details:
            return self._flow.start_booking(slots, context)

        if intent.intent == Intent.GREETING:
            return ProcessOutcome.settled(self._responses.greeting(), context.appointments)

        return ProcessOutcome.unchanged(self._responses.fallback(), context)

    def _handle_cancellation(self, text: str, context: ProcessContext) -> ProcessOutcome:
        """Remove the appointment the utterance points at."""
        slots = self._extractor.extract(text)
        target = store.select_target(
            context.appointments,
            attendee=slots.attendee,
            when=slots.scheduled_at,
            window_minutes=self._window,
        )

        if target is None:
            logger.info("Cancellation target could not be resolved")
            return ProcessOutcome.settled(self._responses.cancel_ambiguous(), context.appointments)

        logger.info(f"Cancelled {target.id}")
        return ProcessOutcome.settled(
            self._responses.cancelled(target),
            store.remove_appointment(context.appointments, target.id),
        )

    def _handle_reschedule(self, text: str, context: ProcessContext) -> ProcessOutcome:
        """Move an appointment, or ask for the new time."""
        slots = self._extractor.extract(text)
        target = store.select_target(
            context.appointments,
            attendee=slots.attendee,
            when=slots.scheduled_at,
            window_minutes=self._window,
        )

        if target is None:
            logger.info("Reschedule target could not be resolved")
            return ProcessOutcome.settled(
                self._responses.reschedule_ambiguous(),
                context.appointments,
            )

        draft = PendingBooking(
            attendee=target.attendee,
            notes=target.notes,
            reschedule_id=target.id,
        )

        if slots.scheduled_at is None:
            return ProcessOutcome(
                reply=self._responses.prompt_reschedule_time(target.attendee),
                appointments=context.appointments,
                pending=draft,
            )

        return self._flow.finalize(draft.merge(scheduled_at=slots.scheduled_at), context)


# Singleton
_engine: Optional[SchedulingEngine] = None


def get_scheduling_engine() -> SchedulingEngine:
    """Get singleton SchedulingEngine."""
    global _engine
    if _engine is None:
        _engine = SchedulingEngine()
    return _engine


def process_message(message: str, context: ProcessContext) -> ProcessOutcome:
    """Convenience function to process one utterance.

    Args:
        message: User's utterance
        context: Appointments and pending draft

    Returns:
        ProcessOutcome
    """
    return get_scheduling_engine().process(message, context)
