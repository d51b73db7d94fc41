"""
Rule-based intent classification.

Lexical cues on the lower-cased utterance, checked in a fixed priority
order. No model calls: the same input always yields the same intent.
"""

import logging
import re
from typing import Optional

from .types import Intent, IntentResult

logger = logging.getLogger(__name__)


BOOKING_VERBS = (
    "book",
    "schedule",
    "set up",
    "setup",
    "arrange",
    "organize",
    "plan",
    "make",
    "need",
    "want",
    "create",
)

HELP_PATTERN = re.compile(r"\bhelp\b")

LIST_PATTERNS = (
    re.compile(r"(show|list|review|what).*appointments"),
    re.compile(r"(show|list|review).*schedule"),
    re.compile(r"upcoming calls"),
)

CANCEL_PATTERN = re.compile(r"\b(cancel|remove|delete|clear)\b")
RESCHEDULE_PATTERN = re.compile(r"\b(reschedule|move|shift|push back|change)\b")
GREETING_PATTERN = re.compile(r"\b(hi|hello|hey|good morning|good afternoon|good evening)\b")
ABANDON_PATTERN = re.compile(r"\b(cancel|never mind|nevermind|stop)\b")

MEETING_NOUN_PATTERN = re.compile(r"(call|meeting|appointment|chat|catch[-\s]?up)")
WITH_CLAUSE_PATTERN = re.compile(r"\bwith\s+\w+")
TEMPORAL_HINT_PATTERN = re.compile(
    r"\b(today|tomorrow|tonight|morning|afternoon|evening|next|am|pm|\d{1,2}[:.]\d{0,2})\b"
)


def has_schedule_intent(text: str) -> bool:
    """
    Check for a booking signal.

    A meeting noun plus at least one of: a booking verb, a "with <word>"
    clause, or a temporal hint.
    """
    lower = text.lower()
    if not MEETING_NOUN_PATTERN.search(lower):
        return False

    has_verb = any(verb in lower for verb in BOOKING_VERBS)
    has_with = WITH_CLAUSE_PATTERN.search(lower) is not None
    has_temporal_hint = TEMPORAL_HINT_PATTERN.search(lower) is not None
    return has_verb or has_with or has_temporal_hint


def is_list_request(text: str) -> bool:
    lower = text.lower()
    return any(pattern.search(lower) for pattern in LIST_PATTERNS)


class IntentClassifier:
    """
    Lexical intent classifier.

    Idle priority: help, list, cancellation, reschedule, scheduling
    signal, greeting, unknown. While a draft is pending only two
    outcomes exist: abandon the draft, or supply information for it.
    """

    def classify(self, message: str, awaiting_field: bool = False) -> IntentResult:
        """
        Classify an utterance.

        Args:
            message: User's message
            awaiting_field: Whether a pending draft is waiting for input

        Returns:
            IntentResult with intent and the cue that matched
        """
        lower = message.strip().lower()

        if not lower:
            return IntentResult(intent=Intent.UNKNOWN)

        if awaiting_field:
            result = self._classify_follow_up(lower)
        else:
            result = self._classify_fresh(lower)

        logger.debug(f"Classified intent: {result.intent.value} (cue: {result.cue})")
        return result

    def _classify_follow_up(self, lower: str) -> IntentResult:
        match = ABANDON_PATTERN.search(lower)
        if match:
            return IntentResult(intent=Intent.ABANDON_DRAFT, cue=match.group(1))
        return IntentResult(intent=Intent.PROVIDE_INFO)

    def _classify_fresh(self, lower: str) -> IntentResult:
        if HELP_PATTERN.search(lower):
            return IntentResult(intent=Intent.HELP, cue="help")

        if is_list_request(lower):
            return IntentResult(intent=Intent.LIST, cue="list")

        match = CANCEL_PATTERN.search(lower)
        if match:
            return IntentResult(intent=Intent.CANCELLATION, cue=match.group(1))

        match = RESCHEDULE_PATTERN.search(lower)
        if match:
            return IntentResult(intent=Intent.RESCHEDULE, cue=match.group(1))

        if has_schedule_intent(lower):
            return IntentResult(intent=Intent.SCHEDULING, cue="schedule")

        match = GREETING_PATTERN.search(lower)
        if match:
            return IntentResult(intent=Intent.GREETING, cue=match.group(1))

        return IntentResult(intent=Intent.UNKNOWN)


# Singleton
_classifier: Optional[IntentClassifier] = None


def get_intent_classifier() -> IntentClassifier:
    """Get singleton IntentClassifier."""
    global _classifier
    if _classifier is None:
        _classifier = IntentClassifier()
    return _classifier


def classify_intent(message: str, awaiting_field: bool = False) -> IntentResult:
    """Convenience function to classify intent."""
    return get_intent_classifier().classify(message, awaiting_field)
