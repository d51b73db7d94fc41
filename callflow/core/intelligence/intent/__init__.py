"""Intent classification module."""

from .types import Intent, IntentResult
from .classifier import (
    IntentClassifier,
    get_intent_classifier,
    classify_intent,
    has_schedule_intent,
)

__all__ = [
    # Types
    "Intent",
    "IntentResult",
    # Classifier
    "IntentClassifier",
    "get_intent_classifier",
    "classify_intent",
    "has_schedule_intent",
]
