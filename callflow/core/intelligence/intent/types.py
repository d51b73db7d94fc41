"""Intent types for utterance classification."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Intent(str, Enum):
    """User intent categories."""

    # Calendar actions
    SCHEDULING = "scheduling"          # Book a new call
    CANCELLATION = "cancellation"      # Cancel an existing call
    RESCHEDULE = "reschedule"          # Move an existing call
    LIST = "list"                      # Review upcoming calls

    # Dialogue flow (only while a draft is pending)
    PROVIDE_INFO = "provide_info"      # Supplying a missing field
    ABANDON_DRAFT = "abandon_draft"    # "never mind"

    # Other
    HELP = "help"
    GREETING = "greeting"

    # Fallback
    UNKNOWN = "unknown"


@dataclass
class IntentResult:
    """Result of intent classification."""

    intent: Intent

    # Lexical cue that decided the intent, for logging
    cue: Optional[str] = None

    @property
    def is_calendar_action(self) -> bool:
        """Check if intent reads or changes the appointment set."""
        return self.intent in {
            Intent.SCHEDULING,
            Intent.CANCELLATION,
            Intent.RESCHEDULE,
            Intent.LIST,
        }

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "intent": self.intent.value,
            "cue": self.cue,
        }
