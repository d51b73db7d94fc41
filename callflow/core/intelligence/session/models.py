"""
Dialogue data models.

Appointments and drafts are immutable values. Every engine operation
returns new collections instead of editing the caller's.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional
from uuid import uuid4


@dataclass(frozen=True)
class Appointment:
    """A booked call.

    ``scheduled_at`` is the only ordering key. ``id`` and ``created_at``
    never change after creation.
    """

    id: str
    attendee: str
    scheduled_at: datetime
    created_at: datetime
    notes: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to a JSON-friendly dict."""
        result = {
            "id": self.id,
            "attendee": self.attendee,
            "scheduled_at": self.scheduled_at.isoformat(),
            "created_at": self.created_at.isoformat(),
        }
        if self.notes:
            result["notes"] = self.notes
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "Appointment":
        """Rebuild from ``to_dict`` output."""
        return cls(
            id=data["id"],
            attendee=data["attendee"],
            scheduled_at=datetime.fromisoformat(data["scheduled_at"]),
            created_at=datetime.fromisoformat(data["created_at"]),
            notes=data.get("notes") or None,
        )


@dataclass(frozen=True)
class PendingBooking:
    """Partially filled booking awaiting more information.

    ``reschedule_id`` is set only when completing the draft moves an
    existing appointment instead of creating a new one.
    """

    attendee: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    notes: Optional[str] = None
    reschedule_id: Optional[str] = None

    @property
    def is_reschedule(self) -> bool:
        return self.reschedule_id is not None

    def merge(
        self,
        attendee: Optional[str] = None,
        scheduled_at: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> "PendingBooking":
        """Fill empty fields only. Present values are never overwritten."""
        return replace(
            self,
            attendee=self.attendee or attendee,
            scheduled_at=self.scheduled_at or scheduled_at,
            notes=self.notes or notes,
        )

    def without_time(self) -> "PendingBooking":
        return replace(self, scheduled_at=None)

    def to_dict(self) -> dict:
        """Convert to dict, excluding None values."""
        result = {}
        if self.attendee:
            result["attendee"] = self.attendee
        if self.scheduled_at:
            result["scheduled_at"] = self.scheduled_at.isoformat()
        if self.notes:
            result["notes"] = self.notes
        if self.reschedule_id:
            result["reschedule_id"] = self.reschedule_id
        return result


@dataclass(frozen=True)
class ProcessContext:
    """Engine input: the state carried in from the previous turn."""

    appointments: list[Appointment] = field(default_factory=list)
    pending: Optional[PendingBooking] = None


@dataclass(frozen=True)
class ProcessOutcome:
    """Engine output: the reply and the state for the next turn."""

    reply: str
    appointments: list[Appointment]
    pending: Optional[PendingBooking] = None

    @classmethod
    def unchanged(cls, reply: str, context: ProcessContext) -> "ProcessOutcome":
        """Reply without touching appointments or the pending draft."""
        return cls(reply=reply, appointments=context.appointments, pending=context.pending)

    @classmethod
    def settled(cls, reply: str, appointments: list[Appointment]) -> "ProcessOutcome":
        """Reply and leave the dialogue idle."""
        return cls(reply=reply, appointments=appointments, pending=None)


def new_id() -> str:
    """Default appointment id generator."""
    return str(uuid4())
