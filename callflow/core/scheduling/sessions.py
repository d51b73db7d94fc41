"""
In-process session management.

A session owns one (appointments, pending draft) pair and threads it
through the engine turn by turn. Appointments are loaded from the
persistence adapter when a session starts and written back whenever a
turn changes them.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4

from callflow.config import settings
from callflow.core.intelligence.session.models import (
    Appointment,
    PendingBooking,
    ProcessContext,
    ProcessOutcome,
)
from callflow.core.intelligence.session.state import DialogueState, state_of
from callflow.core.scheduling import store
from callflow.core.scheduling.engine import SchedulingEngine, get_scheduling_engine
from callflow.core.scheduling.response import INTRO_MESSAGE
from callflow.infra.storage import AppointmentRepository, get_appointment_repository

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


@dataclass
class SessionData:
    """
    One conversation.

    ``appointments`` and ``pending`` are replaced wholesale after every
    turn; the engine never sees a list it could alias.
    """

    session_id: str = field(default_factory=lambda: str(uuid4()))
    appointments: list[Appointment] = field(default_factory=list)
    pending: Optional[PendingBooking] = None

    # Transcript of {"role": "user"|"agent", "content": str}
    history: list[dict] = field(default_factory=list)
    max_history: int = 50

    message_count: int = 0
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def state(self) -> DialogueState:
        return state_of(self.pending)

    @property
    def context(self) -> ProcessContext:
        """Engine input for the next turn."""
        return ProcessContext(appointments=list(self.appointments), pending=self.pending)

    def apply(self, outcome: ProcessOutcome) -> bool:
        """Adopt the engine's output. Returns True if appointments changed."""
        changed = outcome.appointments != self.appointments
        self.appointments = list(outcome.appointments)
        self.pending = outcome.pending
        self.updated_at = _utcnow()
        return changed

    def add_turn(self, role: str, content: str) -> None:
        self.history.append({"role": role, "content": content})
        if len(self.history) > self.max_history:
            self.history = self.history[-self.max_history:]

    def to_dict(self) -> dict:
        """Snapshot for API responses."""
        preview, remaining = store.upcoming(self.appointments)
        return {
            "session_id": self.session_id,
            "state": self.state.value,
            "pending": self.pending.to_dict() if self.pending else None,
            "appointments": [appt.to_dict() for appt in self.appointments],
            "upcoming": [appt.to_dict() for appt in preview],
            "more_scheduled": remaining,
            "message_count": self.message_count,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


class SessionManager:
    """
    Process-local session registry.

    Turns for the same session run one at a time. Sessions are independent
    of each other and are lost when the process exits; only appointments
    are persisted. A session idle for longer than the TTL is dropped.
    """

    def __init__(
        self,
        engine: Optional[SchedulingEngine] = None,
        repository: Optional[AppointmentRepository] = None,
        persist: Optional[bool] = None,
        history_limit: Optional[int] = None,
        ttl_seconds: Optional[int] = None,
    ):
        """Initialize session manager.

        Args:
            engine: Dialogue engine (singleton if not provided)
            repository: Persistence adapter (singleton if not provided)
            persist: Write appointments after changes
            history_limit: Transcript turns kept per session
            ttl_seconds: Idle lifetime of a session, 0 for no expiry
        """
        self._engine = engine
        self._repository = repository
        self._persist = settings.persist_appointments if persist is None else persist
        self._history_limit = history_limit or settings.session_history_limit
        self._ttl = settings.session_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._sessions: dict[str, SessionData] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _get_engine(self) -> SchedulingEngine:
        if self._engine is None:
            self._engine = get_scheduling_engine()
        return self._engine

    def _get_repository(self) -> AppointmentRepository:
        if self._repository is None:
            self._repository = get_appointment_repository()
        return self._repository

    def _lock_for(self, session_id: str) -> threading.Lock:
        with self._registry_lock:
            if session_id not in self._locks:
                self._locks[session_id] = threading.Lock()
            return self._locks[session_id]

    def _is_expired(self, session: SessionData) -> bool:
        if self._ttl <= 0:
            return False
        return _utcnow() - session.updated_at > timedelta(seconds=self._ttl)

    def _evict(self, session_id: str) -> None:
        with self._registry_lock:
            self._sessions.pop(session_id, None)
            self._locks.pop(session_id, None)

    def evict_expired(self) -> int:
        """Drop every session idle longer than the TTL. Returns how many."""
        expired = [sid for sid, session in list(self._sessions.items()) if self._is_expired(session)]
        for session_id in expired:
            self._evict(session_id)
        if expired:
            logger.debug(f"Evicted {len(expired)} expired sessions")
        return len(expired)

    def create(self, session_id: Optional[str] = None) -> SessionData:
        """
        Create a new session with stored appointments loaded.

        Args:
            session_id: Session ID (auto-generated if not provided)

        Returns:
            Created SessionData
        """
        self.evict_expired()

        appointments = self._get_repository().load() if self._persist else []
        session = SessionData(
            session_id=session_id or str(uuid4()),
            appointments=appointments,
            max_history=self._history_limit,
        )
        session.add_turn("agent", INTRO_MESSAGE)

        with self._registry_lock:
            self._sessions[session.session_id] = session

        logger.debug(f"Session created: {session.session_id} ({len(appointments)} appointments)")
        return session

    def get(self, session_id: str) -> Optional[SessionData]:
        """Live session by id. Expired sessions are dropped and read as missing."""
        session = self._sessions.get(session_id)
        if session is not None and self._is_expired(session):
            logger.debug(f"Session expired: {session_id}")
            self._evict(session_id)
            return None
        return session

    def get_or_create(self, session_id: Optional[str] = None) -> SessionData:
        """Get existing session or create new one."""
        if session_id:
            session = self.get(session_id)
            if session is not None:
                return session
        return self.create(session_id)

    def handle_message(
        self,
        message: str,
        session_id: Optional[str] = None,
    ) -> tuple[SessionData, ProcessOutcome]:
        """
        Run one turn through the engine.

        Args:
            message: User's utterance
            session_id: Existing session ID, or None to start one

        Returns:
            Tuple of (session after the turn, engine outcome)
        """
        session = self.get_or_create(session_id)

        with self._lock_for(session.session_id):
            outcome = self._get_engine().process(message, session.context)
            changed = session.apply(outcome)

            if message.strip():
                session.add_turn("user", message.strip())
                session.add_turn("agent", outcome.reply)
                session.message_count += 1

            if changed and self._persist:
                self._get_repository().save(session.appointments)

        return session, outcome

    def reset(self, session_id: str) -> Optional[SessionData]:
        """Drop the pending draft and transcript; appointments are kept."""
        session = self.get(session_id)
        if session is None:
            return None

        with self._lock_for(session_id):
            session.pending = None
            session.history = []
            session.message_count = 0
            session.add_turn("agent", INTRO_MESSAGE)
            session.updated_at = _utcnow()

        return session

    def delete(self, session_id: str) -> bool:
        with self._registry_lock:
            self._locks.pop(session_id, None)
            return self._sessions.pop(session_id, None) is not None


# Singleton
_manager: Optional[SessionManager] = None


def get_session_manager() -> SessionManager:
    """Get singleton SessionManager."""
    global _manager
    if _manager is None:
        _manager = SessionManager()
    return _manager
