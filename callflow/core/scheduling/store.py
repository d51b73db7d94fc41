"""
Appointment collection operations.

Pure functions over an ordered list of appointments. Inputs are never
modified; anything that changes the collection returns a new list.
"""

from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

from callflow.config import settings
from callflow.core.intelligence.session.models import Appointment


def sort_appointments(appointments: list[Appointment]) -> list[Appointment]:
    """Chronological order. Ties keep their original relative order."""
    return sorted(appointments, key=lambda appt: appt.scheduled_at)


def find_conflict(
    appointments: list[Appointment],
    when: datetime,
    window_minutes: Optional[int] = None,
) -> Optional[Appointment]:
    """First appointment within the conflict window of ``when``."""
    window = timedelta(
        minutes=settings.conflict_window_minutes if window_minutes is None else window_minutes
    )
    for appt in appointments:
        if abs(appt.scheduled_at - when) <= window:
            return appt
    return None


def find_by_name(appointments: list[Appointment], query: str) -> Optional[Appointment]:
    """First appointment whose attendee contains ``query``, ignoring case."""
    normalized = query.lower()
    for appt in appointments:
        if normalized in appt.attendee.lower():
            return appt
    return None


def find_mentioned(appointments: list[Appointment], query: str) -> Optional[Appointment]:
    """First appointment whose full attendee name appears in ``query`` as words.

    Catches captures that ran past the name, e.g. "James To" for James.
    """
    padded = f" {query.lower()} "
    for appt in appointments:
        if f" {appt.attendee.lower()} " in padded:
            return appt
    return None


def find_by_id(appointments: list[Appointment], appointment_id: str) -> Optional[Appointment]:
    for appt in appointments:
        if appt.id == appointment_id:
            return appt
    return None


def select_target(
    appointments: list[Appointment],
    attendee: Optional[str] = None,
    when: Optional[datetime] = None,
    window_minutes: Optional[int] = None,
) -> Optional[Appointment]:
    """
    Resolve which appointment a cancel or reschedule request means.

    Tries the attendee name (either direction of containment), then
    proximity to the mentioned time. When neither resolves and exactly
    one appointment exists, that one is selected.
    """
    target = None
    if attendee:
        target = find_by_name(appointments, attendee) or find_mentioned(appointments, attendee)
    if target is None and when is not None:
        target = find_conflict(appointments, when, window_minutes)
    if target is None and len(appointments) == 1:
        target = appointments[0]
    return target


def add_appointment(
    appointments: list[Appointment],
    appointment: Appointment,
) -> list[Appointment]:
    return sort_appointments([*appointments, appointment])


def remove_appointment(
    appointments: list[Appointment],
    appointment_id: str,
) -> list[Appointment]:
    return [appt for appt in appointments if appt.id != appointment_id]


def update_appointment(
    appointments: list[Appointment],
    appointment_id: str,
    attendee: str,
    scheduled_at: datetime,
    notes: Optional[str] = None,
) -> list[Appointment]:
    """Move an appointment, keeping its id. Notes change only if given."""
    updated = [
        replace(
            appt,
            attendee=attendee,
            scheduled_at=scheduled_at,
            notes=notes if notes is not None else appt.notes,
        )
        if appt.id == appointment_id
        else appt
        for appt in appointments
    ]
    return sort_appointments(updated)


def upcoming(appointments: list[Appointment], limit: int = 5) -> tuple[list[Appointment], int]:
    """First ``limit`` appointments and how many more remain."""
    return appointments[:limit], max(len(appointments) - limit, 0)
