"""Shared fixtures: a frozen clock and predictable appointment ids."""

from datetime import datetime
from itertools import count

import pytest

from callflow.core.intelligence.session.models import Appointment

# Monday morning
FIXED_NOW = datetime(2025, 1, 6, 8, 0)


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def clock():
    """Clock frozen at Monday 2025-01-06 08:00."""
    return lambda: FIXED_NOW


@pytest.fixture
def id_factory():
    """Sequential ids: appt-1, appt-2, ..."""
    counter = count(1)
    return lambda: f"appt-{next(counter)}"


@pytest.fixture
def make_appointment():
    """Build an Appointment created at the frozen time."""

    def _make(appointment_id, attendee, scheduled_at, notes=None):
        return Appointment(
            id=appointment_id,
            attendee=attendee,
            scheduled_at=scheduled_at,
            created_at=FIXED_NOW,
            notes=notes,
        )

    return _make
