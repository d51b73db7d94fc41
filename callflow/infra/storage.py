"""
Local appointment persistence.

Stores the full appointment collection as one JSON document under a
fixed identifier. Loading rebuilds datetimes from their ISO strings and
returns the collection in chronological order.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional

from callflow.config import settings
from callflow.core.intelligence.session.models import Appointment

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the appointment file cannot be written."""

    pass


class AppointmentRepository:
    """
    JSON file repository for appointments.

    File: <storage_dir>/<storage_key>.json

    Corrupt or missing files load as an empty collection.
    """

    def __init__(self, path: Optional[Path] = None):
        """Initialize repository.

        Args:
            path: File path (defaults to settings.storage_path)
        """
        self._path = Path(path) if path is not None else settings.storage_path
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[Appointment]:
        """Load stored appointments, sorted by time."""
        if not self._path.exists():
            return []

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not read {self._path}, starting empty: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"Unexpected content in {self._path}, starting empty")
            return []

        appointments = []
        for item in data:
            try:
                appointments.append(Appointment.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping unreadable appointment record: {e}")

        return sorted(appointments, key=lambda appt: appt.scheduled_at)

    def save(self, appointments: list[Appointment]) -> None:
        """Write the full collection atomically.

        Raises:
            StorageError: If the file cannot be written
        """
        payload = [appt.to_dict() for appt in appointments]

        with self._lock:
            tmp_name = None
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    dir=self._path.parent,
                    prefix=f".{self._path.name}.",
                    suffix=".tmp",
                )
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, indent=2)
                os.replace(tmp_name, self._path)
            except OSError as e:
                logger.error(f"Failed to save appointments to {self._path}: {e}")
                if tmp_name and os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise StorageError(f"Failed to save appointments: {e}") from e

        logger.debug(f"Saved {len(payload)} appointments to {self._path}")

    def clear(self) -> None:
        """Delete the stored collection."""
        with self._lock:
            try:
                self._path.unlink()
            except FileNotFoundError:
                pass

    def is_writable(self) -> bool:
        """Check whether the storage directory accepts writes."""
        directory = self._path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError:
            return False
        return os.access(directory, os.W_OK)


# Singleton
_repository: Optional[AppointmentRepository] = None


def get_appointment_repository() -> AppointmentRepository:
    """Get singleton AppointmentRepository."""
    global _repository
    if _repository is None:
        _repository = AppointmentRepository()
    return _repository
