"""Interface shared by all persistent guest stores."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Mapping

from ..events import ChangeCallback, ChangeEvent, ChangeFeed, diff_snapshots, index_by_id
from ..models import Guest


logger = logging.getLogger(__name__)


class DataProviderError(RuntimeError):
    """Raised when the persistent store, importer or exporter fails."""


class GuestNotFoundError(LookupError):
    """Raised when a guest id is not known to the store."""


class BaseGuestProvider(ABC):
    """Abstract interface for provider implementations.

    Subclasses implement the raw row operations; this class keeps the last
    snapshot the session has seen so that :meth:`poll_changes` reports only
    changes made elsewhere.
    """

    def __init__(self) -> None:
        self.changes = ChangeFeed()
        self._known: Dict[str, Guest] = {}

    @abstractmethod
    def _fetch_all(self) -> List[Guest]:
        """Return every guest in store order."""

    @abstractmethod
    def _insert_guests(self, guests: List[Guest]) -> List[Guest]:
        """Persist new guests and return them as stored."""

    @abstractmethod
    def _update_guest(self, guest_id: str, changes: Mapping[str, Any]) -> Guest:
        """Apply a partial row update and return the stored guest."""

    @abstractmethod
    def _delete_guest(self, guest_id: str) -> None:
        ...

    @abstractmethod
    def _delete_all(self) -> None:
        ...

    def list_all(self) -> List[Guest]:
        guests = self._fetch_all()
        self._known = index_by_id(guests)
        return guests

    def insert(self, guest: Guest) -> Guest:
        return self.insert_many([guest])[0]

    def insert_many(self, guests: List[Guest]) -> List[Guest]:
        if not guests:
            return []
        stored = self._insert_guests(list(guests))
        for guest in stored:
            self._known[guest.id] = guest
        logger.info("Inserted %d guest(s)", len(stored))
        return stored

    def update(self, guest_id: str, changes: Mapping[str, Any]) -> Guest:
        stored = self._update_guest(guest_id, changes)
        self._known[stored.id] = stored
        logger.info("Updated guest %s (%s)", guest_id, ", ".join(sorted(changes)))
        return stored

    def delete(self, guest_id: str) -> None:
        self._delete_guest(guest_id)
        self._known.pop(guest_id, None)
        logger.info("Deleted guest %s", guest_id)

    def delete_all(self) -> None:
        self._delete_all()
        self._known = {}
        logger.info("Deleted all guests")

    def subscribe(self, callback: ChangeCallback) -> Callable[[], None]:
        return self.changes.subscribe(callback)

    def poll_changes(self) -> List[ChangeEvent]:
        """Re-fetch the table and publish what changed since the last look."""

        current = index_by_id(self._fetch_all())
        events = diff_snapshots(self._known, current)
        self._known = current
        for event in events:
            self.changes.publish(event)
        if events:
            logger.info("Received %d remote change(s)", len(events))
        return events
