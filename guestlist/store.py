"""In-memory mirror of the persistent guest table."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Set

from .events import ChangeEvent, ChangeKind
from .models import Guest
from .validation import used_bracelet_numbers


logger = logging.getLogger(__name__)


class GuestRecordStore:
    """Authoritative list of guests, kept in the order the store returned them.

    The list is replaced wholesale on load and patched by change events. A
    notification is never assumed to arrive in mutation order: an update for
    an unknown id inserts it, an insert for a known id replaces it, and a
    delete for an unknown id is ignored.
    """

    def __init__(self, guests: Iterable[Guest] = ()) -> None:
        self._guests: Dict[str, Guest] = {}
        self.replace_all(guests)

    def replace_all(self, guests: Iterable[Guest]) -> None:
        self._guests = {guest.id: guest for guest in guests}

    def apply(self, event: ChangeEvent) -> None:
        if event.kind is ChangeKind.DELETE:
            self.remove(event.guest_id)
            return
        if event.guest is None:
            logger.warning("Ignoring %s event without a record for %s", event.kind.value, event.guest_id)
            return
        self.upsert(event.guest)

    def upsert(self, guest: Guest) -> None:
        self._guests[guest.id] = guest

    def remove(self, guest_id: str) -> None:
        self._guests.pop(guest_id, None)

    def get(self, guest_id: str) -> Guest | None:
        return self._guests.get(guest_id)

    def all(self) -> List[Guest]:
        return list(self._guests.values())

    def snapshot_numbers(self, exclude_id: str | None = None) -> Set[str]:
        return used_bracelet_numbers(self._guests.values(), exclude_id=exclude_id)

    def __contains__(self, guest_id: object) -> bool:
        return guest_id in self._guests

    def __iter__(self) -> Iterator[Guest]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._guests)
