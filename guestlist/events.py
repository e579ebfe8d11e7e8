"""Change notifications delivered by the persistent guest store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional

from .models import Guest


logger = logging.getLogger(__name__)


class ChangeKind(Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    kind: ChangeKind
    guest_id: str
    guest: Optional[Guest] = None


ChangeCallback = Callable[[ChangeEvent], None]


class ChangeFeed:
    """Fan out change events to subscribers, one event at a time.

    Delivery happens synchronously in the publisher's thread; there is no
    ordering guarantee relative to the mutations that caused the events.
    """

    def __init__(self) -> None:
        self._subscribers: List[ChangeCallback] = []

    def subscribe(self, callback: ChangeCallback) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: ChangeEvent) -> None:
        logger.debug("Publishing %s for guest %s", event.kind.value, event.guest_id)
        for callback in list(self._subscribers):
            callback(event)

    def __len__(self) -> int:
        return len(self._subscribers)


def diff_snapshots(previous: Mapping[str, Guest], current: Mapping[str, Guest]) -> List[ChangeEvent]:
    """Describe how ``current`` differs from ``previous`` as change events."""

    events: List[ChangeEvent] = []
    for guest_id, guest in current.items():
        known = previous.get(guest_id)
        if known is None:
            events.append(ChangeEvent(ChangeKind.INSERT, guest_id, guest))
        elif known != guest:
            events.append(ChangeEvent(ChangeKind.UPDATE, guest_id, guest))
    for guest_id in previous:
        if guest_id not in current:
            events.append(ChangeEvent(ChangeKind.DELETE, guest_id))
    return events


def index_by_id(guests: List[Guest]) -> Dict[str, Guest]:
    return {guest.id: guest for guest in guests}
