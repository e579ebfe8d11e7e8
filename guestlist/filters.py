"""Free-text search over guest records."""

from __future__ import annotations

from typing import Iterable, List

from .models import Guest


def guest_matches(guest: Guest, query: str) -> bool:
    needle = query.strip().lower()
    if not needle:
        return True
    values = [*guest.fields.values(), *guest.bracelet_numbers()]
    return any(needle in str(value).lower() for value in values if value not in (None, ""))


def filter_guests(guests: Iterable[Guest], query: str = "") -> List[Guest]:
    """Case-insensitive substring search across all field values."""

    return [guest for guest in guests if guest_matches(guest, query)]
