"""Pending/Confirmed transitions for a single guest."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable

from .models import Guest, clean_number, format_timestamp
from .validation import BraceletValidationError, BraceletViolation, validate_assignment


class InvalidTransitionError(RuntimeError):
    """Raised when a guest is not in the state an operation requires."""


class ConfirmationStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"


def status_of(guest: Guest) -> ConfirmationStatus:
    return ConfirmationStatus.CONFIRMED if guest.is_confirmed else ConfirmationStatus.PENDING


def _checked_numbers(
    guest: Guest,
    primary: str | None,
    companion: str | None,
    all_guests: Iterable[Guest],
) -> tuple[str, str | None]:
    primary_number = clean_number(primary)
    if not primary_number:
        raise BraceletValidationError(BraceletViolation.MISSING_PRIMARY)
    validate_assignment(
        guest.id, primary_number, companion, guest.has_companion, all_guests
    ).raise_for_violation()
    return primary_number, clean_number(companion)


def confirm(
    guest: Guest,
    primary: str | None,
    companion: str | None,
    all_guests: Iterable[Guest],
    *,
    now: datetime | None = None,
) -> Guest:
    """Move ``guest`` to Confirmed with the given bracelet numbers.

    Raises :class:`BraceletValidationError` without touching ``guest`` when
    the numbers are missing or already taken. Confirming a guest that is
    already confirmed re-assigns the numbers and keeps the original
    confirmation time.
    """

    if guest.is_confirmed:
        return reassign(guest, primary, companion, all_guests)
    primary_number, companion_number = _checked_numbers(guest, primary, companion, all_guests)
    return replace(
        guest,
        is_confirmed=True,
        bracelet_number=primary_number,
        companion_bracelet_number=companion_number,
        confirmed_at=now or datetime.now(timezone.utc),
    )


def reassign(
    guest: Guest,
    primary: str | None,
    companion: str | None,
    all_guests: Iterable[Guest],
) -> Guest:
    if not guest.is_confirmed:
        raise InvalidTransitionError("Solo se pueden editar las pulseras de un invitado confirmado.")
    primary_number, companion_number = _checked_numbers(guest, primary, companion, all_guests)
    return replace(
        guest,
        bracelet_number=primary_number,
        companion_bracelet_number=companion_number,
    )


def unconfirm(guest: Guest) -> Guest:
    """Return ``guest`` to Pending and release both bracelet numbers."""

    return replace(
        guest,
        is_confirmed=False,
        bracelet_number=None,
        companion_bracelet_number=None,
        confirmed_at=None,
    )


def confirmation_changes(guest: Guest) -> Dict[str, Any]:
    """Partial row carrying the confirmation columns of ``guest``."""

    return {
        "is_confirmed": guest.is_confirmed,
        "confirmed_at": format_timestamp(guest.confirmed_at),
        "bracelet_number": clean_number(guest.bracelet_number),
        "companion_bracelet_number": clean_number(guest.companion_bracelet_number),
    }
