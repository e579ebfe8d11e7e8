"""Bracelet number uniqueness rules."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Set, Tuple

from .models import Guest, clean_number


class BraceletViolation(str, Enum):
    DUPLICATE_PRIMARY = "duplicate_primary"
    DUPLICATE_COMPANION = "duplicate_companion"
    SAME_NUMBER = "same_number"
    MISSING_COMPANION = "missing_companion"
    MISSING_PRIMARY = "missing_primary"


VIOLATION_MESSAGES = {
    BraceletViolation.DUPLICATE_PRIMARY: "El número de pulsera principal ya está asignado a otro invitado.",
    BraceletViolation.DUPLICATE_COMPANION: "El número de pulsera del acompañante ya está asignado a otro invitado.",
    BraceletViolation.SAME_NUMBER: "El número de pulsera principal y el del acompañante no pueden ser iguales.",
    BraceletViolation.MISSING_COMPANION: "Debe asignar una pulsera para el acompañante.",
    BraceletViolation.MISSING_PRIMARY: "Debe asignar un número de pulsera para confirmar al invitado.",
}


class BraceletValidationError(ValueError):
    """Raised when a bracelet assignment breaks one of the uniqueness rules."""

    def __init__(self, violation: BraceletViolation, message: str | None = None) -> None:
        self.violation = violation
        super().__init__(message or VIOLATION_MESSAGES[violation])


@dataclass(frozen=True)
class ValidationResult:
    violation: Optional[BraceletViolation] = None

    @property
    def ok(self) -> bool:
        return self.violation is None

    def raise_for_violation(self) -> None:
        if self.violation is not None:
            raise BraceletValidationError(self.violation)


def used_bracelet_numbers(guests: Iterable[Guest], exclude_id: str | None = None) -> Set[str]:
    """Return every bracelet number assigned to a guest other than ``exclude_id``."""

    numbers: Set[str] = set()
    for guest in guests:
        if exclude_id is not None and guest.id == exclude_id:
            continue
        numbers.update(guest.bracelet_numbers())
    return numbers


def validate_assignment(
    guest_id: str,
    proposed_primary: str | None,
    proposed_companion: str | None,
    has_companion: bool,
    all_guests: Iterable[Guest],
) -> ValidationResult:
    """Check a proposed bracelet assignment against everybody else's numbers.

    The guest's own current numbers are excluded so that saving an unchanged
    assignment never conflicts with itself. Values are compared as trimmed
    strings; ``"007"`` and ``"7"`` are different bracelets.
    """

    primary = clean_number(proposed_primary)
    companion = clean_number(proposed_companion)
    taken = used_bracelet_numbers(all_guests, exclude_id=guest_id)

    if primary and primary in taken:
        return ValidationResult(BraceletViolation.DUPLICATE_PRIMARY)
    if has_companion and not companion:
        return ValidationResult(BraceletViolation.MISSING_COMPANION)
    if companion and companion in taken:
        return ValidationResult(BraceletViolation.DUPLICATE_COMPANION)
    if primary and companion and primary == companion:
        return ValidationResult(BraceletViolation.SAME_NUMBER)
    return ValidationResult()


def find_conflicts(guests: Iterable[Guest]) -> List[Tuple[Guest, BraceletViolation]]:
    """List guests whose numbers break the roster-wide uniqueness invariants."""

    roster = list(guests)
    counts = Counter(number for guest in roster for number in guest.bracelet_numbers())
    conflicts: List[Tuple[Guest, BraceletViolation]] = []
    for guest in roster:
        primary = clean_number(guest.bracelet_number)
        companion = clean_number(guest.companion_bracelet_number)
        if primary and companion and primary == companion:
            conflicts.append((guest, BraceletViolation.SAME_NUMBER))
        elif primary and counts[primary] > 1:
            conflicts.append((guest, BraceletViolation.DUPLICATE_PRIMARY))
        elif companion and counts[companion] > 1:
            conflicts.append((guest, BraceletViolation.DUPLICATE_COMPANION))
    return conflicts
