from __future__ import annotations

from datetime import datetime, timezone

import pytest

from guestlist.confirmation import (
    ConfirmationStatus,
    InvalidTransitionError,
    confirm,
    confirmation_changes,
    reassign,
    status_of,
    unconfirm,
)
from guestlist.validation import BraceletValidationError, BraceletViolation

from conftest import make_guest

NOW = datetime(2026, 10, 17, 21, 0, tzinfo=timezone.utc)


def test_confirm_pending_guest():
    guest = make_guest("A")
    confirmed = confirm(guest, " 001 ", None, [guest], now=NOW)
    assert confirmed.is_confirmed is True
    assert confirmed.bracelet_number == "001"
    assert confirmed.confirmed_at == NOW
    assert status_of(confirmed) is ConfirmationStatus.CONFIRMED
    assert status_of(guest) is ConfirmationStatus.PENDING


def test_confirm_without_primary_fails():
    guest = make_guest("A")
    with pytest.raises(BraceletValidationError) as excinfo:
        confirm(guest, "  ", None, [guest])
    assert excinfo.value.violation is BraceletViolation.MISSING_PRIMARY
    assert guest.is_confirmed is False


def test_confirm_with_taken_number_leaves_guest_untouched():
    a = make_guest("A", primary="001", confirmed=True)
    b = make_guest("B")
    with pytest.raises(BraceletValidationError) as excinfo:
        confirm(b, "001", None, [a, b])
    assert excinfo.value.violation is BraceletViolation.DUPLICATE_PRIMARY
    assert b.is_confirmed is False
    assert b.bracelet_number is None


def test_confirm_requires_companion_number():
    guest = make_guest("C", has_companion=True)
    with pytest.raises(BraceletValidationError) as excinfo:
        confirm(guest, "010", "", [guest])
    assert excinfo.value.violation is BraceletViolation.MISSING_COMPANION


def test_confirming_again_reassigns_and_keeps_timestamp():
    guest = confirm(make_guest("A"), "001", None, [], now=NOW)
    again = confirm(guest, "002", None, [guest], now=datetime(2030, 1, 1, tzinfo=timezone.utc))
    assert again.bracelet_number == "002"
    assert again.confirmed_at == NOW


def test_reassign_requires_confirmed_guest():
    with pytest.raises(InvalidTransitionError):
        reassign(make_guest("A"), "001", None, [])


def test_unconfirm_clears_numbers_and_is_idempotent():
    guest = make_guest("D", primary="020", companion="021", has_companion=True, confirmed=True)
    once = unconfirm(guest)
    twice = unconfirm(once)
    assert once == twice
    assert once.is_confirmed is False
    assert not once.bracelet_number
    assert not once.companion_bracelet_number
    assert once.confirmed_at is None


def test_released_number_can_go_to_another_guest():
    d = make_guest("D", primary="020", companion="021", has_companion=True, confirmed=True)
    e = make_guest("E")
    d = unconfirm(d)
    confirmed = confirm(e, "020", None, [d, e], now=NOW)
    assert confirmed.bracelet_number == "020"


def test_confirmation_changes_lists_status_columns():
    guest = confirm(make_guest("A"), "001", None, [], now=NOW)
    assert confirmation_changes(guest) == {
        "is_confirmed": True,
        "confirmed_at": NOW.isoformat(),
        "bracelet_number": "001",
        "companion_bracelet_number": None,
    }
