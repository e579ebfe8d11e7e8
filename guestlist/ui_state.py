"""Which dialog is open and for whom, as a single value."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


class InvalidStateError(RuntimeError):
    """Raised when a UI action does not fit the current dialog state."""


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class EditingGuest:
    guest_id: str


@dataclass(frozen=True)
class ConfirmingGuest:
    guest_id: str
    draft_primary: str = ""
    draft_companion: str = ""


UiState = Union[Idle, EditingGuest, ConfirmingGuest]


def active_guest_id(state: UiState) -> Optional[str]:
    if isinstance(state, (EditingGuest, ConfirmingGuest)):
        return state.guest_id
    return None
