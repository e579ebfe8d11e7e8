"""Controller logic for the guest list."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, List, Mapping, Sequence

from . import confirmation
from .events import ChangeEvent, ChangeKind
from .exporter import ExportFileError, build_export_rows, default_export_name, export_guests
from .filters import filter_guests
from .importer import ImportFileError, guests_from_rows, read_guest_rows
from .models import FieldValue, Guest
from .providers import BaseGuestProvider, GuestNotFoundError
from .store import GuestRecordStore
from .ui_state import ConfirmingGuest, EditingGuest, Idle, InvalidStateError, UiState, active_guest_id
from .validation import VIOLATION_MESSAGES, find_conflicts, validate_assignment


logger = logging.getLogger(__name__)


class MissingFieldsError(ValueError):
    """Raised when a new guest lacks one of the required fields."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            "Por favor complete los siguientes campos: " + ", ".join(self.missing)
        )


@dataclass(frozen=True)
class GuestStats:
    total: int
    confirmed: int

    @property
    def pending(self) -> int:
        return self.total - self.confirmed


class GuestListController:
    """High-level operations shared between UI and tests.

    Every bracelet check runs against the store's latest snapshot. Remote
    failures propagate as :class:`~guestlist.providers.DataProviderError`
    before the local store is touched.
    """

    def __init__(
        self,
        provider: BaseGuestProvider,
        *,
        required_fields: Iterable[str] = (),
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.provider = provider
        self.required_fields = tuple(required_fields)
        self.store = GuestRecordStore()
        self.ui_state: UiState = Idle()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._unsubscribe = provider.subscribe(self._on_change)

    def close(self) -> None:
        self._unsubscribe()

    # -- reading -----------------------------------------------------------------

    def load(self) -> List[Guest]:
        guests = self.provider.list_all()
        self.store.replace_all(guests)
        self._drop_stale_state()
        logger.info("Loaded %d guest(s)", len(guests))
        return guests

    def list_guests(self, query: str = "") -> List[Guest]:
        return filter_guests(self.store.all(), query)

    def get_guest(self, guest_id: str) -> Guest:
        guest = self.store.get(guest_id)
        if guest is None:
            raise GuestNotFoundError(f"No se encontró el invitado '{guest_id}'.")
        return guest

    def stats(self) -> GuestStats:
        guests = self.store.all()
        return GuestStats(total=len(guests), confirmed=sum(1 for guest in guests if guest.is_confirmed))

    # -- change notifications ----------------------------------------------------

    def _on_change(self, event: ChangeEvent) -> None:
        self.store.apply(event)
        if event.kind is ChangeKind.DELETE:
            self._drop_stale_state()

    def sync(self) -> List[ChangeEvent]:
        """Pull changes made by other sessions into the local store."""

        return self.provider.poll_changes()

    def _drop_stale_state(self) -> None:
        guest_id = active_guest_id(self.ui_state)
        if guest_id is not None and guest_id not in self.store:
            logger.info("Closing dialog for removed guest %s", guest_id)
            self.ui_state = Idle()

    # -- roster-wide operations --------------------------------------------------

    def import_file(self, path: Path, sheet_name: str | None = None) -> List[Guest]:
        """Replace the whole guest table with the rows of a spreadsheet."""

        path = Path(path)
        rows = read_guest_rows(path, sheet_name=sheet_name)
        guests = guests_from_rows(rows, file_name=path.name)
        conflicts = find_conflicts(guests)
        if conflicts:
            guest, violation = conflicts[0]
            raise ImportFileError(
                f"Fila {guests.index(guest) + 2}: {VIOLATION_MESSAGES[violation]}"
            )
        self.provider.delete_all()
        stored = self.provider.insert_many(guests)
        self.store.replace_all(stored)
        self.ui_state = Idle()
        logger.info("Imported %d guest(s) from %s", len(stored), path.name)
        return stored

    def export(
        self,
        directory: Path,
        base_name: str | None = None,
        field_order: Sequence[str] | None = None,
        *,
        today: date | None = None,
    ) -> Path:
        guests = self.store.all()
        if not guests:
            raise ExportFileError("No hay datos para exportar.")
        rows = build_export_rows(guests, field_order)
        return export_guests(rows, base_name or default_export_name(today), directory)

    # -- single guest operations -------------------------------------------------

    def add_guest(
        self,
        fields: Mapping[str, FieldValue],
        bracelet_number: str | None = None,
        companion_bracelet_number: str | None = None,
    ) -> Guest:
        missing = [name for name in self.required_fields if not str(fields.get(name) or "").strip()]
        if missing:
            raise MissingFieldsError(missing)
        guest = Guest.create(
            fields,
            bracelet_number=bracelet_number,
            companion_bracelet_number=companion_bracelet_number,
        )
        if guest.bracelet_numbers():
            validate_assignment(
                guest.id,
                guest.bracelet_number,
                guest.companion_bracelet_number,
                guest.has_companion,
                self.store.all(),
            ).raise_for_violation()
        stored = self.provider.insert(guest)
        self.store.upsert(stored)
        return stored

    def edit_guest(self, guest_id: str, fields: Mapping[str, FieldValue]) -> Guest:
        """Replace a guest's field document.

        A confirmed guest who now travels with a companion must already hold
        a companion bracelet.
        """

        updated = self.get_guest(guest_id).with_fields(fields)
        if updated.is_confirmed:
            validate_assignment(
                updated.id,
                updated.bracelet_number,
                updated.companion_bracelet_number,
                updated.has_companion,
                self.store.all(),
            ).raise_for_violation()
        stored = self._update_remote(guest_id, {"row_data": dict(updated.fields)})
        self.store.upsert(stored)
        return stored

    def confirm_guest(self, guest_id: str, primary: str | None, companion: str | None = None) -> Guest:
        guest = self.get_guest(guest_id)
        confirmed = confirmation.confirm(guest, primary, companion, self.store.all(), now=self._clock())
        return self._save_confirmation(confirmed)

    def reassign_bracelets(self, guest_id: str, primary: str | None, companion: str | None = None) -> Guest:
        guest = self.get_guest(guest_id)
        reassigned = confirmation.reassign(guest, primary, companion, self.store.all())
        return self._save_confirmation(reassigned)

    def unconfirm_guest(self, guest_id: str) -> Guest:
        """Return a guest to Pending and release every bracelet they hold.

        Also applies to Pending guests that came in with numbers, for example
        from a re-imported export.
        """

        guest = self.get_guest(guest_id)
        return self._save_confirmation(confirmation.unconfirm(guest))

    def _update_remote(self, guest_id: str, changes: Mapping[str, object]) -> Guest:
        try:
            return self.provider.update(guest_id, changes)
        except GuestNotFoundError:
            # deleted by another session since the last poll
            logger.warning("Guest %s no longer exists in the store", guest_id)
            self.store.remove(guest_id)
            self._drop_stale_state()
            raise

    def _save_confirmation(self, guest: Guest) -> Guest:
        stored = self._update_remote(guest.id, confirmation.confirmation_changes(guest))
        self.store.upsert(stored)
        logger.info(
            "Guest %s is %s (bracelets: %s)",
            guest.id,
            confirmation.status_of(stored).value,
            ", ".join(stored.bracelet_numbers()) or "-",
        )
        return stored

    def delete_guest(self, guest_id: str) -> None:
        self.get_guest(guest_id)
        try:
            self.provider.delete(guest_id)
        except GuestNotFoundError:
            logger.info("Guest %s was already deleted by another session", guest_id)
        self.store.remove(guest_id)
        self._drop_stale_state()

    # -- dialog state ------------------------------------------------------------

    def begin_edit(self, guest_id: str) -> EditingGuest:
        self.get_guest(guest_id)
        self.ui_state = EditingGuest(guest_id)
        return self.ui_state

    def begin_confirm(self, guest_id: str) -> ConfirmingGuest:
        guest = self.get_guest(guest_id)
        self.ui_state = ConfirmingGuest(
            guest_id,
            draft_primary=guest.bracelet_number or "",
            draft_companion=guest.companion_bracelet_number or "",
        )
        return self.ui_state

    def update_draft(self, *, primary: str | None = None, companion: str | None = None) -> ConfirmingGuest:
        state = self.ui_state
        if not isinstance(state, ConfirmingGuest):
            raise InvalidStateError("No hay una confirmación en curso.")
        if primary is not None:
            state = replace(state, draft_primary=primary)
        if companion is not None:
            state = replace(state, draft_companion=companion)
        self.ui_state = state
        return state

    def submit_confirmation(self) -> Guest:
        """Confirm the guest being edited with the drafted numbers.

        On a validation or remote failure the draft stays open so staff can
        correct it.
        """

        state = self.ui_state
        if not isinstance(state, ConfirmingGuest):
            raise InvalidStateError("No hay una confirmación en curso.")
        guest = self.confirm_guest(state.guest_id, state.draft_primary, state.draft_companion)
        self.ui_state = Idle()
        return guest

    def submit_edit(self, fields: Mapping[str, FieldValue]) -> Guest:
        state = self.ui_state
        if not isinstance(state, EditingGuest):
            raise InvalidStateError("No hay una edición en curso.")
        guest = self.edit_guest(state.guest_id, fields)
        self.ui_state = Idle()
        return guest

    def cancel(self) -> None:
        self.ui_state = Idle()
