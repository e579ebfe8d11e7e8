"""Guest store backed by a local JSON fixture file."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping

from ..models import ROW_COLUMNS, Guest
from .base import BaseGuestProvider, DataProviderError, GuestNotFoundError


class FixtureGuestProvider(BaseGuestProvider):
    """Keep guest rows in a JSON file using the remote table's row layout.

    Several sessions may share the file; :meth:`poll_changes` picks up what
    the others wrote.
    """

    def __init__(self, fixture_path: Path):
        super().__init__()
        self.fixture_path = Path(fixture_path)

    def _load_rows(self) -> List[Dict[str, Any]]:
        if not self.fixture_path.exists():
            return []
        try:
            raw_data = json.loads(self.fixture_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise DataProviderError(f"No se pudo leer el archivo de invitados: {exc}") from exc
        except OSError as exc:
            raise DataProviderError(f"No se pudo abrir el archivo de invitados: {exc}") from exc

        if isinstance(raw_data, dict):
            raw_data = raw_data.get("guests", [])
        if not isinstance(raw_data, list):
            raise DataProviderError("El archivo de invitados tiene un formato inesperado.")
        return [row for row in raw_data if isinstance(row, dict) and row.get("id")]

    def _save_rows(self, rows: List[Dict[str, Any]]) -> None:
        try:
            self.fixture_path.parent.mkdir(parents=True, exist_ok=True)
            self.fixture_path.write_text(
                json.dumps(rows, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as exc:
            raise DataProviderError(f"No se pudo guardar el archivo de invitados: {exc}") from exc

    def _fetch_all(self) -> List[Guest]:
        rows = self._load_rows()
        rows.sort(key=lambda row: row.get("created_at") or "")
        return [Guest.from_row(row) for row in rows]

    def _insert_guests(self, guests: List[Guest]) -> List[Guest]:
        rows = self._load_rows()
        existing = {row["id"] for row in rows}
        created_at = datetime.now(timezone.utc).isoformat()
        new_rows = []
        for guest in guests:
            if guest.id in existing:
                raise DataProviderError(f"Ya existe un invitado con el id '{guest.id}'.")
            row = guest.to_row()
            row["created_at"] = row["created_at"] or created_at
            new_rows.append(row)
            existing.add(guest.id)
        self._save_rows(rows + new_rows)
        return [Guest.from_row(row) for row in new_rows]

    def _update_guest(self, guest_id: str, changes: Mapping[str, Any]) -> Guest:
        rows = self._load_rows()
        for row in rows:
            if row["id"] != guest_id:
                continue
            row.update({key: value for key, value in changes.items() if key in ROW_COLUMNS and key != "id"})
            self._save_rows(rows)
            return Guest.from_row(row)
        raise GuestNotFoundError(f"No se encontró el invitado '{guest_id}'.")

    def _delete_guest(self, guest_id: str) -> None:
        rows = self._load_rows()
        remaining = [row for row in rows if row["id"] != guest_id]
        if len(remaining) == len(rows):
            raise GuestNotFoundError(f"No se encontró el invitado '{guest_id}'.")
        self._save_rows(remaining)

    def _delete_all(self) -> None:
        self._save_rows([])
