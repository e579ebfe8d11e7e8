"""Guest store backed by a Supabase table through its PostgREST API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

import requests

from ..models import ROW_COLUMNS, Guest
from .base import BaseGuestProvider, DataProviderError, GuestNotFoundError


logger = logging.getLogger(__name__)


class SupabaseGuestProvider(BaseGuestProvider):
    """Read and write guest rows over HTTP.

    Supabase pushes table changes over a websocket; this client instead
    diffs snapshots in :meth:`poll_changes`, which the UI calls on a timer.
    """

    def __init__(
        self,
        *,
        url: str,
        api_key: str,
        table: str = "attendees",
        timeout: float = 10,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__()
        self.endpoint = f"{url.rstrip('/')}/rest/v1/{table}"
        self.table = table
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            }
        )

    def _request(
        self,
        method: str,
        *,
        params: Dict[str, str] | None = None,
        payload: Any = None,
        return_rows: bool = False,
    ) -> List[Dict[str, Any]]:
        headers = {"Prefer": "return=representation"} if return_rows else {}
        try:
            response = self.session.request(
                method,
                self.endpoint,
                params=params,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method, self.table, exc)
            raise DataProviderError(f"No se pudo conectar con la base de datos: {exc}") from exc

        if response.status_code >= 400:
            logger.error("%s %s returned %s: %s", method, self.table, response.status_code, response.text)
            raise DataProviderError(
                f"La base de datos respondió con un error: {response.status_code} {response.text}"
            )
        if not response.content:
            return []
        try:
            data = response.json()
        except ValueError as exc:
            raise DataProviderError("La base de datos devolvió una respuesta ilegible.") from exc
        return data if isinstance(data, list) else [data]

    def _fetch_all(self) -> List[Guest]:
        rows = self._request("GET", params={"select": "*", "order": "created_at.asc"})
        return [Guest.from_row(row) for row in rows]

    def _insert_guests(self, guests: List[Guest]) -> List[Guest]:
        payload = []
        for guest in guests:
            row = guest.to_row()
            if row["created_at"] is None:
                # let the table default stamp the row
                del row["created_at"]
            payload.append(row)
        rows = self._request("POST", payload=payload, return_rows=True)
        return [Guest.from_row(row) for row in rows]

    def _update_guest(self, guest_id: str, changes: Mapping[str, Any]) -> Guest:
        payload = {key: value for key, value in changes.items() if key in ROW_COLUMNS and key != "id"}
        rows = self._request(
            "PATCH",
            params={"id": f"eq.{guest_id}"},
            payload=payload,
            return_rows=True,
        )
        if not rows:
            raise GuestNotFoundError(f"No se encontró el invitado '{guest_id}'.")
        return Guest.from_row(rows[0])

    def _delete_guest(self, guest_id: str) -> None:
        rows = self._request("DELETE", params={"id": f"eq.{guest_id}"}, return_rows=True)
        if not rows:
            raise GuestNotFoundError(f"No se encontró el invitado '{guest_id}'.")

    def _delete_all(self) -> None:
        # PostgREST refuses an unfiltered DELETE
        self._request("DELETE", params={"id": "not.is.null"})
