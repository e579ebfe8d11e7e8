"""Write the roster back to a one-sheet XLSX file."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence

import pandas as pd

from .companion import format_yes_no
from .models import Guest, field_names
from .providers import DataProviderError


logger = logging.getLogger(__name__)

SHEET_NAME = "Invitados"
BRACELET_COLUMN = "Número de Pulsera"
COMPANION_BRACELET_COLUMN = "Número de Pulsera Acompañante"
CONFIRMED_COLUMN = "Confirmado"
STATUS_COLUMNS = (BRACELET_COLUMN, COMPANION_BRACELET_COLUMN, CONFIRMED_COLUMN)


class ExportFileError(DataProviderError):
    """Raised when the export file cannot be written."""


def default_export_name(today: date | None = None) -> str:
    today = today or date.today()
    return f"invitados-{today.day}-{today.month}-{today.year}"


def build_export_rows(
    guests: Iterable[Guest],
    field_order: Sequence[str] | None = None,
) -> List[Dict[str, object]]:
    """Flatten guests into export rows.

    Columns listed in ``field_order`` come first, followed by every other
    field seen on any guest in first-seen order, so fields added by hand are
    never dropped. The bracelet and status columns are always appended last.
    """

    roster = list(guests)
    ordered = list(dict.fromkeys(field_order or ()))
    ordered += [name for name in field_names(roster) if name not in ordered]
    columns = [name for name in ordered if name not in STATUS_COLUMNS]
    rows: List[Dict[str, object]] = []
    for guest in roster:
        row: Dict[str, object] = {}
        for column in columns:
            value = guest.fields.get(column)
            row[column] = "" if value is None else value
        row[BRACELET_COLUMN] = guest.bracelet_number or ""
        row[COMPANION_BRACELET_COLUMN] = guest.companion_bracelet_number or ""
        row[CONFIRMED_COLUMN] = format_yes_no(guest.is_confirmed)
        rows.append(row)
    return rows


def export_guests(rows: Sequence[Mapping[str, object]], base_name: str, directory: Path) -> Path:
    """Write ``rows`` to ``<directory>/<base_name>.xlsx`` and return the path."""

    directory = Path(directory)
    target = directory / f"{base_name}.xlsx"
    columns = list(rows[0].keys()) if rows else list(STATUS_COLUMNS)
    frame = pd.DataFrame(list(rows), columns=columns)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        frame.to_excel(target, sheet_name=SHEET_NAME, index=False, engine="openpyxl")
    except (OSError, ValueError) as exc:
        raise ExportFileError(f"No se pudo exportar el archivo: {exc}") from exc
    logger.info("Exported %d row(s) to %s", len(rows), target)
    return target
