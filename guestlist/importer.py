"""Read guest rows from an XLSX or CSV spreadsheet."""

from __future__ import annotations

import logging
import math
import numbers
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

import pandas as pd

from .companion import normalize_label
from .models import FieldValue, Guest, clean_number
from .providers import DataProviderError


logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".xlsx", ".xlsm", ".csv")

BRACELET_LABELS = {"numerodepulsera", "pulsera", "braceletnumber"}
COMPANION_BRACELET_LABELS = {
    "numerodepulseraacompanante",
    "pulseraacompanante",
    "companionbraceletnumber",
}
# Export-only status column; imported guests always start unconfirmed.
STATUS_LABELS = {"confirmado"}


class ImportFileError(DataProviderError):
    """Raised when a spreadsheet cannot be turned into guest rows."""


def is_empty(value: Any) -> bool:
    """Check whether a cell is empty or whitespace only."""

    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, float):
        return not math.isfinite(value)
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def format_cell(value: Any) -> FieldValue | None:
    """Turn a spreadsheet cell into a field value, keeping booleans."""

    if is_empty(value):
        return None
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return value
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if isinstance(value, numbers.Real):
        number = float(value)
        if number.is_integer():
            return str(int(number))
        return format(number, "g")
    if isinstance(value, datetime):
        if value.time() == datetime.min.time():
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip() or None


def _read_frame(path: Path, sheet_name: str | None) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ImportFileError("Formato no válido. Por favor, carga un archivo XLSX o CSV.")
    try:
        if suffix == ".csv":
            return pd.read_csv(path, dtype=object, keep_default_na=False, encoding="utf-8-sig")
        return pd.read_excel(path, sheet_name=sheet_name or 0, dtype=object, engine="openpyxl")
    except FileNotFoundError as exc:
        raise ImportFileError(f"No se encontró el archivo '{path}'.") from exc
    except (ValueError, OSError, KeyError) as exc:
        raise ImportFileError(f"No se pudo procesar el archivo. Verifica el formato. ({exc})") from exc


def rows_from_frame(frame: pd.DataFrame) -> List[Dict[str, FieldValue]]:
    headers = [str(column).strip() for column in frame.columns]
    rows: List[Dict[str, FieldValue]] = []
    for values in frame.itertuples(index=False, name=None):
        row: Dict[str, FieldValue] = {}
        for header, value in zip(headers, values):
            if not header or header.startswith("Unnamed:"):
                continue
            formatted = format_cell(value)
            if formatted is not None:
                row[header] = formatted
        if row:
            rows.append(row)
    return rows


def read_guest_rows(path: Path, sheet_name: str | None = None) -> List[Dict[str, FieldValue]]:
    """Return the rows of the first (or named) sheet as ordered mappings."""

    path = Path(path)
    frame = _read_frame(path, sheet_name)
    rows = rows_from_frame(frame)
    logger.info("Read %d row(s) from %s", len(rows), path.name)
    return rows


def _split_bracelets(row: Mapping[str, FieldValue]) -> tuple[Dict[str, FieldValue], str | None, str | None]:
    fields: Dict[str, FieldValue] = {}
    primary = companion = None
    for header, value in row.items():
        label = normalize_label(header)
        if label in BRACELET_LABELS:
            primary = clean_number(value)
        elif label in COMPANION_BRACELET_LABELS:
            companion = clean_number(value)
        elif label in STATUS_LABELS:
            continue
        else:
            fields[header] = value
    return fields, primary, companion


def guests_from_rows(rows: Sequence[Mapping[str, FieldValue]], file_name: str | None = None) -> List[Guest]:
    """Create new, unconfirmed guests from imported rows.

    Bracelet columns found in the sheet (for example a previously exported
    roster) are lifted out of the field document into the guest's bracelet
    attributes.
    """

    guests: List[Guest] = []
    for row in rows:
        fields, primary, companion = _split_bracelets(row)
        guests.append(
            Guest.create(
                fields,
                file_name=file_name,
                bracelet_number=primary,
                companion_bracelet_number=companion,
            )
        )
    return guests
