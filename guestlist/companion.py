"""Normalisation of imported yes/no answers and the companion flag."""

from __future__ import annotations

import re
import unicodedata
from typing import Any, Mapping


_NON_ALNUM_PATTERN = re.compile(r"[^0-9a-z]")

_AFFIRMATIVE_VALUES = {"si", "true", "yes", "1"}

# Headers answering "are you travelling with a companion?"
COMPANION_FLAG_LABELS = {
    "venisacompanado",
    "vienesacompanado",
    "vasacompanado",
    "acompanado",
    "conacompanante",
    "hascompanion",
    "withcompanion",
    "travelingwithcompanion",
    "travellingwithcompanion",
}

# Headers that only carry a value when a companion exists.
COMPANION_DETAIL_LABELS = {
    "apellidoynombredelacompanante",
    "nombredelacompanante",
    "nombreacompanante",
    "dniacompanante",
    "dnidelacompanante",
    "documentoacompanante",
    "companionname",
    "companionid",
    "companiondocument",
}


def normalize_label(label: str) -> str:
    """Return ``label`` lower-cased, without accents and punctuation."""

    decomposed = unicodedata.normalize("NFKD", str(label))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM_PATTERN.sub("", stripped.lower())


def is_affirmative(value: Any) -> bool:
    """Interpret a spreadsheet answer such as ``"Sí"`` or ``1`` as a boolean."""

    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value == 1
    return normalize_label(value) in _AFFIRMATIVE_VALUES


def format_yes_no(value: Any) -> str:
    return "Si" if is_affirmative(value) else "No"


def detect_companion(fields: Mapping[str, Any]) -> bool:
    """Derive the canonical "has companion" flag for one guest record.

    A guest has a companion when the dedicated flag column holds an
    affirmative answer, or when any companion name/document column is
    filled in. The result is computed once when a record enters the system
    and stored on the :class:`~guestlist.models.Guest`.
    """

    for label, value in fields.items():
        if normalize_label(label) in COMPANION_FLAG_LABELS and is_affirmative(value):
            return True
    for label, value in fields.items():
        if normalize_label(label) not in COMPANION_DETAIL_LABELS:
            continue
        if value is not None and str(value).strip():
            return True
    return False
