"""Data models for the guest list."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .companion import detect_companion, normalize_label


FieldValue = Union[str, bool]

# Columns stored next to ``row_data`` in the persistent table.
ROW_COLUMNS = (
    "id",
    "file_name",
    "row_data",
    "bracelet_number",
    "companion_bracelet_number",
    "is_confirmed",
    "confirmed_at",
    "created_at",
)

# Keys older clients wrote into ``row_data`` that duplicate first-class columns.
_LEGACY_ROW_DATA_KEYS = {"id", "isConfirmed", "braceletNumber", "companionBraceletNumber"}

_NAME_LABELS = ("apellidoynombre", "nombreyapellido", "nombre", "name", "fullname")
_DOCUMENT_LABELS = ("dni", "documento", "document", "documentnumber")


def clean_number(value: Any) -> Optional[str]:
    """Trim a bracelet number; empty values become ``None``."""

    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(slots=True)
class Guest:
    id: str
    fields: Dict[str, FieldValue] = field(default_factory=dict)
    bracelet_number: Optional[str] = None
    companion_bracelet_number: Optional[str] = None
    is_confirmed: bool = False
    confirmed_at: Optional[datetime] = None
    has_companion: bool = False
    file_name: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        fields: Mapping[str, FieldValue],
        *,
        guest_id: str | None = None,
        file_name: str | None = None,
        bracelet_number: str | None = None,
        companion_bracelet_number: str | None = None,
    ) -> "Guest":
        """Build a new, unconfirmed guest and assign its id."""

        return cls(
            id=guest_id or str(uuid.uuid4()),
            fields=dict(fields),
            bracelet_number=clean_number(bracelet_number),
            companion_bracelet_number=clean_number(companion_bracelet_number),
            has_companion=detect_companion(fields),
            file_name=file_name,
        )

    def with_fields(self, fields: Mapping[str, FieldValue]) -> "Guest":
        """Return a copy with a new field document and a recomputed companion flag."""

        return replace(self, fields=dict(fields), has_companion=detect_companion(fields))

    def bracelet_numbers(self) -> Tuple[str, ...]:
        return tuple(
            number
            for number in (
                clean_number(self.bracelet_number),
                clean_number(self.companion_bracelet_number),
            )
            if number
        )

    def field_by_label(self, labels: Tuple[str, ...]) -> Optional[str]:
        normalized = {normalize_label(key): key for key in self.fields}
        for label in labels:
            key = normalized.get(label)
            if key is None:
                continue
            value = self.fields.get(key)
            if value not in (None, ""):
                return str(value)
        return None

    def display_name(self) -> str:
        return self.field_by_label(_NAME_LABELS) or self.id

    def document_number(self) -> Optional[str]:
        return self.field_by_label(_DOCUMENT_LABELS)

    def to_row(self) -> Dict[str, Any]:
        """Flatten the guest into the persistent table's row layout."""

        return {
            "id": self.id,
            "file_name": self.file_name,
            "row_data": dict(self.fields),
            "bracelet_number": clean_number(self.bracelet_number),
            "companion_bracelet_number": clean_number(self.companion_bracelet_number),
            "is_confirmed": self.is_confirmed,
            "confirmed_at": format_timestamp(self.confirmed_at),
            "created_at": format_timestamp(self.created_at),
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Guest":
        raw_fields = row.get("row_data")
        if not isinstance(raw_fields, dict):
            raw_fields = {}
        fields: Dict[str, FieldValue] = {
            str(key): value
            for key, value in raw_fields.items()
            if key not in _LEGACY_ROW_DATA_KEYS and value is not None
        }
        return cls(
            id=str(row.get("id", "")),
            fields=fields,
            bracelet_number=clean_number(row.get("bracelet_number")),
            companion_bracelet_number=clean_number(row.get("companion_bracelet_number")),
            is_confirmed=row.get("is_confirmed") is True,
            confirmed_at=parse_timestamp(row.get("confirmed_at")),
            has_companion=detect_companion(fields),
            file_name=row.get("file_name"),
            created_at=parse_timestamp(row.get("created_at")),
        )


def field_names(guests: Iterable[Guest]) -> List[str]:
    """Return the union of field keys in first-seen order."""

    names: List[str] = []
    seen: set[str] = set()
    for guest in guests:
        for key in guest.fields:
            if key not in seen:
                seen.add(key)
                names.append(key)
    return names
