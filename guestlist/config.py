"""Application configuration utilities."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple


DEFAULT_REQUIRED_FIELDS = ("DNI", "Apellido y Nombre", "Teléfono")


@dataclass(frozen=True)
class AppConfig:
    """Configuration container for the guest list application."""

    data_source: str = "fixture"
    fixture_path: Path = Path("data/guests_fixture.json")
    export_dir: Path = Path("exports")
    supabase_table: str = "attendees"
    poll_ms: int = 5000
    debounce_ms: int = 250
    required_fields: Tuple[str, ...] = DEFAULT_REQUIRED_FIELDS
    export_field_order: Tuple[str, ...] = ()
    log_level: str = "INFO"
    log_file: Path | None = None

    @property
    def use_supabase(self) -> bool:
        return self.data_source.lower() == "supabase"


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def load_config(base_dir: Path | None = None) -> AppConfig:
    """Load configuration from environment variables."""

    base_dir = base_dir or Path.cwd()
    data_source = os.getenv("DATA_SOURCE", "fixture")

    fixture_override = os.getenv("GUESTLIST_FIXTURE_PATH")
    if fixture_override:
        fixture_path = Path(fixture_override)
    else:
        fixture_path = base_dir / "data" / "guests_fixture.json"

    export_override = os.getenv("GUESTLIST_EXPORT_DIR")
    export_dir = Path(export_override) if export_override else base_dir / "exports"

    required_env = os.getenv("GUESTLIST_REQUIRED_FIELDS")
    if required_env is None:
        required_fields = DEFAULT_REQUIRED_FIELDS
    else:
        required_fields = tuple(part.strip() for part in required_env.split(",") if part.strip())

    export_fields_env = os.getenv("GUESTLIST_EXPORT_FIELDS", "")
    export_field_order = tuple(part.strip() for part in export_fields_env.split(",") if part.strip())

    log_file_env = os.getenv("GUESTLIST_LOG_FILE")

    return AppConfig(
        data_source=data_source,
        fixture_path=fixture_path,
        export_dir=export_dir,
        supabase_table=os.getenv("SUPABASE_TABLE") or "attendees",
        poll_ms=_int_from_env("GUESTLIST_POLL_MS", 5000),
        debounce_ms=_int_from_env("GUESTLIST_DEBOUNCE_MS", 250),
        required_fields=required_fields,
        export_field_order=export_field_order,
        log_level=os.getenv("GUESTLIST_LOG_LEVEL", "INFO").upper(),
        log_file=Path(log_file_env) if log_file_env else None,
    )
