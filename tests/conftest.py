from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest

from guestlist.controller import GuestListController
from guestlist.models import Guest
from guestlist.providers import FixtureGuestProvider

SAMPLE_FIXTURE = Path(__file__).resolve().parent.parent / "data" / "guests_fixture.json"

# Ids of the records in data/guests_fixture.json
LUCIA = "6b7c1f0e-2a44-4b51-9d51-2f0b7e6f1a01"
DIEGO = "0d3e2a91-7c55-4f0b-8e0a-5b2c9b8e1a02"
CARLA = "a9f4c6d2-1b3e-4e7a-b0c8-3d6f2e1b4a03"
ANDRES = "c1e8b7a6-5d4f-4a3b-9c2d-1e0f9a8b7c04"


def make_guest(
    guest_id: str,
    *,
    primary: str | None = None,
    companion: str | None = None,
    has_companion: bool = False,
    confirmed: bool = False,
    **fields: str,
) -> Guest:
    return Guest(
        id=guest_id,
        fields=dict(fields) or {"Apellido y Nombre": guest_id},
        bracelet_number=primary,
        companion_bracelet_number=companion,
        is_confirmed=confirmed,
        has_companion=has_companion,
    )


def write_rows(path: Path, rows: list[dict]) -> None:
    path.write_text(json.dumps(rows, ensure_ascii=False), encoding="utf-8")


@pytest.fixture()
def fixture_path(tmp_path) -> Path:
    target = tmp_path / "guests.json"
    shutil.copy(SAMPLE_FIXTURE, target)
    return target


@pytest.fixture()
def fixture_provider(fixture_path) -> FixtureGuestProvider:
    return FixtureGuestProvider(fixture_path)


@pytest.fixture()
def controller(fixture_provider) -> GuestListController:
    controller = GuestListController(
        fixture_provider,
        required_fields=("DNI", "Apellido y Nombre", "Teléfono"),
    )
    controller.load()
    yield controller
    controller.close()
