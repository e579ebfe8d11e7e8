from __future__ import annotations

from datetime import date

import pytest

pytest.importorskip("openpyxl")

from openpyxl import load_workbook  # type: ignore

from guestlist.exporter import (
    ExportFileError,
    SHEET_NAME,
    build_export_rows,
    default_export_name,
    export_guests,
)
from guestlist.models import Guest


def _guests():
    return [
        Guest(
            id="1",
            fields={"Apellido y Nombre": "Gómez", "DNI": "30111222"},
            bracelet_number="001",
            companion_bracelet_number="002",
            is_confirmed=True,
        ),
        Guest(id="2", fields={"Apellido y Nombre": "Sosa", "Teléfono": "1155"}),
    ]


def test_default_export_name_uses_plain_day_and_month():
    assert default_export_name(date(2026, 3, 7)) == "invitados-7-3-2026"


def test_build_export_rows_appends_status_columns():
    rows = build_export_rows(_guests())
    assert list(rows[0]) == [
        "Apellido y Nombre",
        "DNI",
        "Teléfono",
        "Número de Pulsera",
        "Número de Pulsera Acompañante",
        "Confirmado",
    ]
    assert rows[0]["Confirmado"] == "Si"
    assert rows[1]["DNI"] == ""
    assert rows[1]["Número de Pulsera"] == ""
    assert rows[1]["Confirmado"] == "No"


def test_build_export_rows_honours_field_order():
    rows = build_export_rows(_guests(), field_order=["DNI", "Apellido y Nombre", "Confirmado"])
    assert list(rows[0])[:2] == ["DNI", "Apellido y Nombre"]
    assert list(rows[0]).count("Confirmado") == 1


def test_export_guests_writes_single_sheet(tmp_path):
    target = export_guests(build_export_rows(_guests()), "invitados", tmp_path / "out")
    assert target == tmp_path / "out" / "invitados.xlsx"
    workbook = load_workbook(target)
    assert workbook.sheetnames == [SHEET_NAME]
    values = list(workbook[SHEET_NAME].iter_rows(values_only=True))
    assert values[0][-1] == "Confirmado"
    assert values[1][:2] == ("Gómez", "30111222")
    assert values[1][3] == "001"


def test_export_guests_reports_write_failures(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(ExportFileError):
        export_guests(build_export_rows(_guests()), "invitados", blocker)


def test_build_export_rows_keeps_fields_missing_from_order():
    rows = build_export_rows(_guests(), field_order=["Teléfono", "DNI", "DNI"])
    assert list(rows[0]) == [
        "Teléfono",
        "DNI",
        "Apellido y Nombre",
        "Número de Pulsera",
        "Número de Pulsera Acompañante",
        "Confirmado",
    ]
