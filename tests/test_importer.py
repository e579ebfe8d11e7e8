from __future__ import annotations

from datetime import datetime

import pytest

pytest.importorskip("openpyxl")

from openpyxl import Workbook  # type: ignore

from guestlist.importer import (
    ImportFileError,
    format_cell,
    guests_from_rows,
    is_empty,
    read_guest_rows,
)


def _create_workbook(path, rows, title="Inscriptos"):
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = title
    for row in rows:
        sheet.append(row)
    workbook.save(path)


def test_read_guest_rows_from_xlsx(tmp_path):
    path = tmp_path / "inscriptos.xlsx"
    _create_workbook(
        path,
        [
            ["Apellido y Nombre", "DNI", "Teléfono", "Venís acompañado?", "Fecha"],
            ["Gómez, Lucía", 30111222, "1155550101", "Sí", datetime(2026, 10, 1)],
            [None, None, None, None, None],
            ["Fernández, Diego", 27444555, None, "No", None],
        ],
    )
    rows = read_guest_rows(path)
    assert rows == [
        {
            "Apellido y Nombre": "Gómez, Lucía",
            "DNI": "30111222",
            "Teléfono": "1155550101",
            "Venís acompañado?": "Sí",
            "Fecha": "2026-10-01",
        },
        {"Apellido y Nombre": "Fernández, Diego", "DNI": "27444555", "Venís acompañado?": "No"},
    ]


def test_read_guest_rows_from_named_sheet(tmp_path):
    path = tmp_path / "inscriptos.xlsx"
    _create_workbook(path, [["DNI"], ["1"]], title="Lista")
    assert read_guest_rows(path, sheet_name="Lista") == [{"DNI": "1"}]
    with pytest.raises(ImportFileError):
        read_guest_rows(path, sheet_name="Otra")


def test_read_guest_rows_from_csv_keeps_leading_zeros(tmp_path):
    path = tmp_path / "inscriptos.csv"
    path.write_text(
        "Apellido y Nombre,DNI,Número de Pulsera\nRuiz; Carla,0033666999,007\nSosa,25123456,\n",
        encoding="utf-8-sig",
    )
    rows = read_guest_rows(path)
    assert rows[0] == {"Apellido y Nombre": "Ruiz; Carla", "DNI": "0033666999", "Número de Pulsera": "007"}
    assert rows[1] == {"Apellido y Nombre": "Sosa", "DNI": "25123456"}


def test_read_guest_rows_rejects_other_formats(tmp_path):
    path = tmp_path / "inscriptos.pdf"
    path.write_bytes(b"%PDF")
    with pytest.raises(ImportFileError) as excinfo:
        read_guest_rows(path)
    assert "XLSX o CSV" in str(excinfo.value)


def test_read_guest_rows_missing_file(tmp_path):
    with pytest.raises(ImportFileError):
        read_guest_rows(tmp_path / "missing.xlsx")


def test_format_cell_values():
    assert format_cell(" Lucía ") == "Lucía"
    assert format_cell(True) is True
    assert format_cell(42) == "42"
    assert format_cell(42.0) == "42"
    assert format_cell(1.5) == "1.5"
    assert format_cell(datetime(2026, 10, 1, 18, 30)) == "2026-10-01 18:30:00"
    assert format_cell(float("nan")) is None
    assert is_empty("   ")


def test_guests_from_rows_lifts_bracelet_columns():
    rows = [
        {
            "Apellido y Nombre": "Gómez",
            "Venís acompañado?": "si",
            "Número de Pulsera": "001",
            "Número de Pulsera Acompañante": "002",
            "Confirmado": "Si",
        },
        {"Apellido y Nombre": "Sosa"},
    ]
    guests = guests_from_rows(rows, file_name="export.xlsx")
    first, second = guests
    assert first.fields == {"Apellido y Nombre": "Gómez", "Venís acompañado?": "si"}
    assert first.bracelet_numbers() == ("001", "002")
    assert first.has_companion is True
    assert first.is_confirmed is False
    assert first.file_name == "export.xlsx"
    assert second.has_companion is False
    assert first.id != second.id
