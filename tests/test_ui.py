"""Smoke tests for the Tk guest list window."""

from __future__ import annotations

import pytest

tkinter = pytest.importorskip("tkinter")

from tkinter import messagebox

from guestlist.config import AppConfig
from guestlist.providers import FixtureGuestProvider
from guestlist.ui import GuestListApp
from guestlist.ui_state import ConfirmingGuest, Idle

from conftest import CARLA, DIEGO, LUCIA


def _create_root_or_skip() -> tkinter.Tk:
    try:
        root = tkinter.Tk()
    except tkinter.TclError:
        pytest.skip("Tkinter necesita un entorno gráfico")
    root.withdraw()
    return root


@pytest.fixture()
def app(controller, tmp_path):
    root = _create_root_or_skip()
    config = AppConfig(fixture_path=tmp_path / "guests.json", export_dir=tmp_path / "exports", poll_ms=0)
    try:
        yield GuestListApp(root, controller, config)
    finally:
        root.destroy()


def test_table_lists_every_guest(app):
    assert set(app.tree.get_children()) == {guest.id for guest in app.controller.store}
    values = app.tree.item(LUCIA, "values")
    assert values[0] == "Gómez, Lucía"
    assert values[4] == "Confirmado"
    assert "4 invitados" in app.stats_var.get()


def test_search_filters_rows(app):
    app.search_var.set("ruiz")
    app.refresh_table()
    assert app.tree.get_children() == (CARLA,)


def test_confirm_dialog_saves_bracelet(app):
    app.tree.selection_set(DIEGO)
    app._open_confirm_dialog()
    assert isinstance(app.controller.ui_state, ConfirmingGuest)

    app.primary_var.set("003")
    app.submit_confirm_dialog()

    assert app.controller.get_guest(DIEGO).bracelet_number == "003"
    assert app.dialog is None
    assert app.controller.ui_state == Idle()


def test_confirm_dialog_keeps_draft_on_duplicate(app, monkeypatch):
    errors = []
    monkeypatch.setattr(messagebox, "showerror", lambda title, message, **kwargs: errors.append(message))

    app.tree.selection_set(DIEGO)
    app._open_confirm_dialog()
    app.primary_var.set("001")
    app.submit_confirm_dialog()

    assert errors and "ya está asignado" in errors[0]
    assert app.dialog is not None
    assert app.controller.ui_state.draft_primary == "001"
    assert app.controller.get_guest(DIEGO).is_confirmed is False


def test_release_button_frees_numbers_of_pending_guest(app):
    guest = app.controller.add_guest(
        {"Apellido y Nombre": "Nuevo", "DNI": "1", "Teléfono": "2"},
        bracelet_number="300",
    )
    app.refresh_table()
    app.tree.selection_set(guest.id)
    app._unconfirm_selected()
    assert app.controller.get_guest(guest.id).bracelet_numbers() == ()
    assert "liberaron" in app.status_var.get()


def test_confirm_dialog_reports_guest_deleted_elsewhere(app, fixture_path, monkeypatch):
    errors = []
    monkeypatch.setattr(messagebox, "showerror", lambda title, message, **kwargs: errors.append(title))

    app.tree.selection_set(DIEGO)
    app._open_confirm_dialog()
    other = FixtureGuestProvider(fixture_path)
    other.list_all()
    other.delete(DIEGO)

    app.primary_var.set("003")
    app.submit_confirm_dialog()

    assert errors == ["Invitado eliminado"]
    assert app.dialog is None
    assert DIEGO not in app.tree.get_children()
