"""Tkinter UI for the guest list application."""

from __future__ import annotations

import logging
import tkinter as tk
from pathlib import Path
from tkinter import filedialog, messagebox, ttk
from typing import Dict, List

from .companion import format_yes_no
from .config import AppConfig
from .controller import GuestListController, MissingFieldsError
from .models import FieldValue, Guest, field_names
from .providers import DataProviderError, GuestNotFoundError
from .ui_state import ConfirmingGuest, EditingGuest, UiState
from .validation import BraceletValidationError


logger = logging.getLogger(__name__)

_COLUMNS = (
    ("name", "Apellido y Nombre", 260),
    ("document", "DNI", 110),
    ("bracelet", "Pulsera", 90),
    ("companion", "Pulsera acompañante", 150),
    ("status", "Estado", 110),
)


def _display_value(value: FieldValue | None) -> str:
    if isinstance(value, bool):
        return format_yes_no(value)
    return "" if value is None else str(value)


class GuestListApp:
    """Tkinter based UI application."""

    def __init__(self, root: tk.Tk, controller: GuestListController, config: AppConfig) -> None:
        self.root = root
        self.controller = controller
        self.config = config

        self.status_var = tk.StringVar(value="Listo.")
        self.search_var = tk.StringVar()
        self.stats_var = tk.StringVar()
        self._debounce_id: str | None = None
        self._poll_id: str | None = None
        self.dialog: tk.Toplevel | None = None
        self._open_state: UiState | None = None
        self._edit_originals: Dict[str, FieldValue] = {}
        self.field_vars: Dict[str, tk.StringVar] = {}

        self._build_ui()
        self._load_initial()
        self._schedule_poll()

    def _build_ui(self) -> None:
        self.root.title("Lista de invitados")
        self.root.geometry("980x560")
        self.root.minsize(820, 420)
        self.root.columnconfigure(0, weight=1)
        self.root.rowconfigure(0, weight=1)

        container = ttk.Frame(self.root, padding="16")
        container.grid(row=0, column=0, sticky="nsew")
        container.columnconfigure(0, weight=1)
        container.rowconfigure(2, weight=1)

        search_frame = ttk.Frame(container)
        search_frame.grid(row=0, column=0, sticky="we")
        search_frame.columnconfigure(1, weight=1)
        ttk.Label(search_frame, text="Buscar invitado:").grid(row=0, column=0, sticky="w")
        self.search_entry = ttk.Entry(search_frame, textvariable=self.search_var)
        self.search_entry.grid(row=0, column=1, sticky="we", padx=(8, 12))
        self.search_entry.bind("<KeyRelease>", self._on_search_var_change)
        ttk.Label(search_frame, textvariable=self.stats_var, foreground="#555555").grid(
            row=0, column=2, sticky="e"
        )

        button_frame = ttk.Frame(container)
        button_frame.grid(row=1, column=0, sticky="we", pady=(12, 8))
        buttons = (
            ("Importar XLSX/CSV", self._import_file),
            ("Nuevo invitado", self._open_new_dialog),
            ("Editar", self._open_edit_dialog),
            ("Confirmar / Pulseras", self._open_confirm_dialog),
            ("Cancelar confirmación", self._unconfirm_selected),
            ("Eliminar", self._delete_selected),
            ("Exportar a XLSX", self._export),
            ("Recargar", self._reload),
        )
        for column, (text, command) in enumerate(buttons):
            ttk.Button(button_frame, text=text, command=command).grid(
                row=0, column=column, padx=(0 if column == 0 else 8, 0)
            )

        table_frame = ttk.Frame(container)
        table_frame.grid(row=2, column=0, sticky="nsew")
        table_frame.columnconfigure(0, weight=1)
        table_frame.rowconfigure(0, weight=1)
        self.tree = ttk.Treeview(
            table_frame,
            columns=[key for key, _label, _width in _COLUMNS],
            show="headings",
            selectmode="browse",
        )
        for key, label, width in _COLUMNS:
            self.tree.heading(key, text=label)
            self.tree.column(key, width=width, anchor="w")
        self.tree.tag_configure("confirmed", background="#e6ffe6")
        self.tree.grid(row=0, column=0, sticky="nsew")
        self.tree.bind("<Double-1>", lambda _event: self._open_confirm_dialog())
        scrollbar = ttk.Scrollbar(table_frame, orient="vertical", command=self.tree.yview)
        scrollbar.grid(row=0, column=1, sticky="ns")
        self.tree.configure(yscrollcommand=scrollbar.set)

        self.status_label = ttk.Label(container, textvariable=self.status_var, relief=tk.SUNKEN, anchor="w")
        self.status_label.grid(row=3, column=0, sticky="we", pady=(8, 0))

    def _update_status(self, text: str) -> None:
        self.status_var.set(text)

    # -- table -------------------------------------------------------------------

    def refresh_table(self) -> None:
        selected = self.selected_guest_id()
        self.tree.delete(*self.tree.get_children())
        for guest in self.controller.list_guests(self.search_var.get()):
            self.tree.insert(
                "",
                tk.END,
                iid=guest.id,
                values=(
                    guest.display_name(),
                    guest.document_number() or "-",
                    guest.bracelet_number or "",
                    guest.companion_bracelet_number or "",
                    "Confirmado" if guest.is_confirmed else "Pendiente",
                ),
                tags=("confirmed",) if guest.is_confirmed else (),
            )
        if selected and self.tree.exists(selected):
            self.tree.selection_set(selected)
        stats = self.controller.stats()
        self.stats_var.set(
            f"{stats.total} invitados · {stats.confirmed} confirmados · {stats.pending} pendientes"
        )

    def selected_guest_id(self) -> str | None:
        selection = self.tree.selection()
        return selection[0] if selection else None

    def _require_selection(self) -> Guest | None:
        guest_id = self.selected_guest_id()
        if guest_id is None:
            messagebox.showinfo("Sin selección", "Seleccione un invitado de la lista.")
            return None
        try:
            return self.controller.get_guest(guest_id)
        except GuestNotFoundError as exc:
            messagebox.showinfo("Sin selección", str(exc))
            self.refresh_table()
            return None

    def _schedule_search(self) -> None:
        if self._debounce_id:
            self.root.after_cancel(self._debounce_id)
        self._debounce_id = self.root.after(self.config.debounce_ms, self.refresh_table)

    def _on_search_var_change(self, _event) -> None:
        self._schedule_search()

    # -- loading and change notifications ----------------------------------------

    def _load_initial(self) -> None:
        try:
            self._update_status("Cargando invitados …")
            guests = self.controller.load()
        except DataProviderError as exc:
            messagebox.showerror("Error", f"No se pudieron cargar los asistentes.\n{exc}")
            self._update_status("Carga fallida. Intente recargar.")
            return
        self.refresh_table()
        self._update_status(f"{len(guests)} invitados cargados.")

    def _reload(self) -> None:
        self._load_initial()

    def _schedule_poll(self) -> None:
        if self.config.poll_ms > 0:
            self._poll_id = self.root.after(self.config.poll_ms, self._poll_changes)

    def _poll_changes(self) -> None:
        try:
            events = self.controller.sync()
        except DataProviderError as exc:
            logger.warning("Polling for changes failed: %s", exc)
            self._update_status("Sin conexión con la base de datos. Reintentando …")
        else:
            if events:
                self.refresh_table()
                self._update_status(f"{len(events)} cambios recibidos.")
                self._close_stale_dialog()
        self._schedule_poll()

    # -- roster actions ----------------------------------------------------------

    def _import_file(self) -> None:
        file_path = filedialog.askopenfilename(
            parent=self.root,
            title="Seleccionar archivo de invitados",
            filetypes=[("Hojas de cálculo", "*.xlsx *.csv"), ("Todos los archivos", "*.*")],
        )
        if not file_path:
            return
        if self.controller.store and not messagebox.askyesno(
            "Importar",
            "La importación reemplazará a todos los invitados actuales. ¿Desea continuar?",
        ):
            return
        try:
            guests = self.controller.import_file(Path(file_path))
        except DataProviderError as exc:
            messagebox.showerror("Error", str(exc))
            return
        self.refresh_table()
        self._update_status(f"Se cargaron {len(guests)} registros correctamente.")

    def _export(self) -> None:
        try:
            target = self.controller.export(
                self.config.export_dir,
                field_order=self.config.export_field_order or None,
            )
        except DataProviderError as exc:
            messagebox.showerror("Error al exportar", str(exc))
            return
        messagebox.showinfo("Exportación exitosa", f"Los datos se exportaron a {target}.")
        self._update_status(f"Exportado: {target.name}")

    def _unconfirm_selected(self) -> None:
        guest = self._require_selection()
        if guest is None:
            return
        if not guest.is_confirmed and not guest.bracelet_numbers():
            messagebox.showinfo("Sin cambios", "El invitado no está confirmado.")
            return
        try:
            self.controller.unconfirm_guest(guest.id)
        except DataProviderError as exc:
            messagebox.showerror("Error al actualizar", str(exc))
            return
        except GuestNotFoundError as exc:
            messagebox.showerror("Invitado eliminado", str(exc))
            self.refresh_table()
            return
        self.refresh_table()
        if guest.is_confirmed:
            self._update_status(f"Se canceló la confirmación de {guest.display_name()}.")
        else:
            self._update_status(f"Se liberaron las pulseras de {guest.display_name()}.")

    def _delete_selected(self) -> None:
        guest = self._require_selection()
        if guest is None:
            return
        if not messagebox.askyesno(
            "Eliminar invitado",
            "¿Estás seguro de que deseas eliminar este invitado? Esta acción no se puede deshacer.",
        ):
            return
        try:
            self.controller.delete_guest(guest.id)
        except (DataProviderError, GuestNotFoundError) as exc:
            messagebox.showerror("Error", str(exc))
            return
        self.refresh_table()
        self._update_status("El invitado ha sido eliminado correctamente.")

    # -- dialogs -----------------------------------------------------------------

    def _open_dialog(self, title: str) -> tk.Toplevel:
        self._close_dialog()
        dialog = tk.Toplevel(self.root)
        dialog.title(title)
        dialog.transient(self.root)
        dialog.resizable(True, True)
        dialog.columnconfigure(1, weight=1)
        dialog.bind("<Escape>", lambda _event: self._close_dialog())
        dialog.protocol("WM_DELETE_WINDOW", self._close_dialog)
        self.dialog = dialog
        return dialog

    def _close_dialog(self) -> None:
        self.controller.cancel()
        self._open_state = None
        if self.dialog is not None:
            self.dialog.destroy()
            self.dialog = None

    def _close_stale_dialog(self) -> None:
        if self.dialog is not None and self.controller.ui_state != self._open_state:
            messagebox.showinfo("Invitado eliminado", "El invitado fue eliminado en otra sesión.")
            self._close_dialog()

    def _add_entries(self, dialog: tk.Toplevel, labels: List[str], values: Dict[str, str]) -> Dict[str, tk.StringVar]:
        variables: Dict[str, tk.StringVar] = {}
        for row, label in enumerate(labels):
            ttk.Label(dialog, text=f"{label}:").grid(row=row, column=0, sticky="w", padx=(16, 8), pady=2)
            var = tk.StringVar(value=values.get(label, ""))
            ttk.Entry(dialog, textvariable=var, width=48).grid(row=row, column=1, sticky="we", padx=(0, 16), pady=2)
            variables[label] = var
        return variables

    def _add_buttons(self, dialog: tk.Toplevel, row: int, save_command) -> None:
        frame = ttk.Frame(dialog, padding="16")
        frame.grid(row=row, column=0, columnspan=2, sticky="e")
        ttk.Button(frame, text="Guardar", command=save_command).grid(row=0, column=0)
        ttk.Button(frame, text="Cerrar", command=self._close_dialog).grid(row=0, column=1, padx=(8, 0))

    def _open_confirm_dialog(self) -> None:
        guest = self._require_selection()
        if guest is None:
            return
        dialog = self._open_dialog(f"Pulseras de {guest.display_name()}")
        state = self.controller.begin_confirm(guest.id)
        self._open_state = state
        labels = ["Número de pulsera"]
        if guest.has_companion or state.draft_companion:
            labels.append("Número de pulsera acompañante")
        variables = self._add_entries(
            dialog,
            labels,
            {"Número de pulsera": state.draft_primary, "Número de pulsera acompañante": state.draft_companion},
        )
        self.primary_var = variables["Número de pulsera"]
        self.companion_var = variables.get("Número de pulsera acompañante", tk.StringVar())
        in_use = self.controller.store.snapshot_numbers(exclude_id=guest.id)
        ttk.Label(dialog, text=f"Pulseras ya asignadas: {len(in_use)}", foreground="#555555").grid(
            row=len(labels), column=0, columnspan=2, sticky="w", padx=16, pady=(6, 0)
        )
        self._add_buttons(dialog, len(labels) + 1, self.submit_confirm_dialog)

    def submit_confirm_dialog(self) -> None:
        if not isinstance(self.controller.ui_state, ConfirmingGuest):
            self._close_dialog()
            return
        self._open_state = self.controller.update_draft(
            primary=self.primary_var.get(),
            companion=self.companion_var.get(),
        )
        try:
            guest = self.controller.submit_confirmation()
        except BraceletValidationError as exc:
            messagebox.showerror("Error", str(exc))
            return
        except DataProviderError as exc:
            messagebox.showerror("Error al actualizar", str(exc))
            return
        except GuestNotFoundError as exc:
            messagebox.showerror("Invitado eliminado", str(exc))
            self._close_dialog()
            self.refresh_table()
            return
        self._close_dialog()
        self.refresh_table()
        self._update_status(f"{guest.display_name()} ha sido confirmado.")

    def _open_edit_dialog(self) -> None:
        guest = self._require_selection()
        if guest is None:
            return
        dialog = self._open_dialog(f"Editar {guest.display_name()}")
        self._open_state = self.controller.begin_edit(guest.id)
        labels = list(guest.fields)
        self._edit_originals = dict(guest.fields)
        self.field_vars = self._add_entries(
            dialog, labels, {key: _display_value(value) for key, value in guest.fields.items()}
        )
        self._add_buttons(dialog, len(labels), self.submit_edit_dialog)

    def _collect_fields(self, originals: Dict[str, FieldValue]) -> Dict[str, FieldValue]:
        fields: Dict[str, FieldValue] = {}
        for label, var in self.field_vars.items():
            text = var.get().strip()
            original = originals.get(label)
            if original is not None and text == _display_value(original):
                fields[label] = original
            elif text:
                fields[label] = text
        return fields

    def submit_edit_dialog(self) -> None:
        if not isinstance(self.controller.ui_state, EditingGuest):
            self._close_dialog()
            return
        try:
            guest = self.controller.submit_edit(self._collect_fields(self._edit_originals))
        except BraceletValidationError as exc:
            messagebox.showerror("Error", str(exc))
            return
        except DataProviderError as exc:
            messagebox.showerror("Error al actualizar", str(exc))
            return
        except GuestNotFoundError as exc:
            messagebox.showerror("Invitado eliminado", str(exc))
            self._close_dialog()
            self.refresh_table()
            return
        self._close_dialog()
        self.refresh_table()
        self._update_status(f"Se guardaron los cambios de {guest.display_name()}.")

    def _open_new_dialog(self) -> None:
        dialog = self._open_dialog("Nuevo invitado")
        self._open_state = self.controller.ui_state
        labels = field_names(self.controller.store.all()) or list(self.config.required_fields)
        labels += ["Número de pulsera", "Número de pulsera acompañante"]
        self._edit_originals = {}
        self.field_vars = self._add_entries(dialog, labels, {})
        self._add_buttons(dialog, len(labels), self.submit_new_dialog)

    def submit_new_dialog(self) -> None:
        fields = self._collect_fields({})
        primary = str(fields.pop("Número de pulsera", "") or "")
        companion = str(fields.pop("Número de pulsera acompañante", "") or "")
        try:
            guest = self.controller.add_guest(fields, primary, companion)
        except (MissingFieldsError, BraceletValidationError) as exc:
            messagebox.showerror("Campos requeridos" if isinstance(exc, MissingFieldsError) else "Error", str(exc))
            return
        except DataProviderError as exc:
            messagebox.showerror("Error", str(exc))
            return
        self._close_dialog()
        self.refresh_table()
        self._update_status(f"Invitado creado: {guest.display_name()}.")


def run_app(config: AppConfig, controller: GuestListController) -> None:
    root = tk.Tk()
    GuestListApp(root, controller, config)
    root.mainloop()
