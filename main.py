"""Entry point for the guest list Tkinter application."""

from __future__ import annotations

import logging
from pathlib import Path

from guestlist import DataProviderError, GuestListController, create_provider, load_config
from guestlist.logging_setup import setup_logging

_TKINTER_ERROR_MESSAGE = (
    "No se pudo iniciar la interfaz gráfica. "
    "Asegúrese de que haya un entorno gráfico (DISPLAY) disponible."
)

logger = logging.getLogger("guestlist.main")


def main() -> None:
    base_dir = Path(__file__).parent
    config = load_config(base_dir)
    setup_logging(config.log_level, config.log_file)
    try:
        provider = create_provider(config)
    except DataProviderError as exc:
        logger.error("Could not create the data provider: %s", exc)
        raise SystemExit(str(exc)) from exc
    controller = GuestListController(provider, required_fields=config.required_fields)
    try:
        from tkinter import TclError

        from guestlist.ui import run_app
    except ImportError as exc:
        raise SystemExit(_TKINTER_ERROR_MESSAGE) from exc

    try:
        run_app(config, controller)
    except TclError as exc:
        raise SystemExit(_TKINTER_ERROR_MESSAGE) from exc
    finally:
        controller.close()


if __name__ == "__main__":
    main()
