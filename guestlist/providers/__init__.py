"""Persistent guest stores."""

from __future__ import annotations

import os

from .base import BaseGuestProvider, DataProviderError, GuestNotFoundError
from .fixture import FixtureGuestProvider
from .supabase import SupabaseGuestProvider


__all__ = [
    "BaseGuestProvider",
    "DataProviderError",
    "FixtureGuestProvider",
    "GuestNotFoundError",
    "SupabaseGuestProvider",
    "create_provider",
]


def create_provider(config) -> BaseGuestProvider:
    """Create the appropriate provider based on configuration."""

    if config.use_supabase:
        required_env = {
            "SUPABASE_URL": os.getenv("SUPABASE_URL"),
            "SUPABASE_KEY": os.getenv("SUPABASE_KEY"),
        }
        missing = [key for key, value in required_env.items() if not value]
        if missing:
            raise DataProviderError(
                "Configuración de Supabase incompleta. Variables faltantes: "
                + ", ".join(missing)
            )
        return SupabaseGuestProvider(
            url=required_env["SUPABASE_URL"],
            api_key=required_env["SUPABASE_KEY"],
            table=config.supabase_table,
        )

    return FixtureGuestProvider(config.fixture_path)
