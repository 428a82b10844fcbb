"""
Supabase client shared by the repository modules.

Importing this module connects with the credentials from config; every
repository imports the single `supabase` object defined here.
"""

from __future__ import annotations

from supabase import Client, create_client  # type: ignore[import-not-found]

from config import get_supabase_settings

_settings = get_supabase_settings()

supabase: Client = create_client(_settings.url, _settings.key)

__all__ = ["supabase"]
