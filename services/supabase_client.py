from __future__ import annotations

from typing import Any

from .config import AppConfig, supabase_configured


def create_supabase_client(cfg: AppConfig) -> Any:
    """Build a new client. The caller owns it; nothing here caches it."""
    if not supabase_configured(cfg):
        raise RuntimeError("Supabase is not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY.")

    try:
        from supabase import create_client
    except Exception as exc:
        raise RuntimeError(
            "Missing supabase dependency. Install with `pip install supabase`."
        ) from exc

    return create_client(cfg.supabase_url, cfg.supabase_anon_key)
