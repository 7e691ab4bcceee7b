from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any


def _streamlit_secrets() -> dict[str, Any]:
    try:
        import streamlit as st

        return dict(st.secrets)
    except Exception:
        return {}


@dataclass(frozen=True)
class AppConfig:
    supabase_url: str
    supabase_anon_key: str
    app_base_url: str
    pb_settle_seconds: float = 0.25
    import_batch_size: int = 500
    page_size: int = 50
    search_debounce_ms: int = 250
    list_limit: int = 500
    log_level: str = "INFO"



def _get(key: str, secrets: dict[str, Any], default: str = "") -> str:
    if key in os.environ:
        return str(os.environ.get(key, default))
    if key in secrets:
        return str(secrets.get(key, default))
    return default



def _to_int(value: str, default: int, minimum: int = 1) -> int:
    try:
        return max(minimum, int(str(value).strip()))
    except (TypeError, ValueError):
        return default



def _to_float(value: str, default: float) -> float:
    try:
        return max(0.0, float(str(value).strip()))
    except (TypeError, ValueError):
        return default



def get_app_config() -> AppConfig:
    secrets = _streamlit_secrets()

    return AppConfig(
        supabase_url=_get("SUPABASE_URL", secrets),
        supabase_anon_key=_get("SUPABASE_ANON_KEY", secrets),
        app_base_url=_get("APP_BASE_URL", secrets),
        pb_settle_seconds=_to_float(_get("PB_SETTLE_SECONDS", secrets), 0.25),
        import_batch_size=_to_int(_get("IMPORT_BATCH_SIZE", secrets), 500),
        page_size=_to_int(_get("PAGE_SIZE", secrets), 50),
        search_debounce_ms=_to_int(_get("SEARCH_DEBOUNCE_MS", secrets), 250, minimum=0),
        list_limit=_to_int(_get("LIST_LIMIT", secrets), 500),
        log_level=(_get("LOG_LEVEL", secrets) or "INFO").strip().upper(),
    )



def supabase_configured(cfg: AppConfig | None = None) -> bool:
    cfg = cfg or get_app_config()
    return bool(cfg.supabase_url and cfg.supabase_anon_key)
