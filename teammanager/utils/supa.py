from __future__ import annotations
from typing import Any, Dict, Optional

import httpx
from loguru import logger

from supabase import Client, ClientOptions, SupabaseException, create_client

from teammanager.config import get_setting
from teammanager.logging_setup import register_secret


class SupabaseConfigError(RuntimeError):
    """Raised when Supabase credentials are missing from secrets or env."""


class SupabaseConnectionError(RuntimeError):
    """Raised when the client cannot reach Supabase within the timeout window."""


_MISSING_CONFIG_MSG = (
    "Supabase secrets missing. Add `[supabase].url` and `[supabase].anon_key` to "
    "`.streamlit/secrets.toml` or set SUPABASE_URL and SUPABASE_ANON_KEY environment "
    "variables."
)


def read_supabase_config() -> Dict[str, str]:
    """
    Prefer Streamlit secrets:
      st.secrets["supabase"]["url"]
      st.secrets["supabase"]["anon_key"]

    Fallback to env:
      SUPABASE_URL
      SUPABASE_ANON_KEY
    """
    url = get_setting("SUPABASE_URL", section="supabase", key="url")
    key = get_setting("SUPABASE_ANON_KEY", section="supabase", key="anon_key")

    if not url or not key:
        raise SupabaseConfigError(_MISSING_CONFIG_MSG)

    register_secret(key)
    return {"url": url, "anon_key": key}


def build_client_options() -> ClientOptions:
    """Return Supabase client options with tighter HTTP timeouts."""

    timeout = httpx.Timeout(10.0, connect=5.0)
    return ClientOptions(
        httpx_client=httpx.Client(timeout=timeout),
        postgrest_client_timeout=timeout,
        storage_client_timeout=timeout,
        function_client_timeout=timeout,
    )


def _close_options(options: ClientOptions) -> None:
    client = getattr(options, "httpx_client", None)
    if client is not None:
        client.close()


def create_supabase_client(url: str, key: str) -> Client:
    """Create a client for ``url``/``key``, mapping failures to config/connection errors."""
    options = build_client_options()
    try:
        return create_client(url, key, options=options)
    except SupabaseException as exc:
        _close_options(options)
        raise SupabaseConfigError(str(exc) or _MISSING_CONFIG_MSG) from exc
    except httpx.HTTPStatusError as exc:
        _close_options(options)
        status = exc.response.status_code if exc.response is not None else "unknown"
        body = exc.response.text if exc.response is not None else ""
        preview = (body or str(exc)).strip().replace("\n", " ")[:200]
        logger.error("Supabase client HTTP error: {} -> {}", status, preview)
        raise SupabaseConfigError(
            "Supabase responded with HTTP "
            f"{status}. Verify the Supabase URL/anon key in your Streamlit secrets or environment."
        ) from exc
    except httpx.HTTPError as exc:
        _close_options(options)
        logger.error("Supabase client connection failed: {}", exc)
        raise SupabaseConnectionError(
            "Unable to reach Supabase right now. Check your internet connection and try again."
        ) from exc


def create_default_client() -> Client:
    """Build a client from the configured URL and anon key.

    Auth state lives on the client, so every browser session needs its own
    instance; see :func:`teammanager.supabase_client.get_auth_session`.
    """
    cfg = read_supabase_config()
    return create_supabase_client(cfg["url"], cfg["anon_key"])


def first_row(rows: Any) -> Optional[Dict[str, Any]]:
    """
    PostgREST Python client returns `.data` as list-like.
    Return the first dict or None.
    """
    if rows is None:
        return None
    data = getattr(rows, "data", rows)
    if isinstance(data, list) and data:
        first = data[0]
        return first if isinstance(first, dict) else None
    return None


def response_rows(res: Any) -> list:
    data = getattr(res, "data", None)
    return [dict(row) for row in data] if isinstance(data, list) else []


__all__ = [
    "create_default_client",
    "first_row",
    "response_rows",
    "create_supabase_client",
    "read_supabase_config",
    "SupabaseConfigError",
    "SupabaseConnectionError",
]
