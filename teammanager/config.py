"""Runtime settings: Streamlit secrets first, then environment variables."""

from __future__ import annotations

import os
from typing import Any, Optional

try:
    import streamlit as st
except Exception:  # pragma: no cover - allow headless usage (tests / CLI)
    st = None

DEFAULT_TITLE = "WWSB Team Manager"
DEFAULT_LOG_LEVEL = "INFO"


def read_secret(section: Optional[str], key: str) -> Any:
    """Return ``st.secrets[section][key]`` (or ``st.secrets[key]``) if present."""
    if st is None:
        return None
    try:
        if section:
            return st.secrets[section][key]
        return st.secrets[key]
    except Exception:
        return None


def get_setting(env_name: str, *, section: Optional[str] = None, key: Optional[str] = None,
                default: Optional[str] = None) -> Optional[str]:
    value = read_secret(section, key or env_name)
    if value in (None, ""):
        value = os.getenv(env_name)
    if value in (None, ""):
        return default
    return str(value)


def log_level() -> str:
    return (get_setting("LOG_LEVEL", default=DEFAULT_LOG_LEVEL) or DEFAULT_LOG_LEVEL).upper()


def app_title() -> str:
    return get_setting("TEAMMANAGER_TITLE", default=DEFAULT_TITLE) or DEFAULT_TITLE


__all__ = ["app_title", "get_setting", "log_level", "read_secret"]
