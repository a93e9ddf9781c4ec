"""Streamlit authentication gate backed by Supabase email/password auth."""

from __future__ import annotations

from typing import Dict

import streamlit as st
from loguru import logger
from supabase import AuthApiError, AuthError

from teammanager import messages
from teammanager.supabase_client import (
    get_auth_session,
    sign_in as supabase_sign_in,
    sign_out as supabase_sign_out,
)

_LAST_EMAIL_KEY = "login__last_email"
_FORM_KEY = "login_form"


def _ensure_auth_state() -> Dict[str, object]:
    return st.session_state.setdefault("auth", {"authenticated": False, "user": None})


def logout() -> None:
    """Terminate the Supabase session and rerun the app."""
    try:
        supabase_sign_out()
    except AuthError as exc:
        logger.warning("Supabase sign_out failed: {}", exc)
    st.rerun()


def login(title: str = "Willkommen zurück") -> None:
    """Render the sign-in form and stop the script until a session exists."""

    auth_state = _ensure_auth_state()
    session = get_auth_session()
    if session.is_authenticated:
        return

    last_error = auth_state.pop("last_error", None)

    with st.form(_FORM_KEY, clear_on_submit=False):
        st.markdown(f"### {title}")
        email = st.text_input(
            "E-Mail",
            value=st.session_state.get(_LAST_EMAIL_KEY, ""),
            autocomplete="email",
            placeholder="ihre@email.de",
        )
        password = st.text_input(
            "Passwort",
            type="password",
            autocomplete="current-password",
        )
        submitted = st.form_submit_button("Anmelden", type="primary")

    if last_error:
        st.warning(last_error)

    if submitted:
        email = email.strip()
        st.session_state[_LAST_EMAIL_KEY] = email
        if not email or not password:
            st.warning("E-Mail und Passwort sind erforderlich.")
            st.stop()
        try:
            with st.spinner("Lädt..."):
                supabase_sign_in(email=email, password=password)
        except AuthApiError as exc:
            logger.warning("Supabase sign_in rejected for {}: {}", email, exc)
            st.error(messages.INVALID_CREDENTIALS)
            st.stop()
        except AuthError as exc:
            logger.warning("Supabase sign_in auth error: {}", exc)
            st.error(messages.SIGN_IN_FAILED)
            st.stop()

        if not get_auth_session().is_authenticated:
            st.error(messages.SIGN_IN_FAILED)
            st.stop()
        st.rerun()

    st.stop()


__all__ = ["login", "logout"]
