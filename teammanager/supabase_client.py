"""Supabase client and auth session helpers for the Team Manager UI.

Each browser session owns its Supabase client. Auth state (tokens, the
``on_auth_state_change`` subscribers) lives on the client, so one client
per ``st.session_state`` keeps users apart.
"""

from __future__ import annotations

from typing import Any, Dict

import streamlit as st
from loguru import logger
from supabase import AuthError, Client

from teammanager import messages
from teammanager.session import AuthSession
from teammanager.utils.supa import SupabaseConfigError, SupabaseConnectionError, create_default_client

__all__ = ["get_client", "get_auth_session", "sign_in", "sign_out"]

_CLIENT_KEY = "supabase_client"
_AUTH_SESSION_KEY = "auth_session"
_TOKENS_KEY = "supabase_tokens"
_AUTH_STATE_KEY = "auth"


def _ensure_auth_state() -> Dict[str, Any]:
    """Return the mutable auth state dict stored in Streamlit session state."""
    auth = st.session_state.setdefault(_AUTH_STATE_KEY, {})
    auth.setdefault("authenticated", False)
    auth.setdefault("user", None)
    return auth


def _sync_state(session: AuthSession, event: str = "") -> None:
    """Mirror an :class:`AuthSession` into ``st.session_state``."""
    auth = _ensure_auth_state()
    auth["authenticated"] = session.is_authenticated
    auth["user"] = session.user
    tokens = session.tokens()
    if tokens:
        st.session_state[_TOKENS_KEY] = tokens
    else:
        st.session_state.pop(_TOKENS_KEY, None)


def _browser_client() -> Client:
    client = st.session_state.get(_CLIENT_KEY)
    if client is not None:
        return client
    try:
        client = create_default_client()
    except (SupabaseConfigError, SupabaseConnectionError) as exc:
        st.error(str(exc))
        st.stop()
        raise
    st.session_state[_CLIENT_KEY] = client
    return client


def get_auth_session() -> AuthSession:
    """Return this browser session's :class:`AuthSession`, subscribing on first use.

    The object lives in ``st.session_state`` for the lifetime of the browser
    session; :func:`sign_out` tears the subscription down. Tokens kept from an
    earlier session object are re-attached when a new one is built.
    """
    session = st.session_state.get(_AUTH_SESSION_KEY)
    if isinstance(session, AuthSession):
        return session

    session = AuthSession(_browser_client())
    session.add_listener(_sync_state)
    session.subscribe()

    stored = st.session_state.get(_TOKENS_KEY) or {}
    if stored and not session.is_authenticated:
        try:
            session.restore(stored.get("access_token"), stored.get("refresh_token"))
        except AuthError as exc:
            logger.warning("Supabase set_session failed: {}", exc)
            _ensure_auth_state()["last_error"] = messages.SESSION_EXPIRED

    _sync_state(session)
    st.session_state[_AUTH_SESSION_KEY] = session
    return session


def get_client() -> Client:
    """Return this browser session's Supabase client."""
    return get_auth_session().client


def sign_in(email: str, password: str):
    """Authenticate with Supabase email/password and cache the session tokens."""
    session = get_auth_session()
    response = session.sign_in(email, password)
    _sync_state(session)
    return response


def sign_out() -> None:
    """Sign out, close the auth subscription and forget cached tokens."""
    session = st.session_state.pop(_AUTH_SESSION_KEY, None)
    if not isinstance(session, AuthSession):
        st.session_state.pop(_TOKENS_KEY, None)
        return
    try:
        session.sign_out()
    finally:
        session.unsubscribe()
        _sync_state(session)
