"""Explicit Supabase auth session with a subscribe/unsubscribe lifecycle.

``AuthSession`` mirrors the Supabase auth state (signed-in user and tokens) and
keeps itself current through ``client.auth.on_auth_state_change``. The
subscription is opened with :meth:`AuthSession.subscribe` and must be closed
with :meth:`AuthSession.unsubscribe`; using the object as a context manager
does both::

    with AuthSession(client) as auth:
        auth.sign_in(email, password)
        ...
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

from loguru import logger

from teammanager.logging_setup import register_secret

Listener = Callable[["AuthSession", str], None]


def session_value(session: Any, key: str) -> Any:
    """Safely retrieve values from Supabase session objects or dicts."""

    if session is None:
        return None
    if isinstance(session, dict):
        return session.get(key)
    return getattr(session, key, None)


def serialize_user(user: Any) -> Optional[Dict[str, Any]]:
    """Convert Supabase user model objects to plain dictionaries."""
    if user is None:
        return None
    if isinstance(user, dict):
        return user
    dump = getattr(user, "model_dump", None)
    if callable(dump):
        data = dump()
        if isinstance(data, dict):
            return data
    snapshot: Dict[str, Any] = {}
    for attr in ("id", "email", "role", "created_at", "last_sign_in_at"):
        value = getattr(user, attr, None)
        if value is not None:
            snapshot[attr] = value
    return snapshot or {"repr": repr(user)}


class AuthSession:
    def __init__(self, client: Any):
        self._client = client
        self._subscription: Any = None
        self._listeners: List[Listener] = []
        self._changing = False
        self.user: Optional[Dict[str, Any]] = None
        self.access_token: Optional[str] = None
        self.refresh_token: Optional[str] = None

    # ---------- state ----------
    @property
    def client(self) -> Any:
        return self._client

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    @property
    def is_subscribed(self) -> bool:
        return self._subscription is not None

    @property
    def user_id(self) -> Optional[str]:
        return (self.user or {}).get("id")

    @property
    def email(self) -> Optional[str]:
        return (self.user or {}).get("email")

    def tokens(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        if self.access_token:
            out["access_token"] = self.access_token
        if self.refresh_token:
            out["refresh_token"] = self.refresh_token
        return out

    def _apply(self, session: Any, user: Any = None) -> None:
        self.access_token = session_value(session, "access_token")
        self.refresh_token = session_value(session, "refresh_token")
        register_secret(self.access_token, self.refresh_token)
        if self.access_token:
            self.user = serialize_user(user or session_value(session, "user"))
        else:
            self.user = None

    def _clear(self) -> None:
        self.access_token = None
        self.refresh_token = None
        self.user = None

    # ---------- listeners ----------
    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener(session, event)``; returns a function that removes it."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def _notify(self, event: str) -> None:
        for listener in list(self._listeners):
            listener(self, event)

    @contextmanager
    def _own_change(self) -> Iterator[None]:
        self._changing = True
        try:
            yield
        finally:
            self._changing = False

    def _accepts(self, session: Any) -> bool:
        """Events are taken while this object drives the change, or when they
        concern the user already signed in here (token refresh, user update)."""
        if self._changing:
            return True
        incoming = (serialize_user(session_value(session, "user")) or {}).get("id")
        return bool(incoming) and incoming == self.user_id

    def _on_auth_state_change(self, event: Any, session: Any) -> None:
        name = getattr(event, "value", event)
        if not self._accepts(session):
            logger.debug("Ignoring auth event {} not addressed to this session", name)
            return
        logger.debug("Auth state change: {}", name)
        self._apply(session)
        self._notify(str(name))

    # ---------- lifecycle ----------
    def subscribe(self) -> "AuthSession":
        """Load the current session and start following auth state changes."""
        if self._subscription is not None:
            return self
        self._apply(self._client.auth.get_session())
        self._subscription = self._client.auth.on_auth_state_change(self._on_auth_state_change)
        return self

    def unsubscribe(self) -> None:
        subscription, self._subscription = self._subscription, None
        if subscription is None:
            return
        unsubscribe = getattr(subscription, "unsubscribe", None)
        if callable(unsubscribe):
            unsubscribe()

    def __enter__(self) -> "AuthSession":
        return self.subscribe()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()

    # ---------- auth actions ----------
    def restore(self, access_token: Optional[str], refresh_token: Optional[str]) -> bool:
        """Re-attach stored tokens to the client; returns whether a session is active."""
        if not access_token or not refresh_token:
            return self.is_authenticated
        if access_token == self.access_token:
            return True
        with self._own_change():
            response = self._client.auth.set_session(access_token, refresh_token)
        self._apply(getattr(response, "session", None), getattr(response, "user", None))
        return self.is_authenticated

    def sign_in(self, email: str, password: str) -> Any:
        with self._own_change():
            response = self._client.auth.sign_in_with_password({"email": email, "password": password})
        self._apply(getattr(response, "session", None), getattr(response, "user", None))
        if self.is_authenticated:
            logger.info("Signed in {}", email)
        return response

    def sign_out(self) -> None:
        try:
            self._client.auth.sign_out()
        finally:
            self._clear()
            self._notify("SIGNED_OUT")


__all__ = ["AuthSession", "serialize_user", "session_value"]
