import sys
import uuid
from pathlib import Path
from types import SimpleNamespace

import pytest
from postgrest.exceptions import APIError
from supabase import AuthApiError

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))


# ---------------- In-memory Supabase mock ----------------
def _unique_violation(constraint):
    return APIError(
        {
            "message": f'duplicate key value violates unique constraint "{constraint}"',
            "code": "23505",
            "details": None,
            "hint": None,
        }
    )


def _sort_key(value):
    return (value is None, value if value is not None else 0)


class FakeQuery:
    def __init__(self, client, name):
        self.client = client
        self.name = name
        self._op = "select"
        self._columns = "*"
        self._payload = None
        self._filters = []
        self._order = []
        self._limit = None

    def select(self, columns="*", *args, **kwargs):
        self._columns = columns
        return self

    def insert(self, payload):
        self._op = "insert"
        self._payload = payload
        return self

    def update(self, payload):
        self._op = "update"
        self._payload = payload
        return self

    def delete(self):
        self._op = "delete"
        return self

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self._order.append((column, bool(desc)))
        return self

    def limit(self, n):
        self._limit = n
        return self

    # ---------- helpers ----------
    @property
    def _rows(self):
        return self.client.db.setdefault(self.name, [])

    def _matches(self, row):
        return all(row.get(col) == val for col, val in self._filters)

    def _check_team_unique(self, row, others):
        for other in others:
            if other.get("id") == row.get("id"):
                raise _unique_violation("teams_pkey")
            if other.get("name") == row.get("name") and other.get("user_id") == row.get("user_id"):
                raise _unique_violation("teams_name_user_id_key")

    def _new_row(self, item):
        row = dict(item)
        row.setdefault("id", uuid.uuid4().hex)
        self.client.clock += 1
        row.setdefault("created_at", f"2024-01-01T00:00:{self.client.clock:02d}+00:00")
        return row

    # ---------- execute ----------
    def execute(self):
        self.client.calls.append((self.name, self._op, self._payload, list(self._filters)))
        error = self.client.errors.get((self.name, self._op))
        if error is not None:
            raise error

        if self._op == "insert":
            items = self._payload if isinstance(self._payload, list) else [self._payload]
            new_rows = [self._new_row(item) for item in items]
            if self.name == "teams":
                seen = list(self._rows)
                for row in new_rows:
                    self._check_team_unique(row, seen)
                    seen.append(row)
            self._rows.extend(new_rows)
            return SimpleNamespace(data=[dict(r) for r in new_rows])

        if self._op == "update":
            targets = [r for r in self._rows if self._matches(r)]
            if self.name == "teams" and "name" in self._payload:
                for target in targets:
                    others = [r for r in self._rows if r is not target]
                    candidate = {**target, **self._payload}
                    for other in others:
                        if other.get("name") == candidate["name"] and other.get("user_id") == candidate.get("user_id"):
                            raise _unique_violation("teams_name_user_id_key")
            for target in targets:
                target.update(self._payload)
            return SimpleNamespace(data=[dict(r) for r in targets])

        if self._op == "delete":
            removed = [r for r in self._rows if self._matches(r)]
            self.client.db[self.name] = [r for r in self._rows if not self._matches(r)]
            if self.name == "teams":
                gone = {r["id"] for r in removed}
                players = self.client.db.get("players", [])
                self.client.db["players"] = [p for p in players if p.get("team_id") not in gone]
            return SimpleNamespace(data=[dict(r) for r in removed])

        data = [dict(r) for r in self._rows if self._matches(r)]
        if "teams(name)" in (self._columns or ""):
            names = {t["id"]: t.get("name") for t in self.client.db.get("teams", [])}
            for row in data:
                name = names.get(row.get("team_id"))
                row["teams"] = {"name": name} if name is not None else None
        for column, desc in reversed(self._order):
            data.sort(key=lambda r: _sort_key(r.get(column)), reverse=desc)
        if self._limit is not None:
            data = data[: self._limit]
        return SimpleNamespace(data=data)


class FakeClient:
    def __init__(self, db=None):
        self.db = db if db is not None else {"teams": [], "players": []}
        self.calls = []
        self.errors = {}
        self.clock = 0

    def table(self, name):
        return FakeQuery(self, name)

    def fail(self, table, op, code="PGRST000", message="boom"):
        self.errors[(table, op)] = APIError({"message": message, "code": code, "details": None, "hint": None})

    def ops(self, table=None, op=None):
        return [c for c in self.calls if (table is None or c[0] == table) and (op is None or c[1] == op)]


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def seeded_client():
    client = FakeClient()
    client.table("teams").insert({"id": "eagles", "name": "Eagles", "user_id": "u1"}).execute()
    client.table("teams").insert({"id": "red-wings", "name": "Red Wings", "user_id": "u1"}).execute()
    client.table("players").insert(
        [
            {"team_id": "eagles", "first_name": "Jane", "last_name": "Doe", "position": 2, "jersey_number": 7},
            {"team_id": "eagles", "first_name": "Max", "last_name": "Muster", "position": 5, "jersey_number": None},
            {"team_id": "eagles", "first_name": "Lea", "last_name": "Keller", "position": 4, "jersey_number": 3},
            {"team_id": "red-wings", "first_name": "Tom", "last_name": "Berg", "position": 3, "jersey_number": 19},
        ]
    ).execute()
    client.calls.clear()
    return client


# ---------------- Fake Supabase auth ----------------
def auth_session(token="access-token-1", refresh="refresh-token-1", user_id="u1"):
    user = {"id": user_id, "email": f"{user_id}@example.com"}
    return SimpleNamespace(access_token=token, refresh_token=refresh, user=user)


class FakeAuth:
    """GoTrue stand-in: every auth change is broadcast to all subscribers."""

    def __init__(self, current=None):
        self.current = current
        self.callbacks = []
        self.unsubscribed = 0
        self.set_session_calls = []
        self.signed_out = False
        self.reject_password = False
        self.reject_tokens = False

    def get_session(self):
        return self.current

    def on_auth_state_change(self, callback):
        self.callbacks.append(callback)

        def _unsubscribe():
            self.unsubscribed += 1
            if callback in self.callbacks:
                self.callbacks.remove(callback)

        return SimpleNamespace(unsubscribe=_unsubscribe)

    def emit(self, event, session):
        for callback in list(self.callbacks):
            callback(event, session)

    def sign_in_with_password(self, credentials):
        if self.reject_password:
            raise AuthApiError("Invalid login credentials", 400, "invalid_credentials")
        self.current = auth_session(user_id="u-" + credentials["email"].split("@")[0])
        self.emit("SIGNED_IN", self.current)
        return SimpleNamespace(session=self.current, user=self.current.user)

    def set_session(self, access_token, refresh_token):
        if self.reject_tokens:
            raise AuthApiError("Invalid Refresh Token", 400, "refresh_token_not_found")
        self.set_session_calls.append((access_token, refresh_token))
        self.current = auth_session(access_token, refresh_token)
        self.emit("SIGNED_IN", self.current)
        return SimpleNamespace(session=self.current, user=self.current.user)

    def sign_out(self):
        self.signed_out = True
        self.current = None
        self.emit("SIGNED_OUT", None)


@pytest.fixture
def auth():
    return FakeAuth()


@pytest.fixture
def auth_client(auth):
    return SimpleNamespace(auth=auth)


@pytest.fixture
def make_session():
    return auth_session


@pytest.fixture
def new_auth_client():
    return lambda: SimpleNamespace(auth=FakeAuth())
