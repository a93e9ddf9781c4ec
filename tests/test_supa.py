import httpx
import pytest

from teammanager.utils import supa
from teammanager.utils.supa import (
    SupabaseConfigError,
    SupabaseConnectionError,
    first_row,
    read_supabase_config,
    response_rows,
)


def test_first_row_basic():
    class Resp:
        def __init__(self, data):
            self.data = data
    assert first_row(Resp([{"a": 1}])) == {"a": 1}
    assert first_row(Resp([])) is None
    assert first_row(None) is None


def test_response_rows_copies_dicts():
    class Resp:
        data = [{"id": 1}]
    rows = response_rows(Resp())
    assert rows == [{"id": 1}]
    assert rows[0] is not Resp.data[0]
    assert response_rows(object()) == []


def test_read_config_from_env(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key-123456")
    assert read_supabase_config() == {"url": "https://example.supabase.co", "anon_key": "anon-key-123456"}


def test_missing_config_raises(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
    monkeypatch.setattr(supa, "get_setting", lambda *a, **k: None)
    with pytest.raises(SupabaseConfigError):
        read_supabase_config()


def test_create_supabase_client_http_status_error(monkeypatch):
    request = httpx.Request("GET", "https://example.supabase.co")
    response = httpx.Response(404, request=request, text="Not Found")

    def _raise_http_status(*args, **kwargs):  # pragma: no cover - helper for test
        raise httpx.HTTPStatusError("not found", request=request, response=response)

    monkeypatch.setattr(supa, "create_client", _raise_http_status)

    with pytest.raises(SupabaseConfigError) as excinfo:
        supa.create_supabase_client("https://example.supabase.co", "anon-key")

    assert "HTTP 404" in str(excinfo.value)


def test_create_supabase_client_connection_error(monkeypatch):
    def _raise_connect(*args, **kwargs):
        raise httpx.ConnectError("offline")

    monkeypatch.setattr(supa, "create_client", _raise_connect)

    with pytest.raises(SupabaseConnectionError):
        supa.create_supabase_client("https://example.supabase.co", "anon-key")
