# file: teammanager/roster_store.py
"""Team and player persistence backed by Supabase.

Every function takes an optional ``client``; the Streamlit pages leave it out
and get the signed-in session's client, the admin CLI passes a service-role
client. PostgREST errors are re-raised as :class:`StoreError`, or
:class:`TeamNameConflictError` for unique-constraint violations.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from loguru import logger
from postgrest.exceptions import APIError

from teammanager.db_tables import PLAYERS, TEAMS
from teammanager.player_payload import clean_team_name, team_id_from_name
from teammanager.supabase_client import get_client
from teammanager.utils.supa import first_row, response_rows

UNIQUE_VIOLATION = "23505"


class StoreError(RuntimeError):
    """A Supabase request failed."""

    def __init__(self, action: str, message: str = "", code: Optional[str] = None):
        super().__init__(f"{action} failed: {message}" if message else f"{action} failed")
        self.action = action
        self.message = message
        self.code = code


class TeamNameConflictError(StoreError):
    """A team with the same name (or derived id) already exists."""


def _resolve(client):
    return client if client is not None else get_client()


def _translate(err: APIError, action: str, *, team_name: bool = False) -> StoreError:
    code = getattr(err, "code", None)
    message = getattr(err, "message", None) or str(err)
    if team_name and str(code) == UNIQUE_VIOLATION:
        logger.info("{} rejected by unique constraint: {}", action, message)
        return TeamNameConflictError(action, message, code)
    logger.error("{} failed [{}]: {}", action, code, message)
    return StoreError(action, message, code)


# ---------- teams ----------
def list_teams(client=None) -> List[Dict[str, Any]]:
    """Return the user's teams, oldest first."""
    sb = _resolve(client)
    try:
        res = sb.table(TEAMS).select("*").order("created_at").execute()
    except APIError as err:
        raise _translate(err, "Loading teams") from err
    return response_rows(res)


def create_team(name: str, user_id: Optional[str], client=None) -> Dict[str, Any]:
    """Insert a team whose id is derived from its name."""
    clean = clean_team_name(name)
    payload: Dict[str, Any] = {"id": team_id_from_name(clean), "name": clean}
    if user_id:
        payload["user_id"] = user_id
    sb = _resolve(client)
    try:
        res = sb.table(TEAMS).insert(payload).execute()
    except APIError as err:
        raise _translate(err, "Creating team", team_name=True) from err
    logger.info("Created team {}", payload["id"])
    return first_row(res) or payload


def rename_team(team_id: str, name: str, client=None) -> Dict[str, Any]:
    """Change a team's display name; its id stays the same."""
    clean = clean_team_name(name)
    sb = _resolve(client)
    try:
        res = sb.table(TEAMS).update({"name": clean}).eq("id", team_id).execute()
    except APIError as err:
        raise _translate(err, "Renaming team", team_name=True) from err
    logger.info("Renamed team {}", team_id)
    return first_row(res) or {"id": team_id, "name": clean}


def delete_team(team_id: str, client=None) -> None:
    """Delete a team; its players are removed by the foreign-key cascade."""
    sb = _resolve(client)
    try:
        sb.table(TEAMS).delete().eq("id", team_id).execute()
    except APIError as err:
        raise _translate(err, "Deleting team") from err
    logger.info("Deleted team {}", team_id)


def team_has_players(team_id: str, client=None) -> bool:
    sb = _resolve(client)
    try:
        res = sb.table(PLAYERS).select("id").eq("team_id", team_id).limit(1).execute()
    except APIError as err:
        raise _translate(err, "Checking team players") from err
    return bool(response_rows(res))


# ---------- players ----------
def list_players(team_id: str, client=None) -> List[Dict[str, Any]]:
    """Return a team's players ordered by jersey number."""
    sb = _resolve(client)
    try:
        res = (
            sb.table(PLAYERS)
            .select("*")
            .eq("team_id", team_id)
            .order("jersey_number")
            .execute()
        )
    except APIError as err:
        raise _translate(err, "Loading players") from err
    return response_rows(res)


def list_all_players(client=None) -> List[Dict[str, Any]]:
    """Return every player with the owning team's name joined in as ``teams.name``."""
    sb = _resolve(client)
    try:
        res = sb.table(PLAYERS).select("*, teams(name)").order("team_id").execute()
    except APIError as err:
        raise _translate(err, "Loading all players") from err
    return response_rows(res)


def insert_player(payload: Dict[str, Any], client=None) -> Dict[str, Any]:
    sb = _resolve(client)
    try:
        res = sb.table(PLAYERS).insert(payload).execute()
    except APIError as err:
        raise _translate(err, "Creating player") from err
    return first_row(res) or payload


def update_player(player_id: str, payload: Dict[str, Any], client=None) -> Dict[str, Any]:
    sb = _resolve(client)
    try:
        res = sb.table(PLAYERS).update(payload).eq("id", player_id).execute()
    except APIError as err:
        raise _translate(err, "Updating player") from err
    return first_row(res) or {"id": player_id, **payload}


def delete_player(player_id: str, client=None) -> None:
    sb = _resolve(client)
    try:
        sb.table(PLAYERS).delete().eq("id", player_id).execute()
    except APIError as err:
        raise _translate(err, "Deleting player") from err


def insert_players(rows: Sequence[Dict[str, Any]], client=None) -> List[Dict[str, Any]]:
    """Insert all ``rows`` in a single bulk request."""
    if not rows:
        return []
    sb = _resolve(client)
    try:
        res = sb.table(PLAYERS).insert(list(rows)).execute()
    except APIError as err:
        raise _translate(err, "Importing players") from err
    logger.info("Inserted {} players", len(rows))
    return response_rows(res)


__all__ = [
    "StoreError",
    "TeamNameConflictError",
    "create_team",
    "delete_player",
    "delete_team",
    "insert_player",
    "insert_players",
    "list_all_players",
    "list_players",
    "list_teams",
    "rename_team",
    "team_has_players",
    "update_player",
]
