from __future__ import annotations
from datetime import date
from typing import Any, Dict, NamedTuple, Optional

from loguru import logger

from teammanager import roster_store
from teammanager.roster_csv import CsvSource, decode_players_csv, encode_all_teams_csv, encode_team_csv

CSV_MIME = "text/csv"


class NothingToExportError(LookupError):
    """Raised when an export would produce a file without players."""


class RosterExport(NamedTuple):
    filename: str
    data: bytes
    rows: int


def team_export_filename(team_name: str, today: Optional[date] = None) -> str:
    return f"spieler_{team_name}_{(today or date.today()).isoformat()}.csv"


def all_teams_export_filename(today: Optional[date] = None) -> str:
    return f"alle_spieler_{(today or date.today()).isoformat()}.csv"


def import_roster_csv(source: CsvSource, default_team_id: str, client=None) -> int:
    """Decode an uploaded roster and insert it with one bulk request.

    Raises :class:`teammanager.roster_csv.NoValidRowsError` before touching
    the store when the file has no usable rows.
    """
    teams = roster_store.list_teams(client=client)
    rows = decode_players_csv(source, teams, default_team_id)
    roster_store.insert_players(rows, client=client)
    logger.info("Imported {} players (default team {})", len(rows), default_team_id)
    return len(rows)


def export_team_csv(team: Dict[str, Any], client=None, today: Optional[date] = None) -> RosterExport:
    players = roster_store.list_players(team["id"], client=client)
    if not players:
        raise NothingToExportError(team["id"])
    text = encode_team_csv(players, team)
    return RosterExport(team_export_filename(team.get("name") or team["id"], today), text.encode("utf-8"), len(players))


def export_all_teams_csv(client=None, today: Optional[date] = None) -> RosterExport:
    players = roster_store.list_all_players(client=client)
    if not players:
        raise NothingToExportError("all teams")
    text = encode_all_teams_csv(players)
    return RosterExport(all_teams_export_filename(today), text.encode("utf-8"), len(players))


__all__ = [
    "CSV_MIME",
    "NothingToExportError",
    "RosterExport",
    "all_teams_export_filename",
    "export_all_teams_csv",
    "export_team_csv",
    "import_roster_csv",
    "team_export_filename",
]
