"""CSV encoding and decoding of team rosters.

The file layout is fixed: one header row with ``Team, Vorname, Nachname,
Position, Trikotnummer``. Positions are written as labels and read back through
:func:`teammanager.positions.normalize_position`, so files exported here can be
edited by hand and imported again.
"""

from __future__ import annotations

import csv
import io
import math
import unicodedata
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import pandas as pd

from teammanager.player_payload import parse_jersey_number
from teammanager.positions import normalize_position, position_label

COL_TEAM = "Team"
COL_FIRST_NAME = "Vorname"
COL_LAST_NAME = "Nachname"
COL_POSITION = "Position"
COL_JERSEY = "Trikotnummer"

CSV_COLUMNS = [COL_TEAM, COL_FIRST_NAME, COL_LAST_NAME, COL_POSITION, COL_JERSEY]

CsvSource = Union[str, bytes, io.IOBase, Any]


class RosterFormatError(ValueError):
    """Raised when an import file cannot be decoded or parsed as CSV."""


class NoValidRowsError(ValueError):
    """Raised when an import file contains no row with both names filled in."""


# ---------- encode ----------
def _jersey_cell(value: Any) -> str:
    number = parse_jersey_number(value)
    return "" if number is None else str(number)


def players_to_rows(
    players: Iterable[Mapping[str, Any]], team_names: Mapping[str, str]
) -> List[Dict[str, str]]:
    rows = []
    for player in players:
        rows.append(
            {
                COL_TEAM: team_names.get(str(player.get("team_id") or ""), ""),
                COL_FIRST_NAME: player.get("first_name") or "",
                COL_LAST_NAME: player.get("last_name") or "",
                COL_POSITION: position_label(player.get("position")),
                COL_JERSEY: _jersey_cell(player.get("jersey_number")),
            }
        )
    return rows


def encode_players_csv(
    players: Iterable[Mapping[str, Any]], team_names: Mapping[str, str]
) -> str:
    """Serialize players to CSV text, resolving team names via ``team_names``."""
    df = pd.DataFrame(players_to_rows(players, team_names), columns=CSV_COLUMNS, dtype=str)
    return df.to_csv(index=False, lineterminator="\n")


def encode_team_csv(players: Iterable[Mapping[str, Any]], team: Mapping[str, Any]) -> str:
    """Single-team export: every row carries ``team``'s name."""
    team_id = str(team.get("id") or "")
    name = team.get("name") or ""
    rows = [{**p, "team_id": team_id} for p in players]
    return encode_players_csv(rows, {team_id: name})


def encode_all_teams_csv(players: Sequence[Mapping[str, Any]]) -> str:
    """All-teams export from rows selected with ``*, teams(name)``."""
    team_names: Dict[str, str] = {}
    for player in players:
        joined = player.get("teams") or {}
        team_names[str(player.get("team_id") or "")] = joined.get("name") or ""
    return encode_players_csv(players, team_names)


# ---------- decode ----------
_FALLBACK_ENCODING = "cp1252"


def _read_text(source: CsvSource) -> str:
    if hasattr(source, "read"):
        source = source.read()
    if not isinstance(source, (bytes, bytearray)):
        return str(source).lstrip("\ufeff")
    data = bytes(source)
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        pass
    # Excel on Windows saves "CSV" as cp1252
    try:
        return data.decode(_FALLBACK_ENCODING)
    except UnicodeDecodeError as exc:
        raise RosterFormatError("CSV file is neither UTF-8 nor Windows-1252 encoded") from exc


def _read_frame(text: str) -> pd.DataFrame:
    """Read ``text`` keeping only as many fields per row as the header has.

    Trailing extra fields (``a,b,c,``) are dropped instead of failing the file.
    """
    header = pd.read_csv(io.StringIO(text), nrows=0, engine="python")
    width = len(header.columns)
    return pd.read_csv(
        io.StringIO(text),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        engine="python",
        index_col=False,
        usecols=list(range(width)),
    )


def _cell(row: Mapping[str, Any], column: str) -> str:
    value = row.get(column)
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ""
    return str(value)


def _team_key(name: Any) -> str:
    return unicodedata.normalize("NFC", str(name or "")).strip().lower()


def _resolve_team_id(
    team_name: str, teams: Sequence[Mapping[str, Any]], default_team_id: str
) -> str:
    wanted = _team_key(team_name)
    if wanted:
        for team in teams:
            if _team_key(team.get("name")) == wanted:
                return str(team["id"])
    return default_team_id


def decode_players_csv(
    source: CsvSource,
    teams: Sequence[Mapping[str, Any]],
    default_team_id: str,
) -> List[Dict[str, Optional[Any]]]:
    """Parse an uploaded roster into insertable player rows.

    Rows without a first or last name are skipped. Each row is assigned to the
    team whose name matches its ``Team`` column (case-insensitive), falling
    back to ``default_team_id``. Raises :class:`NoValidRowsError` when nothing
    is left to insert and :class:`RosterFormatError` when the bytes are not
    readable CSV.
    """

    text = _read_text(source)
    try:
        df = _read_frame(text)
    except pd.errors.EmptyDataError as exc:
        raise NoValidRowsError("CSV file is empty") from exc
    except (pd.errors.ParserError, csv.Error) as exc:
        raise RosterFormatError(f"CSV file could not be parsed: {exc}") from exc

    players: List[Dict[str, Optional[Any]]] = []
    for row in df.to_dict(orient="records"):
        first = _cell(row, COL_FIRST_NAME).strip()
        last = _cell(row, COL_LAST_NAME).strip()
        if not first or not last:
            continue
        players.append(
            {
                "team_id": _resolve_team_id(_cell(row, COL_TEAM), teams, default_team_id),
                "first_name": first,
                "last_name": last,
                "position": int(normalize_position(_cell(row, COL_POSITION))),
                "jersey_number": parse_jersey_number(_cell(row, COL_JERSEY)),
            }
        )

    if not players:
        raise NoValidRowsError("CSV file contains no rows with first and last name")
    return players


__all__ = [
    "CSV_COLUMNS",
    "NoValidRowsError",
    "RosterFormatError",
    "decode_players_csv",
    "encode_all_teams_csv",
    "encode_players_csv",
    "encode_team_csv",
    "players_to_rows",
]
