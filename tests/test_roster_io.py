from datetime import date

import pytest

from teammanager.roster_csv import NoValidRowsError, decode_players_csv
from teammanager.roster_store import StoreError
from teammanager.services import roster_io
from teammanager.services.roster_io import NothingToExportError

DAY = date(2024, 5, 1)


def test_import_assigns_teams_and_inserts_once(seeded_client):
    csv_text = (
        "Team,Vorname,Nachname,Position,Trikotnummer\n"
        "red wings,Ada,Lind,Stürmer*in,11\n"
        "Unknown,Bo,Berg,Goalie,\n"
        ",,Nobody,,\n"
    )
    count = roster_io.import_roster_csv(csv_text, "eagles", client=seeded_client)
    assert count == 2

    inserts = seeded_client.ops("players", "insert")
    assert len(inserts) == 1
    payload = inserts[0][2]
    assert [(p["first_name"], p["team_id"], p["position"], p["jersey_number"]) for p in payload] == [
        ("Ada", "red-wings", 2, 11),
        ("Bo", "eagles", 5, None),
    ]


def test_import_without_valid_rows_never_inserts(seeded_client):
    with pytest.raises(NoValidRowsError):
        roster_io.import_roster_csv("Team,Vorname,Nachname\nEagles,,Doe\n", "eagles", client=seeded_client)
    assert seeded_client.ops("players", "insert") == []


def test_import_store_failure_propagates(seeded_client):
    seeded_client.fail("players", "insert")
    with pytest.raises(StoreError):
        roster_io.import_roster_csv("Vorname,Nachname\nJane,Doe\n", "eagles", client=seeded_client)


def test_export_team_csv(seeded_client):
    export = roster_io.export_team_csv({"id": "eagles", "name": "Eagles"}, client=seeded_client, today=DAY)
    assert export.filename == "spieler_Eagles_2024-05-01.csv"
    assert export.rows == 3
    lines = export.data.decode("utf-8").splitlines()
    assert lines[0] == "Team,Vorname,Nachname,Position,Trikotnummer"
    assert lines[1:] == [
        "Eagles,Lea,Keller,Verteidiger*in,3",
        "Eagles,Jane,Doe,Stürmer*in,7",
        "Eagles,Max,Muster,Goali,",
    ]


def test_export_team_without_players(fake_client):
    with pytest.raises(NothingToExportError):
        roster_io.export_team_csv({"id": "empty", "name": "Empty"}, client=fake_client)


def test_export_all_teams_round_trips(seeded_client):
    export = roster_io.export_all_teams_csv(client=seeded_client, today=DAY)
    assert export.filename == "alle_spieler_2024-05-01.csv"
    assert export.rows == 4

    teams = [{"id": "eagles", "name": "Eagles"}, {"id": "red-wings", "name": "Red Wings"}]
    decoded = decode_players_csv(export.data, teams, "nowhere")
    original = seeded_client.db["players"]
    key = lambda p: (p["team_id"], p["first_name"], p["last_name"], p["position"], p["jersey_number"])  # noqa: E731
    assert sorted(map(key, decoded)) == sorted(map(key, original))


def test_export_all_teams_when_empty(fake_client):
    with pytest.raises(NothingToExportError):
        roster_io.export_all_teams_csv(client=fake_client)


def test_filenames_default_to_today():
    today = date.today().isoformat()
    assert roster_io.team_export_filename("Eagles") == f"spieler_Eagles_{today}.csv"
    assert roster_io.all_teams_export_filename() == f"alle_spieler_{today}.csv"
