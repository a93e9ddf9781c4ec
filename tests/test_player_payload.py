import math

import pytest

from teammanager import messages
from teammanager.player_payload import (
    ValidationError,
    build_player_payload,
    clean_team_name,
    parse_jersey_number,
    team_id_from_name,
)


def test_team_id_from_name():
    assert team_id_from_name("Red Wings") == "red-wings"
    assert team_id_from_name("  Eagles   U18 ") == "eagles-u18"
    assert team_id_from_name("Zürich\tLions") == "zürich-lions"


def test_clean_team_name_requires_text():
    assert clean_team_name("  Eagles ") == "Eagles"
    with pytest.raises(ValidationError) as excinfo:
        clean_team_name("   ")
    assert str(excinfo.value) == messages.TEAM_NAME_REQUIRED


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("7", 7),
        (" 12 ", 12),
        ("0", 0),
        (0, 0),
        (23, 23),
        ("7.0", 7),
        (7.0, 7),
        ("", None),
        ("   ", None),
        (None, None),
        ("abc", None),
        ("7a", None),
        ("7.5", None),
        (math.nan, None),
        ("nan", None),
    ],
)
def test_parse_jersey_number(raw, expected):
    assert parse_jersey_number(raw) == expected


def test_build_player_payload_trims_and_normalizes():
    payload = build_player_payload(
        first_name="  Jane ",
        last_name=" Doe",
        position="Goali",
        jersey_number=" 31 ",
        team_id="eagles",
    )
    assert payload == {
        "first_name": "Jane",
        "last_name": "Doe",
        "position": 5,
        "jersey_number": 31,
        "team_id": "eagles",
    }


def test_build_player_payload_without_team_or_number():
    payload = build_player_payload(first_name="Jane", last_name="Doe")
    assert "team_id" not in payload
    assert payload["position"] == 1
    assert payload["jersey_number"] is None


@pytest.mark.parametrize("first, last", [("", "Doe"), ("Jane", "  "), (None, None)])
def test_build_player_payload_requires_names(first, last):
    with pytest.raises(ValidationError) as excinfo:
        build_player_payload(first_name=first, last_name=last)
    assert str(excinfo.value) == messages.NAMES_REQUIRED
