"""Helpers for building and validating team and player payloads."""

from __future__ import annotations

import math
import re
from typing import Any, Dict, Optional

from teammanager import messages
from teammanager.positions import normalize_position

_WHITESPACE = re.compile(r"\s+")


class ValidationError(ValueError):
    """Raised when a required field is missing; the store is never called."""


def team_id_from_name(name: str) -> str:
    """Derive the stable team identifier: lowercase, whitespace runs to ``-``."""
    return _WHITESPACE.sub("-", name.strip().lower())


def clean_team_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError(messages.TEAM_NAME_REQUIRED)
    return cleaned


def parse_jersey_number(value: Any) -> Optional[int]:
    """Parse a jersey number, returning ``None`` for blanks and invalid text."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or not value.is_integer():
            return None
        return int(value)
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    if math.isnan(number) or math.isinf(number) or not number.is_integer():
        return None
    return int(number)


def build_player_payload(
    *,
    first_name: Optional[str],
    last_name: Optional[str],
    position: Any = None,
    jersey_number: Any = None,
    team_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Compose the Supabase payload for a player with sanitized values."""

    first = (first_name or "").strip()
    last = (last_name or "").strip()
    if not first or not last:
        raise ValidationError(messages.NAMES_REQUIRED)

    payload: Dict[str, Any] = {
        "first_name": first,
        "last_name": last,
        "position": int(normalize_position(position)),
        "jersey_number": parse_jersey_number(jersey_number),
    }
    if team_id:
        payload["team_id"] = team_id
    return payload


__all__ = [
    "ValidationError",
    "build_player_payload",
    "clean_team_name",
    "parse_jersey_number",
    "team_id_from_name",
]
