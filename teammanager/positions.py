"""Player positions and the label normalizer used by forms and CSV import."""

from __future__ import annotations

import math
import re
import unicodedata
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple


class Position(IntEnum):
    UNSET = 1
    FORWARD = 2
    CENTER = 3
    DEFENSE = 4
    GOALIE = 5


POSITION_LABELS: Dict[Position, str] = {
    Position.UNSET: "Position nicht gewählt",
    Position.FORWARD: "Stürmer*in",
    Position.CENTER: "Center*in",
    Position.DEFENSE: "Verteidiger*in",
    Position.GOALIE: "Goali",
}

POSITION_CHOICES: List[Tuple[int, str]] = [(int(p), label) for p, label in POSITION_LABELS.items()]

_UMLAUTS = (("ä", "ae"), ("ö", "oe"), ("ü", "ue"), ("ß", "ss"))
_GENDER_SUFFIX = re.compile(r"[*:_/]in$")

_SYNONYMS: Dict[str, Position] = {}
for _position, _words in (
    (Position.UNSET, ("position nicht gewählt", "nicht gewählt")),
    (Position.FORWARD, ("stürmer", "sturm", "forward")),
    (Position.CENTER, ("center", "centre")),
    (Position.DEFENSE, ("verteidiger", "verteidigung", "defense", "defence", "defender")),
    (Position.GOALIE, ("goali", "goalie", "torwart", "torhüter", "keeper", "goalkeeper", "goaltender")),
):
    for _word in _words:
        _SYNONYMS[_word] = _position


def _fold_umlauts(text: str) -> str:
    for umlaut, plain in _UMLAUTS:
        text = text.replace(umlaut, plain)
    return text


_FOLDED: Dict[str, Position] = {_fold_umlauts(k): v for k, v in _SYNONYMS.items()}


def _as_code(value: Any) -> Optional[int]:
    """Return ``value`` as an integer position code, or ``None`` if it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if math.isnan(value) or not value.is_integer():
            return None
        number = int(value)
    elif isinstance(value, str):
        try:
            number = int(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if Position.UNSET <= number <= Position.GOALIE else None


def normalize_position(value: Any) -> Position:
    """Map a code or free-text label to a :class:`Position`.

    Accepts codes ``1``-``5`` (as int or numeric string) and the German and
    English labels, case-insensitive, with umlauts or their transliteration
    and with or without a gender suffix such as ``*in``. Anything else,
    including ``None`` and the empty string, maps to ``Position.UNSET``.
    """

    code = _as_code(value)
    if code is not None:
        return Position(code)
    if not isinstance(value, str):
        return Position.UNSET

    label = unicodedata.normalize("NFC", value).strip().lower()
    if not label:
        return Position.UNSET
    candidates = [label]
    stripped = _GENDER_SUFFIX.sub("", label)
    if stripped != label:
        candidates.append(stripped)
    for candidate in candidates:
        match = _SYNONYMS.get(candidate) or _FOLDED.get(_fold_umlauts(candidate))
        if match is not None:
            return match
    return Position.UNSET


def position_label(code: Any) -> str:
    """Human label for a stored position code; unknown codes read as unset."""
    resolved = _as_code(code)
    if resolved is None:
        return POSITION_LABELS[Position.UNSET]
    return POSITION_LABELS[Position(resolved)]


__all__ = [
    "POSITION_CHOICES",
    "POSITION_LABELS",
    "Position",
    "normalize_position",
    "position_label",
]
