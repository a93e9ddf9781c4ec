"""Two-step delete confirmation.

A delete starts in ``Idle``; requesting one moves to ``PendingConfirmation``
holding the target, and ``confirm()`` or ``cancel()`` return to ``Idle``.
Only ``confirm()`` hands the target back to the caller, so nothing is deleted
without passing through the pending state first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

TEAM = "team"
PLAYER = "player"


@dataclass(frozen=True)
class DeleteTarget:
    kind: str
    id: str
    name: str
    has_players: bool = False


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class PendingConfirmation:
    target: DeleteTarget


DeleteState = Union[Idle, PendingConfirmation]


class DeleteConfirmation:
    def __init__(self) -> None:
        self.state: DeleteState = Idle()

    @property
    def pending(self) -> Optional[DeleteTarget]:
        if isinstance(self.state, PendingConfirmation):
            return self.state.target
        return None

    def request_team_delete(self, team_id: str, name: str, has_players: bool) -> DeleteTarget:
        return self._request(DeleteTarget(TEAM, team_id, name, has_players))

    def request_player_delete(self, player_id: str, name: str) -> DeleteTarget:
        return self._request(DeleteTarget(PLAYER, player_id, name))

    def _request(self, target: DeleteTarget) -> DeleteTarget:
        # a newer request replaces an unanswered one
        self.state = PendingConfirmation(target)
        return target

    def confirm(self) -> DeleteTarget:
        target = self.pending
        if target is None:
            raise RuntimeError("No delete is awaiting confirmation")
        self.state = Idle()
        return target

    def cancel(self) -> None:
        self.state = Idle()


def dialog_title(target: DeleteTarget) -> str:
    return f"{'Team' if target.kind == TEAM else 'Spieler*in'} löschen"


def dialog_message(target: DeleteTarget) -> str:
    if target.kind == TEAM:
        if target.has_players:
            return (
                f'Möchten Sie das Team "{target.name}" wirklich löschen? '
                "Alle Spieler*innen in diesem Team werden ebenfalls gelöscht."
            )
        return f'Möchten Sie das Team "{target.name}" wirklich löschen?'
    return f"Möchten Sie {target.name} wirklich aus dem Team entfernen?"


__all__ = [
    "DeleteConfirmation",
    "DeleteTarget",
    "Idle",
    "PendingConfirmation",
    "dialog_message",
    "dialog_title",
]
