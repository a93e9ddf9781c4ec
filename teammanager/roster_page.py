# teammanager/roster_page.py: teams and players panels
from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple

import streamlit as st
from loguru import logger

from teammanager import messages, roster_store
from teammanager.delete_flow import (
    TEAM,
    DeleteConfirmation,
    DeleteTarget,
    dialog_message,
    dialog_title,
)
from teammanager.player_payload import ValidationError, build_player_payload
from teammanager.positions import POSITION_CHOICES, Position, position_label
from teammanager.roster_csv import NoValidRowsError, RosterFormatError
from teammanager.roster_store import StoreError, TeamNameConflictError
from teammanager.services.roster_io import (
    CSV_MIME,
    NothingToExportError,
    RosterExport,
    export_all_teams_csv,
    export_team_csv,
    import_roster_csv,
)

# -------------------- STATE KEYS --------------------
STATE_TEAM_KEY        = "roster__selected_team"
STATE_EDIT_TEAM_KEY   = "roster__editing_team"
STATE_EDIT_PLAYER_KEY = "roster__editing_player"
STATE_DELETE_KEY      = "roster__delete_confirmation"
STATE_ERROR_KEY       = "roster__error"
STATE_UPLOAD_NONCE    = "roster__upload_nonce"
STATE_NOTICE_KEY      = "roster__notice"

_POSITION_CODES = [code for code, _ in POSITION_CHOICES]


# ========= Helpers =========
def pick_selected_team(teams: List[Dict[str, Any]], selected: Optional[str]) -> Optional[str]:
    """Keep the current selection if it still exists, else fall back to the first team."""
    ids = [t.get("id") for t in teams]
    if selected in ids:
        return selected
    return ids[0] if ids else None


def player_display_name(player: Dict[str, Any]) -> str:
    return f"{player.get('first_name') or ''} {player.get('last_name') or ''}".strip()


def _delete_flow() -> DeleteConfirmation:
    flow = st.session_state.get(STATE_DELETE_KEY)
    if not isinstance(flow, DeleteConfirmation):
        flow = DeleteConfirmation()
        st.session_state[STATE_DELETE_KEY] = flow
    return flow


def _set_error(msg: Optional[str]) -> None:
    if msg:
        st.session_state[STATE_ERROR_KEY] = msg
    else:
        st.session_state.pop(STATE_ERROR_KEY, None)


def _store_error_message(err: StoreError) -> str:
    if isinstance(err, TeamNameConflictError):
        return messages.TEAM_NAME_TAKEN
    return messages.GENERIC_FAILURE


def _position_index(code: Any) -> int:
    try:
        return _POSITION_CODES.index(int(code))
    except (TypeError, ValueError):
        return 0


def _position_select(label: str, *, key: str, value: Any = Position.UNSET) -> int:
    return st.selectbox(
        label,
        options=_POSITION_CODES,
        index=_position_index(value),
        format_func=position_label,
        key=key,
    )


# ========= Supabase IO =========
def _load_teams() -> List[Dict[str, Any]]:
    try:
        return roster_store.list_teams()
    except StoreError:
        st.error(messages.GENERIC_FAILURE)
        return []


def _load_players(team_id: str) -> List[Dict[str, Any]]:
    try:
        return roster_store.list_players(team_id)
    except StoreError:
        st.error(messages.GENERIC_FAILURE)
        return []


def create_team_from_form(name: str, user_id: Optional[str]) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """Create a team; returns ``(team, None)`` or ``(None, message to show)``."""
    try:
        return roster_store.create_team(name, user_id), None
    except ValidationError as err:
        return None, str(err)
    except StoreError as err:
        return None, _store_error_message(err)


def rename_team_from_form(team_id: str, name: str) -> Optional[str]:
    try:
        roster_store.rename_team(team_id, name)
    except ValidationError as err:
        return str(err)
    except StoreError as err:
        return _store_error_message(err)
    return None


def import_upload(upload: Any, team_id: str) -> Tuple[bool, str]:
    try:
        count = import_roster_csv(upload, team_id)
    except NoValidRowsError:
        return False, messages.NOTHING_TO_IMPORT
    except RosterFormatError as err:
        logger.warning("Unreadable roster upload: {}", err)
        return False, messages.IMPORT_UNREADABLE
    except StoreError:
        return False, messages.IMPORT_FAILED
    return True, f"{count} Spieler*innen importiert."


def team_export(team: Dict[str, Any]) -> Tuple[Optional[RosterExport], Optional[str]]:
    try:
        return export_team_csv(team), None
    except NothingToExportError:
        return None, messages.NOTHING_TO_EXPORT
    except StoreError:
        return None, messages.GENERIC_FAILURE


def all_teams_export() -> Tuple[Optional[RosterExport], Optional[str]]:
    try:
        return export_all_teams_csv(), None
    except NothingToExportError:
        return None, messages.NOTHING_TO_EXPORT
    except StoreError:
        logger.error("All-teams export failed")
        return None, messages.EXPORT_FAILED


# ========= Delete dialog =========
def _execute_delete(target: DeleteTarget) -> None:
    try:
        if target.kind == TEAM:
            roster_store.delete_team(target.id)
            if st.session_state.get(STATE_TEAM_KEY) == target.id:
                st.session_state.pop(STATE_TEAM_KEY, None)
        else:
            roster_store.delete_player(target.id)
    except StoreError as err:
        _set_error(_store_error_message(err))


def _render_delete_dialog() -> None:
    flow = _delete_flow()
    target = flow.pending
    if target is None:
        return

    def _body() -> None:
        st.write(dialog_message(target))
        col_ok, col_cancel = st.columns(2)
        if col_ok.button("Löschen", type="primary", key="roster__delete_ok", use_container_width=True):
            _execute_delete(flow.confirm())
            st.rerun()
        if col_cancel.button("Abbrechen", key="roster__delete_cancel", use_container_width=True):
            flow.cancel()
            st.rerun()

    # closing with X or Esc counts as cancel
    st.dialog(dialog_title(target), on_dismiss=flow.cancel)(_body)()


# ========= Teams panel =========
def _render_team_form(user_id: Optional[str]) -> None:
    with st.form("roster__new_team", clear_on_submit=True):
        name = st.text_input("Neuer Teamname", placeholder="Neuer Teamname", label_visibility="collapsed")
        submitted = st.form_submit_button("➕ Team anlegen")
    if not submitted:
        return
    team, error = create_team_from_form(name, user_id)
    _set_error(error)
    if team is None:
        return
    st.session_state.setdefault(STATE_TEAM_KEY, team.get("id"))
    st.rerun()


def _render_team_row(team: Dict[str, Any], selected: Optional[str]) -> None:
    team_id = team["id"]
    if st.session_state.get(STATE_EDIT_TEAM_KEY) == team_id:
        new_name = st.text_input("Teamname", value=team.get("name") or "", key=f"team_name__{team_id}")
        col_ok, col_cancel = st.columns(2)
        if col_ok.button("✔", key=f"team_save__{team_id}"):
            error = rename_team_from_form(team_id, new_name)
            _set_error(error)
            if error is None:
                st.session_state.pop(STATE_EDIT_TEAM_KEY, None)
            st.rerun()
        if col_cancel.button("✖", key=f"team_cancel__{team_id}"):
            st.session_state.pop(STATE_EDIT_TEAM_KEY, None)
            _set_error(None)
            st.rerun()
        return

    col_name, col_edit, col_delete = st.columns([6, 1, 1])
    label = f"**{team.get('name')}**" if team_id == selected else team.get("name")
    if col_name.button(label, key=f"team_select__{team_id}", use_container_width=True):
        st.session_state[STATE_TEAM_KEY] = team_id
        st.session_state.pop(STATE_EDIT_PLAYER_KEY, None)
        st.rerun()
    if col_edit.button("✏️", key=f"team_edit__{team_id}"):
        st.session_state[STATE_EDIT_TEAM_KEY] = team_id
        st.rerun()
    if col_delete.button("🗑️", key=f"team_delete__{team_id}"):
        try:
            has_players = roster_store.team_has_players(team_id)
        except StoreError:
            st.error(messages.GENERIC_FAILURE)
            return
        _delete_flow().request_team_delete(team_id, team.get("name") or team_id, has_players)
        st.rerun()


def render_teams_panel(teams: List[Dict[str, Any]], selected: Optional[str], user_id: Optional[str]) -> None:
    st.subheader("👥 Teams")
    _render_team_form(user_id)
    error = st.session_state.get(STATE_ERROR_KEY)
    if error:
        st.error(error)
    for team in teams:
        _render_team_row(team, selected)


# ========= Players panel =========
def _render_import_export(team: Dict[str, Any]) -> None:
    nonce = st.session_state.setdefault(STATE_UPLOAD_NONCE, 0)
    notice = st.session_state.pop(STATE_NOTICE_KEY, None)
    if notice:
        st.success(notice)
    col_import, col_export = st.columns(2)
    with col_import:
        upload = st.file_uploader("CSV importieren", type=["csv"], key=f"roster__upload_{nonce}")
        if upload is not None and st.button("⬆️ Importieren", key="roster__import"):
            ok, msg = import_upload(upload, team["id"])
            if not ok:
                st.error(msg)
                return
            st.session_state[STATE_UPLOAD_NONCE] = nonce + 1
            st.session_state[STATE_NOTICE_KEY] = msg
            st.rerun()
    with col_export:
        export, msg = team_export(team)
        if export is None:
            if msg == messages.NOTHING_TO_EXPORT:
                st.caption(msg)
            else:
                st.error(msg)
            return
        st.download_button(
            "⬇️ CSV exportieren",
            export.data,
            file_name=export.filename,
            mime=CSV_MIME,
            key="roster__export_team",
        )


def _render_player_form(team_id: str) -> None:
    with st.form("roster__new_player", clear_on_submit=True):
        c1, c2, c3, c4 = st.columns([3, 3, 3, 2])
        first = c1.text_input("Vorname")
        last = c2.text_input("Nachname")
        with c3:
            position = _position_select("Position", key="roster__new_position")
        jersey = c4.text_input("Nr.")
        submitted = st.form_submit_button("➕ Spieler*in hinzufügen")
    if not submitted:
        return
    try:
        payload = build_player_payload(
            first_name=first, last_name=last, position=position, jersey_number=jersey, team_id=team_id
        )
    except ValidationError as err:
        st.error(str(err))
        return
    try:
        roster_store.insert_player(payload)
    except StoreError:
        st.error(messages.GENERIC_FAILURE)
        return
    st.rerun()


def _render_player_editor(player: Dict[str, Any]) -> None:
    pid = player["id"]
    c1, c2, c3, c4, c5 = st.columns([2, 3, 3, 3, 2])
    number = player.get("jersey_number")
    jersey = c1.text_input("Nr.", value="" if number is None else str(number), key=f"p_jersey__{pid}")
    first = c2.text_input("Vorname", value=player.get("first_name") or "", key=f"p_first__{pid}")
    last = c3.text_input("Nachname", value=player.get("last_name") or "", key=f"p_last__{pid}")
    with c4:
        position = _position_select("Position", key=f"p_pos__{pid}", value=player.get("position"))
    with c5:
        save = st.button("✔", key=f"p_save__{pid}")
        cancel = st.button("✖", key=f"p_cancel__{pid}")
    if cancel:
        st.session_state.pop(STATE_EDIT_PLAYER_KEY, None)
        st.rerun()
    if save:
        try:
            payload = build_player_payload(
                first_name=first, last_name=last, position=position, jersey_number=jersey
            )
            roster_store.update_player(pid, payload)
        except ValidationError as err:
            st.error(str(err))
            return
        except StoreError:
            st.error(messages.GENERIC_FAILURE)
            return
        st.session_state.pop(STATE_EDIT_PLAYER_KEY, None)
        st.rerun()


def _render_player_row(player: Dict[str, Any]) -> None:
    pid = player["id"]
    if st.session_state.get(STATE_EDIT_PLAYER_KEY) == pid:
        _render_player_editor(player)
        return
    c1, c2, c3, c4, c5 = st.columns([1, 4, 3, 1, 1])
    jersey = player.get("jersey_number")
    c1.write("" if jersey is None else str(jersey))
    c2.write(player_display_name(player))
    c3.write(position_label(player.get("position")))
    if c4.button("✏️", key=f"p_edit__{pid}"):
        st.session_state[STATE_EDIT_PLAYER_KEY] = pid
        st.rerun()
    if c5.button("🗑️", key=f"p_delete__{pid}"):
        _delete_flow().request_player_delete(pid, player_display_name(player))
        st.rerun()


def render_players_panel(team: Optional[Dict[str, Any]]) -> None:
    st.subheader("🏒 Spieler*innen")
    if team is None:
        st.info(messages.SELECT_TEAM_HINT)
        return
    _render_import_export(team)
    _render_player_form(team["id"])
    players = _load_players(team["id"])
    if not players:
        st.caption("Noch keine Spieler*innen in diesem Team.")
    for player in players:
        _render_player_row(player)


# ========= Header =========
def render_export_all_button() -> None:
    if st.button("⬇️ Alle Teams exportieren", key="roster__export_all_prepare"):
        export, msg = all_teams_export()
        if export is None:
            if msg == messages.NOTHING_TO_EXPORT:
                st.warning(msg)
            else:
                st.error(msg)
            return
        st.download_button(
            "CSV herunterladen",
            export.data,
            file_name=export.filename,
            mime=CSV_MIME,
            key="roster__export_all",
        )


# ========= PAGE =========
def show_roster_page(user_id: Optional[str]) -> None:
    _render_delete_dialog()

    teams = _load_teams()
    selected = pick_selected_team(teams, st.session_state.get(STATE_TEAM_KEY))
    if selected is None:
        st.session_state.pop(STATE_TEAM_KEY, None)
    else:
        st.session_state[STATE_TEAM_KEY] = selected
    team = next((t for t in teams if t.get("id") == selected), None)

    col_teams, col_players = st.columns([1, 2], gap="large")
    with col_teams:
        render_teams_panel(teams, selected, user_id)
    with col_players:
        render_players_panel(team)


__all__ = [
    "all_teams_export",
    "create_team_from_form",
    "import_upload",
    "pick_selected_team",
    "player_display_name",
    "rename_team_from_form",
    "render_export_all_button",
    "show_roster_page",
    "team_export",
]
