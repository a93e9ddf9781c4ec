# -*- coding: utf-8 -*-
# file: teammanager/app.py
from __future__ import annotations
from pathlib import Path
import sys

import streamlit as st

# ``streamlit run teammanager/app.py`` executes this file as a script; make
# the project root importable so ``teammanager.*`` resolves to this checkout.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from teammanager.config import app_title, log_level  # noqa: E402
from teammanager.logging_setup import setup_logging  # noqa: E402
from teammanager.login import login, logout  # noqa: E402
from teammanager.roster_page import render_export_all_button, show_roster_page  # noqa: E402
from teammanager.supabase_client import get_auth_session  # noqa: E402


def main() -> None:
    setup_logging(log_level())
    title = app_title()
    st.set_page_config(page_title=title, page_icon="🏒", layout="wide")

    login()
    session = get_auth_session()

    col_title, col_export, col_logout = st.columns([6, 2, 1])
    col_title.markdown(f"## {title}")
    with col_export:
        render_export_all_button()
    with col_logout:
        if st.button("Abmelden", key="app__logout"):
            logout()
    if session.email:
        st.caption(f"Angemeldet als {session.email}")

    show_roster_page(session.user_id)


if __name__ == "__main__":
    main()
