"""Admin-only roster import/export using the service role key.

This module is intentionally kept outside the Streamlit runtime. It expects
`SUPABASE_URL` and `SUPABASE_SERVICE_ROLE_KEY` environment variables to be
present and should only be used for trusted CLI/admin tasks.

    python scripts/roster_admin.py export rosters.csv
    python scripts/roster_admin.py export --team "Eagles" eagles.csv
    python scripts/roster_admin.py import eagles.csv --team eagles
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Optional, Tuple

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from loguru import logger  # noqa: E402

from teammanager import roster_store  # noqa: E402
from teammanager.config import log_level  # noqa: E402
from teammanager.logging_setup import register_secret, setup_logging  # noqa: E402
from teammanager.roster_csv import NoValidRowsError, RosterFormatError  # noqa: E402
from teammanager.roster_store import StoreError  # noqa: E402
from teammanager.services.roster_io import (  # noqa: E402
    NothingToExportError,
    export_all_teams_csv,
    export_team_csv,
    import_roster_csv,
)
from teammanager.utils.supa import create_supabase_client  # noqa: E402


def _service_client():
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    if not url or not key:
        raise RuntimeError(
            "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY before running admin commands."
        )
    register_secret(key)
    return create_supabase_client(url, key)


def export_csv(out_fp: Path, team_name: Optional[str] = None, client=None) -> Tuple[bool, str]:
    """Write one team's roster (or every roster) to ``out_fp``."""
    sb = client or _service_client()
    try:
        if team_name:
            wanted = team_name.strip().lower()
            team = next(
                (t for t in roster_store.list_teams(client=sb) if (t.get("name") or "").lower() == wanted),
                None,
            )
            if team is None:
                return False, f"No team named {team_name!r}"
            export = export_team_csv(team, client=sb)
        else:
            export = export_all_teams_csv(client=sb)
    except NothingToExportError:
        return False, "No players to export"
    except StoreError as exc:
        return False, str(exc)
    out_fp.parent.mkdir(parents=True, exist_ok=True)
    out_fp.write_bytes(export.data)
    return True, f"Exported {export.rows} players to {out_fp}"


def import_csv(in_fp: Path, team_id: str, client=None) -> Tuple[bool, str]:
    """Bulk insert the players in ``in_fp``; unmatched teams fall back to ``team_id``."""
    sb = client or _service_client()
    try:
        count = import_roster_csv(in_fp.read_bytes(), team_id, client=sb)
    except NoValidRowsError:
        return False, f"No valid player rows in {in_fp}"
    except (RosterFormatError, OSError) as exc:
        return False, f"Cannot read {in_fp}: {exc}"
    except StoreError as exc:
        return False, str(exc)
    return True, f"Imported {count} players"


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Team roster CSV import/export")
    sub = parser.add_subparsers(dest="action", required=True)

    exp = sub.add_parser("export", help="Export rosters to CSV")
    exp.add_argument("path", help="Output CSV path")
    exp.add_argument("--team", help="Team name (default: all teams)")

    imp = sub.add_parser("import", help="Import players from CSV")
    imp.add_argument("path", help="Input CSV path")
    imp.add_argument("--team", required=True, help="Fallback team id for rows without a known team")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    setup_logging(log_level())
    path = Path(args.path)
    if args.action == "export":
        ok, msg = export_csv(path, args.team)
    else:
        ok, msg = import_csv(path, args.team)
    if ok:
        logger.info(msg)
    else:
        logger.error(msg)
    return 0 if ok else 1


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())
