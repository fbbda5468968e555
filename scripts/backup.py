"""Dump the GeoFace database with ``mysqldump``.

Selfies are stored as LONGBLOB, so dumps use ``--hex-blob`` and can be large.
Skip the attendance table with ``--no-records`` for a settings/students-only dump.
"""

from __future__ import annotations

import argparse
import importlib
import subprocess
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT / "src" / "geoface") not in sys.path:
    sys.path.insert(0, str(REPO_ROOT / "src" / "geoface"))

from geoface.config import get_settings_module


def build_command(db: dict, *, include_records: bool = True) -> list[str]:
    cmd = [
        "mysqldump",
        f"-h{db['host']}",
        f"-P{db.get('port', 3306)}",
        f"-u{db['user']}",
        f"-p{db['password']}",
        "--hex-blob",
        "--single-transaction",
    ]
    if not include_records:
        cmd.append(f"--ignore-table={db['database']}.attendance_records")
    cmd.append(db["database"])
    return cmd


def main() -> None:
    parser = argparse.ArgumentParser(description="Backup the GeoFace database")
    parser.add_argument("--no-records", action="store_true", help="skip attendance_records")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    db = settings.DB_CONFIG

    out_dir = REPO_ROOT / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_file = out_dir / f"{db['database']}_{ts}.sql"

    try:
        with out_file.open("wb") as f:
            subprocess.run(build_command(db, include_records=not args.no_records), stdout=f, stderr=subprocess.PIPE, check=True)
        print(f"OK: Backup created: {out_file}")
    except FileNotFoundError:
        raise SystemExit("`mysqldump` not found. Install the MySQL client tools or back up with MySQL Workbench.")


if __name__ == "__main__":
    main()
