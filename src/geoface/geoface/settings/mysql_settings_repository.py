from __future__ import annotations

import json
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .repository import SettingsRepository


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def load(self, key: str) -> Optional[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT settings_json FROM app_settings WHERE settings_key=%s", (key,))
            r = fetchone(cur)
            if not r:
                return None
            raw = r["settings_json"]
            if isinstance(raw, (bytes, bytearray)):
                raw = raw.decode("utf-8")
            return json.loads(raw) if isinstance(raw, str) else dict(raw)

    def store(self, key: str, value: dict) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO app_settings(settings_key, settings_json)
                VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE settings_json=VALUES(settings_json)
                """,
                (key, json.dumps(value)),
            )
