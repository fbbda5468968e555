from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import VerificationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..geo.model import Coordinate
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    record_id, student_id, student_name, check_in_time,
    latitude, longitude, accuracy, location_captured_at,
    selfie_image, verification_status, verification_note
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        id=str(r["record_id"]),
        student_id=str(r["student_id"]),
        student_name=str(r["student_name"]),
        check_in_time=r["check_in_time"],
        location=Coordinate(
            latitude=float(r["latitude"]),
            longitude=float(r["longitude"]),
            accuracy=float(r["accuracy"]),
            captured_at=r["location_captured_at"],
        ),
        selfie_image=bytes(r["selfie_image"] or b""),
        verification_status=VerificationStatus(r["verification_status"]),
        verification_note=r.get("verification_note"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(self, record: AttendanceRecord) -> None:
        loc = record.location
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO attendance_records({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.id,
                    record.student_id,
                    record.student_name,
                    record.check_in_time,
                    loc.latitude,
                    loc.longitude,
                    loc.accuracy,
                    loc.captured_at,
                    record.selfie_image,
                    record.verification_status.value,
                    record.verification_note,
                ),
            )

    def get_by_id(self, record_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=%s", (str(record_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def update_status(self, record_id: str, status: VerificationStatus, note: Optional[str] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET verification_status=%s, verification_note=%s
                WHERE record_id=%s
                """,
                (status.value, note, str(record_id)),
            )
            if cur.rowcount > 0:
                return True
            # MySQL reports 0 affected rows when values are unchanged.
            cur.execute("SELECT 1 AS found FROM attendance_records WHERE record_id=%s", (str(record_id),))
            return fetchone(cur) is not None

    def list_all(self) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records ORDER BY check_in_time DESC, seq DESC")
            return [_to_record(r) for r in fetchall(cur)]

    def clear(self) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records")
