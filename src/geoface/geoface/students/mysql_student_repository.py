from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Student
from .repository import StudentRepository


def _to_student(r: dict) -> Student:
    return Student(
        student_id=str(r["student_id"]),
        name=str(r["name"]),
        class_name=r.get("class_name"),
        parent_whatsapp=r.get("parent_whatsapp"),
        telegram_chat_id=r.get("telegram_chat_id"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, name, class_name, parent_whatsapp, telegram_chat_id
                FROM students
                WHERE student_id=%s
                """,
                (str(student_id),),
            )
            r = fetchone(cur)
            return _to_student(r) if r else None

    def list_all(self) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, name, class_name, parent_whatsapp, telegram_chat_id
                FROM students
                ORDER BY class_name ASC, name ASC
                """
            )
            return [_to_student(r) for r in fetchall(cur)]

    def save(self, student: Student) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(student_id, name, class_name, parent_whatsapp, telegram_chat_id)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    name=VALUES(name),
                    class_name=VALUES(class_name),
                    parent_whatsapp=VALUES(parent_whatsapp),
                    telegram_chat_id=VALUES(telegram_chat_id)
                """,
                (
                    student.student_id,
                    student.name,
                    student.class_name,
                    student.parent_whatsapp,
                    student.telegram_chat_id,
                ),
            )
