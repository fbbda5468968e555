from __future__ import annotations

from typing import Optional, Sequence

from ..common.validators import require_non_empty
from .model import Student
from .repository import StudentRepository


def _optional(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class StudentService:
    """Use case: keep the student registry used for notification lookup."""

    def __init__(self, students: StudentRepository):
        self._students = students

    def list_all(self) -> Sequence[Student]:
        return self._students.list_all()

    def register(self, data: dict) -> Student:
        student = Student(
            student_id=require_non_empty(data.get("student_id"), "Student ID"),
            name=require_non_empty(data.get("name"), "Student name"),
            class_name=_optional(data.get("class_name")),
            parent_whatsapp=_optional(data.get("parent_whatsapp")),
            telegram_chat_id=_optional(data.get("telegram_chat_id")),
        )
        self._students.save(student)
        return student
