from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional


@dataclass(frozen=True)
class Student:
    """A registered student and the channels their parents are reachable on."""

    student_id: str
    name: str
    class_name: Optional[str] = None
    parent_whatsapp: Optional[str] = None
    telegram_chat_id: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)
