from __future__ import annotations

from typing import Optional, Protocol


class SettingsRepository(Protocol):
    """Key-value document store for admin-editable settings."""

    def load(self, key: str) -> Optional[dict]:
        raise NotImplementedError

    def store(self, key: str, value: dict) -> None:
        raise NotImplementedError
