from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from ..core.exceptions import AuthenticationError


class AdminAuthService:
    """Static password gate for the admin dashboard."""

    def __init__(self, password_hash: str | None):
        self._password_hash = password_hash

    @classmethod
    def from_plain_password(cls, password: str | None) -> "AdminAuthService":
        # An empty password keeps the dashboard closed.
        return cls(generate_password_hash(password) if password else None)

    def authenticate(self, password: str) -> None:
        if not self._password_hash or not password:
            raise AuthenticationError("Invalid password")
        if not check_password_hash(self._password_hash, password):
            raise AuthenticationError("Invalid password")
