from __future__ import annotations

import logging

from .model import AppSettings
from .repository import SettingsRepository

logger = logging.getLogger(__name__)

SETTINGS_KEY = "geoface_settings"


class SettingsService:
    """Current school settings, falling back to defaults until an admin saves some."""

    def __init__(self, repo: SettingsRepository, *, defaults: AppSettings):
        self._repo = repo
        self._defaults = defaults

    def get(self) -> AppSettings:
        data = self._repo.load(SETTINGS_KEY)
        if not data:
            return self._defaults
        return AppSettings.from_dict({**self._defaults.to_dict(), **data})

    def save(self, data: dict) -> AppSettings:
        settings = AppSettings.from_dict({**self.get().to_dict(), **data})
        self._repo.store(SETTINGS_KEY, settings.to_dict())
        logger.info("School settings updated (radius=%sm, start=%s)", settings.geofence.radius_meters, settings.schedule.start_time)
        return settings
