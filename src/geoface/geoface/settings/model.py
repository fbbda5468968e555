from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..common.datetime_utils import parse_hhmm
from ..common.validators import require_non_empty
from ..core import constants
from ..core.exceptions import ValidationError
from ..geo.model import GeofenceConfig


@dataclass(frozen=True)
class ScheduleWindow:
    """School day; ``start_time`` is the lateness cutoff."""

    start_time: str
    end_time: str

    @classmethod
    def create(cls, *, start_time: str, end_time: str) -> "ScheduleWindow":
        start = parse_hhmm(start_time)
        end = parse_hhmm(end_time)
        if end <= start:
            raise ValidationError("End time must be after start time")
        return cls(start_time=start.strftime("%H:%M"), end_time=end.strftime("%H:%M"))


@dataclass(frozen=True)
class AppSettings:
    school_name: str
    geofence: GeofenceConfig
    schedule: ScheduleWindow
    notification_template: str
    telegram_bot_token: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "school_name": self.school_name,
            "school_lat": self.geofence.origin_lat,
            "school_lng": self.geofence.origin_lng,
            "radius_meters": self.geofence.radius_meters,
            "start_time": self.schedule.start_time,
            "end_time": self.schedule.end_time,
            "notification_template": self.notification_template,
            "telegram_bot_token": self.telegram_bot_token or "",
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        token = (data.get("telegram_bot_token") or "").strip()
        return cls(
            school_name=require_non_empty(data.get("school_name"), "School name"),
            geofence=GeofenceConfig.create(
                origin_lat=data.get("school_lat"),
                origin_lng=data.get("school_lng"),
                radius_meters=data.get("radius_meters"),
            ),
            schedule=ScheduleWindow.create(
                start_time=data.get("start_time", ""),
                end_time=data.get("end_time", ""),
            ),
            notification_template=require_non_empty(data.get("notification_template"), "Notification template"),
            telegram_bot_token=token or None,
        )


def default_settings(*, telegram_bot_token: Optional[str] = None) -> AppSettings:
    return AppSettings(
        school_name=constants.DEFAULT_SCHOOL_NAME,
        geofence=GeofenceConfig(
            origin_lat=constants.DEFAULT_SCHOOL_LAT,
            origin_lng=constants.DEFAULT_SCHOOL_LNG,
            radius_meters=constants.DEFAULT_RADIUS_METERS,
        ),
        schedule=ScheduleWindow(start_time=constants.DEFAULT_START_TIME, end_time=constants.DEFAULT_END_TIME),
        notification_template=constants.DEFAULT_NOTIFICATION_TEMPLATE,
        telegram_bot_token=telegram_bot_token or None,
    )
