from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from functools import partial
from typing import Callable

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .checkin.machine import CheckInStateMachine
from .checkin.service import CheckInService
from .common.datetime_utils import now_local
from .database.connection import DatabaseConnection, DBConfig
from .notifications.dispatcher import NotificationDispatcher
from .notifications.telegram import TelegramSink
from .review.auth import AdminAuthService
from .review.service import AdminReviewService
from .settings.model import default_settings
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.repository import SettingsRepository
from .settings.service import SettingsService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService
from .verification.fallback.factory import SelfieFallbackFactory
from .verification.gemini_verifier import GeminiVerifier
from .verification.verifier import IdentityVerifier


@dataclass(frozen=True)
class Container:
    attendance_repo: AttendanceRepository
    students_repo: StudentRepository
    settings_repo: SettingsRepository

    settings_service: SettingsService
    student_service: StudentService
    review_service: AdminReviewService
    checkin_service: CheckInService
    admin_auth: AdminAuthService
    notifier: NotificationDispatcher
    clock: Callable[[], datetime] = now_local


def assemble_container(
    *,
    attendance_repo: AttendanceRepository,
    students_repo: StudentRepository,
    settings_repo: SettingsRepository,
    verifier: IdentityVerifier,
    notifier: NotificationDispatcher,
    admin_password: str | None,
    fallback_policy: str = "fail_open",
    telegram_bot_token: str | None = None,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    settings_service = SettingsService(settings_repo, defaults=default_settings(telegram_bot_token=telegram_bot_token))
    fallback = SelfieFallbackFactory().for_policy(fallback_policy)

    machine_factory = partial(
        CheckInStateMachine,
        verifier=verifier,
        records=attendance_repo,
        students=students_repo,
        settings=settings_service,
        notifier=notifier,
        fallback=fallback,
        clock=clock,
    )

    return Container(
        attendance_repo=attendance_repo,
        students_repo=students_repo,
        settings_repo=settings_repo,
        settings_service=settings_service,
        student_service=StudentService(students_repo),
        review_service=AdminReviewService(attendance_repo, students_repo, settings_service),
        checkin_service=CheckInService(machine_factory),
        admin_auth=AdminAuthService.from_plain_password(admin_password),
        notifier=notifier,
        clock=clock,
    )


def build_container(settings) -> Container:
    """Production wiring from a settings module (see ``geoface.config``)."""
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(settings.DB_CONFIG))

    verifier = GeminiVerifier(
        api_key=getattr(settings, "GEMINI_API_KEY", ""),
        model=getattr(settings, "GEMINI_MODEL", "gemini-2.5-flash"),
        timeout_seconds=float(getattr(settings, "VERIFIER_TIMEOUT_SECONDS", 30)),
    )

    return assemble_container(
        attendance_repo=MySQLAttendanceRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        settings_repo=MySQLSettingsRepository(conn),
        verifier=verifier,
        notifier=NotificationDispatcher(TelegramSink()),
        admin_password=getattr(settings, "ADMIN_PASSWORD", ""),
        fallback_policy=getattr(settings, "SELFIE_FALLBACK_POLICY", "fail_open"),
        telegram_bot_token=getattr(settings, "TELEGRAM_BOT_TOKEN", ""),
    )
