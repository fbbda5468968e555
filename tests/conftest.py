from __future__ import annotations

import base64
import io
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

import pytest
from PIL import Image

from geoface.attendance.model import AttendanceRecord
from geoface.checkin.machine import CheckInStateMachine
from geoface.core.enums import VerificationStatus
from geoface.core.exceptions import GeolocationError, PermissionDeniedError, PersistenceError
from geoface.geo.model import Coordinate
from geoface.notifications.dispatcher import NotificationDispatcher
from geoface.settings.model import default_settings
from geoface.settings.service import SettingsService
from geoface.students.model import Student
from geoface.verification.model import ExtractedIdentity, SelfieVerdict

# Default school origin (Monas, Jakarta).
SCHOOL_LAT = -6.175392
SCHOOL_LNG = 106.827153


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class InMemoryAttendance:
    def __init__(self):
        self._by_id: dict[str, AttendanceRecord] = {}
        self.fail_on_append = False
        self.status_writes = 0

    def append(self, record: AttendanceRecord) -> None:
        if self.fail_on_append:
            raise PersistenceError("disk full")
        self._by_id[record.id] = record

    def get_by_id(self, record_id: str) -> Optional[AttendanceRecord]:
        return self._by_id.get(record_id)

    def update_status(self, record_id: str, status: VerificationStatus, note=None) -> bool:
        rec = self._by_id.get(record_id)
        if not rec:
            return False
        self.status_writes += 1
        self._by_id[record_id] = rec.with_review(status, note)
        return True

    def list_all(self):
        items = list(self._by_id.values())
        items.sort(key=lambda r: r.check_in_time, reverse=True)
        return items

    def clear(self) -> None:
        self._by_id.clear()


class InMemoryStudents:
    def __init__(self, students=()):
        self._by_id = {s.student_id: s for s in students}

    def get_by_id(self, student_id: str) -> Optional[Student]:
        return self._by_id.get(student_id)

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda s: s.student_id)

    def save(self, student: Student) -> None:
        self._by_id[student.student_id] = student


class InMemorySettingsRepo:
    def __init__(self):
        self._docs: dict[str, dict] = {}

    def load(self, key: str):
        return self._docs.get(key)

    def store(self, key: str, value: dict) -> None:
        self._docs[key] = dict(value)


class FakeVerifier:
    def __init__(self):
        self.identity: ExtractedIdentity | Exception = ExtractedIdentity("STU001", "Jane Doe", True)
        self.verdict: SelfieVerdict | Exception = SelfieVerdict(VerificationStatus.VERIFIED, "Face match confirmed")
        self.calls: list[str] = []

    def extract_identity(self, image: bytes) -> ExtractedIdentity:
        self.calls.append("extract_identity")
        if isinstance(self.identity, Exception):
            raise self.identity
        return self.identity

    def verify_selfie(self, image: bytes) -> SelfieVerdict:
        self.calls.append("verify_selfie")
        if isinstance(self.verdict, Exception):
            raise self.verdict
        return self.verdict


class FakeStream:
    def __init__(self):
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


class FakeMedia:
    def __init__(self, granted: bool = True):
        self.granted = granted
        self.streams: list[FakeStream] = []

    def open_stream(self, *, video: bool, audio: bool):
        if not self.granted:
            raise PermissionDeniedError("NotAllowedError")
        stream = FakeStream()
        self.streams.append(stream)
        return stream


class FakeGeolocator:
    """Each call takes one second and returns a fix stamped with the clock."""

    def __init__(self, coordinate: Optional[Coordinate] = None, error: Optional[Exception] = None, *, clock=None):
        self.coordinate = coordinate
        self.error = error
        self.clock = clock
        self.options_seen = []

    def current_position(self, options):
        self.options_seen.append(options)
        if self.error:
            raise self.error
        if self.coordinate is None:
            raise GeolocationError("Position unavailable")
        if self.clock is None:
            return self.coordinate
        self.clock.advance(seconds=1)
        return replace(self.coordinate, captured_at=self.clock.now)


class InlineExecutor:
    def submit(self, fn, *args, **kwargs):
        fn(*args, **kwargs)


class RecordingSink:
    def __init__(self):
        self.sent = []
        self.error: Optional[Exception] = None

    def send(self, address, text: str) -> None:
        if self.error:
            raise self.error
        self.sent.append((address, text))


@pytest.fixture
def fixed_now() -> datetime:
    # Monday, before the default 07:00 start.
    return datetime(2026, 2, 2, 6, 45, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def records() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def students() -> InMemoryStudents:
    return InMemoryStudents(
        [
            Student("STU001", "Jane Doe", class_name="12-IPA-1", telegram_chat_id="12345"),
            Student("STU002", "Siti Aminah", class_name="12-IPA-1"),
            Student("STU003", "Budi Hartono", class_name="12-IPS-2"),
        ]
    )


@pytest.fixture
def settings_repo() -> InMemorySettingsRepo:
    return InMemorySettingsRepo()


@pytest.fixture
def settings_service(settings_repo) -> SettingsService:
    return SettingsService(settings_repo, defaults=default_settings(telegram_bot_token="bot-token"))


@pytest.fixture
def verifier() -> FakeVerifier:
    return FakeVerifier()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def notifier(sink) -> NotificationDispatcher:
    return NotificationDispatcher(sink, executor=InlineExecutor())


@pytest.fixture
def make_machine(verifier, records, students, settings_service, notifier, clock):
    def _make(**overrides) -> CheckInStateMachine:
        kwargs = dict(
            verifier=verifier,
            records=records,
            students=students,
            settings=settings_service,
            notifier=notifier,
            clock=clock,
        )
        kwargs.update(overrides)
        return CheckInStateMachine(**kwargs)

    return _make


@pytest.fixture
def jpeg_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), (200, 120, 40)).save(buf, format="JPEG")
    return buf.getvalue()


@pytest.fixture
def jpeg_data_url(jpeg_bytes) -> str:
    return "data:image/jpeg;base64," + base64.b64encode(jpeg_bytes).decode("ascii")


@pytest.fixture
def school_fix(fixed_now) -> Coordinate:
    return Coordinate(latitude=SCHOOL_LAT, longitude=SCHOOL_LNG, accuracy=8.0, captured_at=fixed_now)


@pytest.fixture
def media() -> FakeMedia:
    return FakeMedia()


@pytest.fixture
def geolocator(school_fix, clock) -> FakeGeolocator:
    return FakeGeolocator(school_fix, clock=clock)


@pytest.fixture
def make_record(fixed_now, jpeg_bytes):
    def _make(
        record_id: str = "rec_1",
        *,
        student_id: str = "STU001",
        student_name: str = "Jane Doe",
        check_in_time: Optional[datetime] = None,
        latitude: float = SCHOOL_LAT,
        longitude: float = SCHOOL_LNG,
        status: VerificationStatus = VerificationStatus.PENDING,
        note: Optional[str] = None,
    ) -> AttendanceRecord:
        t = check_in_time or fixed_now
        return AttendanceRecord(
            id=record_id,
            student_id=student_id,
            student_name=student_name,
            check_in_time=t,
            location=Coordinate(latitude=latitude, longitude=longitude, accuracy=10.0, captured_at=t),
            selfie_image=jpeg_bytes,
            verification_status=status,
            verification_note=note,
        )

    return _make


@pytest.fixture
def make_geolocator():
    def _make(coordinate: Optional[Coordinate] = None, **kwargs) -> FakeGeolocator:
        return FakeGeolocator(coordinate, **kwargs)

    return _make
