"""The check-in state machine.

One instance drives one session, from the permission gate to a stored
attendance record::

    awaiting_permissions -> choosing_method -> scanning_id -> confirming_id
        -> capturing_selfie -> acquiring_location -> ready_to_submit -> completed

Manual entry jumps from ``choosing_method`` straight to ``capturing_selfie``.
Device, verifier and store failures never leave the machine: they are kept
as an inline :class:`CheckInError` and the operator retries or takes the
manual path. Calling an operation from a step that does not accept it is a
client bug and raises :class:`InvalidTransitionError`.
"""
from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Optional, Union

from ..attendance.lateness import evaluate_lateness
from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core import constants
from ..core.enums import CheckInErrorKind, CheckInStep, IdentitySource
from ..core.exceptions import (
    CaptureError,
    DeviceError,
    InvalidTransitionError,
    PersistenceError,
    SessionBusyError,
    ValidationError,
    VerifierError,
)
from ..devices.images import decode_image
from ..devices.ports import GeolocationOptions, Geolocator, MediaDevices
from ..geo.distance import evaluate_geofence
from ..geo.model import Coordinate
from ..notifications.dispatcher import NotificationDispatcher
from ..notifications.telegram import TelegramAddress
from ..notifications.template import render_message
from ..settings.model import AppSettings
from ..settings.service import SettingsService
from ..students.repository import StudentRepository
from ..verification.fallback.base import SelfieFallbackStrategy
from ..verification.fallback.fail_open_strategy import FailOpenStrategy
from ..verification.model import ExtractedIdentity
from ..verification.verifier import IdentityVerifier
from .model import CheckInError, CheckInSessionData, CheckInSummary

logger = logging.getLogger(__name__)

ImageInput = Union[str, bytes, None]


class CheckInStateMachine:
    def __init__(
        self,
        *,
        verifier: IdentityVerifier,
        records: AttendanceRepository,
        students: StudentRepository,
        settings: SettingsService,
        notifier: NotificationDispatcher,
        fallback: Optional[SelfieFallbackStrategy] = None,
        clock: Callable[[], datetime] = now_local,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
        geolocation_options: Optional[GeolocationOptions] = None,
        session_id: Optional[str] = None,
    ):
        self._verifier = verifier
        self._records = records
        self._students = students
        self._settings = settings
        self._notifier = notifier
        self._fallback = fallback or FailOpenStrategy()
        self._clock = clock
        self._id_factory = id_factory
        self._geo_options = geolocation_options or GeolocationOptions()

        self.session_id = session_id or uuid.uuid4().hex
        self._lock = threading.Lock()
        self._step = CheckInStep.AWAITING_PERMISSIONS
        self._processing = False
        self._error: Optional[CheckInError] = None
        self._data = CheckInSessionData()
        self._summary: Optional[CheckInSummary] = None

    # --- read side -----------------------------------------------------

    @property
    def step(self) -> CheckInStep:
        return self._step

    @property
    def processing(self) -> bool:
        return self._processing

    @property
    def error(self) -> Optional[CheckInError]:
        return self._error

    @property
    def data(self) -> CheckInSessionData:
        return self._data

    @property
    def summary(self) -> Optional[CheckInSummary]:
        return self._summary

    @property
    def geolocation_options(self) -> GeolocationOptions:
        return self._geo_options

    def snapshot(self) -> dict:
        d = self._data
        return {
            "session_id": self.session_id,
            "step": self._step.value,
            "finished": self._step.is_terminal,
            "processing": self._processing,
            "error": self._error.to_dict() if self._error else None,
            "identity": d.identity.to_dict() if d.identity else None,
            "identity_source": d.identity_source.value if d.identity_source else None,
            "selfie_captured": d.selfie_image is not None,
            "verdict": d.verdict.to_dict() if d.verdict else None,
            "location": d.location.to_dict() if d.location else None,
            "can_submit": self._step == CheckInStep.READY_TO_SUBMIT and d.location is not None,
            "summary": self._summary.to_dict() if self._summary else None,
            "geolocation_options": self._geo_options.to_dict(),
        }

    # --- transitions ---------------------------------------------------

    def request_permissions(self, media: MediaDevices, geolocator: Geolocator) -> CheckInStep:
        """Camera + microphone + one location fix, as a single gate."""
        with self._transition(CheckInStep.AWAITING_PERMISSIONS):
            try:
                stream = media.open_stream(video=True, audio=True)
                # Only the permission prompt was needed.
                stream.stop()
                gate_fix = geolocator.current_position(self._geo_options)
            except DeviceError as e:
                logger.info("Check-in %s: permissions not granted (%s)", self.session_id, e)
                self._set_error(CheckInErrorKind.PERMISSION, constants.MSG_PERMISSIONS_DENIED)
                return self._step

            self._data.permissions_granted_at = self._clock()
            self._data.permission_fix_at = gate_fix.captured_at
            self._step = CheckInStep.CHOOSING_METHOD
            return self._step

    def choose_scan(self) -> CheckInStep:
        with self._transition(CheckInStep.CHOOSING_METHOD):
            self._step = CheckInStep.SCANNING_ID
            return self._step

    def submit_manual_identity(self, student_id: str, student_name: str) -> CheckInStep:
        """Manual entry skips extraction and confirmation."""
        with self._transition(CheckInStep.CHOOSING_METHOD):
            try:
                identity = ExtractedIdentity(
                    student_id=require_non_empty(student_id, "Student ID"),
                    student_name=require_non_empty(student_name, "Student name"),
                    valid=True,
                )
            except ValidationError as e:
                self._set_error(CheckInErrorKind.VALIDATION, str(e))
                return self._step

            self._data.identity = identity
            self._data.identity_source = IdentitySource.MANUAL
            self._step = CheckInStep.CAPTURING_SELFIE
            return self._step

    def capture_id_card(self, image: ImageInput) -> CheckInStep:
        with self._transition(CheckInStep.SCANNING_ID):
            try:
                raw = decode_image(image)
            except CaptureError as e:
                logger.info("Check-in %s: ID capture failed (%s)", self.session_id, e)
                self._set_error(CheckInErrorKind.CAPTURE, constants.MSG_NO_FRAME)
                return self._step

            try:
                identity = self._verifier.extract_identity(raw)
            except VerifierError as e:
                logger.warning("Check-in %s: ID extraction failed: %s", self.session_id, e)
                self._set_error(CheckInErrorKind.SERVICE, constants.MSG_ID_SERVICE_ERROR)
                return self._step

            if not identity.valid:
                self._set_error(CheckInErrorKind.INVALID_ID, constants.MSG_ID_UNREADABLE)
                return self._step

            self._data.identity = identity
            self._data.identity_source = IdentitySource.SCAN
            self._step = CheckInStep.CONFIRMING_ID
            return self._step

    def back_to_method(self) -> CheckInStep:
        with self._transition(CheckInStep.SCANNING_ID):
            self._step = CheckInStep.CHOOSING_METHOD
            return self._step

    def confirm_identity(self) -> CheckInStep:
        with self._transition(CheckInStep.CONFIRMING_ID):
            self._step = CheckInStep.CAPTURING_SELFIE
            return self._step

    def reject_identity(self) -> CheckInStep:
        with self._transition(CheckInStep.CONFIRMING_ID):
            self._data.identity = None
            self._data.identity_source = None
            self._step = CheckInStep.SCANNING_ID
            return self._step

    def capture_selfie(self, image: ImageInput) -> CheckInStep:
        """Verify the selfie; a verifier failure falls back, it never blocks."""
        with self._transition(CheckInStep.CAPTURING_SELFIE):
            try:
                raw = decode_image(image)
            except CaptureError as e:
                logger.info("Check-in %s: selfie capture failed (%s)", self.session_id, e)
                self._set_error(CheckInErrorKind.CAPTURE, constants.MSG_NO_FRAME)
                return self._step

            try:
                verdict = self._verifier.verify_selfie(raw)
            except VerifierError as e:
                verdict = self._fallback.verdict_for_failure(e)
                logger.warning(
                    "Check-in %s: selfie verification unavailable (%s); using %s",
                    self.session_id,
                    e,
                    verdict.status.value,
                )

            self._data.selfie_image = raw
            self._data.verdict = verdict
            self._step = CheckInStep.ACQUIRING_LOCATION
            return self._step

    def acquire_location(self, geolocator: Geolocator) -> CheckInStep:
        """Single fresh fix; may be repeated from ready_to_submit to refresh it."""
        with self._transition(CheckInStep.ACQUIRING_LOCATION, CheckInStep.READY_TO_SUBMIT):
            try:
                location = geolocator.current_position(self._geo_options)
            except DeviceError as e:
                logger.info("Check-in %s: location failed (%s)", self.session_id, e)
                self._set_error(CheckInErrorKind.GEOLOCATION, constants.MSG_LOCATION_FAILED)
                return self._step

            if not self._is_fresh(location):
                logger.info("Check-in %s: location fix predates the permission gate", self.session_id)
                self._set_error(CheckInErrorKind.GEOLOCATION, constants.MSG_LOCATION_FAILED)
                return self._step

            self._data.location = location
            self._step = CheckInStep.READY_TO_SUBMIT
            return self._step

    def submit(self) -> CheckInStep:
        """Persist the record exactly once, then notify best-effort."""
        with self._transition(CheckInStep.READY_TO_SUBMIT):
            d = self._data
            if d.identity is None or d.selfie_image is None or d.verdict is None or d.location is None:
                raise InvalidTransitionError("Check-in data is incomplete")

            now = self._clock()
            record_id = self._id_factory()
            try:
                settings = self._settings.get()
                lateness = evaluate_lateness(now, settings.schedule.start_time)
                geofence = evaluate_geofence(d.location, settings.geofence)
                record = AttendanceRecord(
                    id=record_id,
                    student_id=d.identity.student_id,
                    student_name=d.identity.student_name,
                    check_in_time=now,
                    location=d.location,
                    selfie_image=d.selfie_image,
                    verification_status=d.verdict.status,
                    verification_note=d.verdict.note or None,
                )
                self._records.append(record)
            except PersistenceError:
                logger.exception("Check-in %s: record %s could not be saved", self.session_id, record_id)
                self._set_error(CheckInErrorKind.PERSISTENCE, constants.MSG_SAVE_FAILED)
                self._step = CheckInStep.FAILED
                return self._step

            self._summary = CheckInSummary(
                record_id=record.id,
                student_id=record.student_id,
                student_name=record.student_name,
                check_in_time=now,
                is_late=lateness.is_late,
                minutes_late=lateness.minutes_late,
                distance_meters=geofence.distance_meters,
                in_range=geofence.in_range,
                verification_status=record.verification_status,
            )
            self._step = CheckInStep.COMPLETED
            logger.info(
                "Check-in %s completed: student=%s late=%s distance=%.0fm status=%s",
                self.session_id,
                record.student_id,
                lateness.is_late,
                geofence.distance_meters,
                record.verification_status.value,
            )

            self._notify(record, settings)
            return self._step

    def abort(self) -> CheckInStep:
        """Leave before any data is collected; nothing is persisted."""
        with self._transition(CheckInStep.AWAITING_PERMISSIONS, CheckInStep.CHOOSING_METHOD):
            self._data = CheckInSessionData()
            self._step = CheckInStep.ABANDONED
            logger.info("Check-in %s abandoned", self.session_id)
            return self._step

    # --- helpers -------------------------------------------------------

    @contextmanager
    def _transition(self, *allowed: CheckInStep):
        with self._lock:
            if self._processing:
                raise SessionBusyError("Another check-in action is still processing")
            if self._step not in allowed:
                raise InvalidTransitionError(f"Action not allowed while {self._step.value}")
            self._processing = True
            self._error = None
        try:
            yield
        finally:
            self._processing = False

    def _is_fresh(self, location: Coordinate) -> bool:
        # Must be a new fix taken after the permission gate, not the gate's own.
        d = self._data
        if d.permissions_granted_at is not None and location.captured_at < d.permissions_granted_at:
            return False
        if d.permission_fix_at is not None and location.captured_at <= d.permission_fix_at:
            return False
        return True

    def _set_error(self, kind: CheckInErrorKind, message: str) -> None:
        self._error = CheckInError(kind=kind, message=message)

    def _notify(self, record: AttendanceRecord, settings: AppSettings) -> None:
        if not settings.telegram_bot_token:
            return
        try:
            student = self._students.get_by_id(record.student_id)
        except PersistenceError:
            logger.exception("Notification skipped: student %s lookup failed", record.student_id)
            return
        if not student or not student.telegram_chat_id:
            return

        message = render_message(
            settings.notification_template,
            student_name=record.student_name,
            school_name=settings.school_name,
            date=record.check_in_time.strftime("%Y-%m-%d"),
            time=record.check_in_time.strftime("%H:%M:%S"),
        )
        self._notifier.dispatch(
            TelegramAddress(bot_token=settings.telegram_bot_token, chat_id=student.telegram_chat_id),
            message,
        )
