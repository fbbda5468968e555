from datetime import datetime

import pytest

from geoface.core.constants import MSG_PERMISSIONS_DENIED, SELFIE_PENDING_NOTE, SELFIE_UNAVAILABLE_NOTE
from geoface.core.enums import CheckInErrorKind, CheckInStep, IdentitySource, VerificationStatus
from geoface.core.exceptions import (
    GeolocationError,
    InvalidTransitionError,
    NotificationError,
    SessionBusyError,
    VerifierResponseError,
    VerifierUnavailableError,
)
from geoface.geo.model import Coordinate
from geoface.settings.model import default_settings
from geoface.settings.service import SettingsService
from geoface.verification.fallback.pending_review_strategy import PendingReviewStrategy
from geoface.verification.model import ExtractedIdentity, SelfieVerdict


def _manual_until_selfie(machine, media, geolocator, student_id="STU001", name="Jane Doe"):
    assert machine.request_permissions(media, geolocator) == CheckInStep.CHOOSING_METHOD
    assert machine.submit_manual_identity(student_id, name) == CheckInStep.CAPTURING_SELFIE


def _finish(machine, geolocator, image):
    assert machine.capture_selfie(image) == CheckInStep.ACQUIRING_LOCATION
    assert machine.acquire_location(geolocator) == CheckInStep.READY_TO_SUBMIT
    return machine.submit()


def test_scenario_manual_entry_on_time(make_machine, media, geolocator, jpeg_data_url, records):
    machine = make_machine(id_factory=lambda: "rec_a")
    _manual_until_selfie(machine, media, geolocator)

    assert _finish(machine, geolocator, jpeg_data_url) == CheckInStep.COMPLETED

    stored = records.get_by_id("rec_a")
    assert stored.verification_status == VerificationStatus.VERIFIED
    assert stored.student_id == "STU001"
    assert stored.student_name == "Jane Doe"
    assert machine.data.identity_source == IdentitySource.MANUAL

    summary = machine.summary
    assert summary.is_late is False
    assert summary.minutes_late == 0
    assert summary.in_range is True
    assert machine.error is None


def test_scenario_ten_minutes_late(make_machine, media, geolocator, jpeg_data_url, clock):
    machine = make_machine()
    _manual_until_selfie(machine, media, geolocator)
    clock.now = datetime(2026, 2, 2, 7, 10, 0)

    _finish(machine, geolocator, jpeg_data_url)

    assert machine.summary.is_late is True
    assert machine.summary.minutes_late == 10
    assert machine.summary.to_dict()["time"] == "07:10"


def test_scenario_invalid_card_then_manual(make_machine, media, geolocator, jpeg_data_url, verifier, records):
    verifier.identity = ExtractedIdentity("", "", False)
    machine = make_machine()
    machine.request_permissions(media, geolocator)
    assert machine.choose_scan() == CheckInStep.SCANNING_ID

    assert machine.capture_id_card(jpeg_data_url) == CheckInStep.SCANNING_ID
    assert machine.error.kind == CheckInErrorKind.INVALID_ID

    assert machine.back_to_method() == CheckInStep.CHOOSING_METHOD
    assert machine.error is None
    assert machine.submit_manual_identity("STU001", "Jane Doe") == CheckInStep.CAPTURING_SELFIE

    assert _finish(machine, geolocator, jpeg_data_url) == CheckInStep.COMPLETED
    assert len(records.list_all()) == 1


def test_scenario_selfie_verifier_down_fails_open(make_machine, media, geolocator, jpeg_data_url, verifier, records):
    verifier.verdict = VerifierUnavailableError("timeout")
    machine = make_machine(id_factory=lambda: "rec_d")
    _manual_until_selfie(machine, media, geolocator)

    _finish(machine, geolocator, jpeg_data_url)

    stored = records.get_by_id("rec_d")
    assert stored.verification_status == VerificationStatus.VERIFIED
    assert stored.verification_note == SELFIE_UNAVAILABLE_NOTE


def test_selfie_malformed_response_uses_pending_review_policy(make_machine, media, geolocator, jpeg_data_url, verifier, records):
    verifier.verdict = VerifierResponseError("garbage")
    machine = make_machine(fallback=PendingReviewStrategy(), id_factory=lambda: "rec_p")
    _manual_until_selfie(machine, media, geolocator)

    _finish(machine, geolocator, jpeg_data_url)

    stored = records.get_by_id("rec_p")
    assert stored.verification_status == VerificationStatus.PENDING
    assert stored.verification_note == SELFIE_PENDING_NOTE


def test_rejected_selfie_is_stored_as_rejected(make_machine, media, geolocator, jpeg_data_url, verifier, records):
    verifier.verdict = SelfieVerdict(VerificationStatus.REJECTED, "Not a live face")
    machine = make_machine(id_factory=lambda: "rec_r")
    _manual_until_selfie(machine, media, geolocator)

    _finish(machine, geolocator, jpeg_data_url)

    assert records.get_by_id("rec_r").verification_status == VerificationStatus.REJECTED


def test_scan_confirm_path(make_machine, media, geolocator, jpeg_data_url, verifier):
    verifier.identity = ExtractedIdentity("STU002", "Siti Aminah", True)
    machine = make_machine()
    machine.request_permissions(media, geolocator)
    machine.choose_scan()

    assert machine.capture_id_card(jpeg_data_url) == CheckInStep.CONFIRMING_ID
    assert machine.snapshot()["identity"]["student_id"] == "STU002"
    assert machine.confirm_identity() == CheckInStep.CAPTURING_SELFIE
    assert machine.data.identity_source == IdentitySource.SCAN


def test_reject_identity_clears_it(make_machine, media, geolocator, jpeg_data_url):
    machine = make_machine()
    machine.request_permissions(media, geolocator)
    machine.choose_scan()
    machine.capture_id_card(jpeg_data_url)

    assert machine.reject_identity() == CheckInStep.SCANNING_ID
    assert machine.data.identity is None


def test_id_service_error_keeps_scanning(make_machine, media, geolocator, jpeg_data_url, verifier):
    verifier.identity = VerifierUnavailableError("HTTP 500")
    machine = make_machine()
    machine.request_permissions(media, geolocator)
    machine.choose_scan()

    assert machine.capture_id_card(jpeg_data_url) == CheckInStep.SCANNING_ID
    assert machine.error.kind == CheckInErrorKind.SERVICE


def test_undecodable_frame_is_capture_error(make_machine, media, geolocator, verifier):
    machine = make_machine()
    machine.request_permissions(media, geolocator)
    machine.choose_scan()

    assert machine.capture_id_card("data:image/jpeg;base64,") == CheckInStep.SCANNING_ID
    assert machine.error.kind == CheckInErrorKind.CAPTURE
    assert verifier.calls == []


def test_undecodable_selfie_stays(make_machine, media, geolocator):
    machine = make_machine()
    _manual_until_selfie(machine, media, geolocator)

    assert machine.capture_selfie(b"not an image") == CheckInStep.CAPTURING_SELFIE
    assert machine.error.kind == CheckInErrorKind.CAPTURE


def test_permission_denied_stays_with_error(make_machine, media, geolocator):
    media.granted = False
    machine = make_machine()

    assert machine.request_permissions(media, geolocator) == CheckInStep.AWAITING_PERMISSIONS
    assert machine.error.kind == CheckInErrorKind.PERMISSION
    assert machine.error.message == MSG_PERMISSIONS_DENIED


def test_permission_needs_location_too(make_machine, media, geolocator):
    geolocator.error = GeolocationError("User denied Geolocation")
    machine = make_machine()

    assert machine.request_permissions(media, geolocator) == CheckInStep.AWAITING_PERMISSIONS
    assert machine.error.kind == CheckInErrorKind.PERMISSION


def test_permission_probe_stops_the_stream(make_machine, media, geolocator):
    make_machine().request_permissions(media, geolocator)
    assert media.streams and all(s.stopped for s in media.streams)


def test_location_uses_fresh_high_accuracy_fix(make_machine, media, geolocator, jpeg_data_url):
    machine = make_machine()
    _manual_until_selfie(machine, media, geolocator)
    machine.capture_selfie(jpeg_data_url)
    machine.acquire_location(geolocator)

    options = geolocator.options_seen[-1]
    assert options.enable_high_accuracy is True
    assert options.timeout_seconds == 10
    assert options.maximum_age_seconds == 0


def test_location_failure_keeps_step(make_machine, media, geolocator, jpeg_data_url):
    machine = make_machine()
    _manual_until_selfie(machine, media, geolocator)
    machine.capture_selfie(jpeg_data_url)
    geolocator.error = GeolocationError("Timeout expired")

    assert machine.acquire_location(geolocator) == CheckInStep.ACQUIRING_LOCATION
    assert machine.error.kind == CheckInErrorKind.GEOLOCATION
    assert machine.snapshot()["can_submit"] is False


def test_location_taken_before_permission_grant_is_refused(
    make_machine, make_geolocator, media, geolocator, jpeg_data_url, fixed_now, records
):
    machine = make_machine()
    _manual_until_selfie(machine, media, geolocator)
    machine.capture_selfie(jpeg_data_url)
    granted_at = machine.data.permissions_granted_at

    stale = make_geolocator(Coordinate(latitude=-6.175392, longitude=106.827153, accuracy=5.0, captured_at=fixed_now))
    assert stale.current_position(machine.geolocation_options).captured_at < granted_at

    assert machine.acquire_location(stale) == CheckInStep.ACQUIRING_LOCATION
    assert machine.error.kind == CheckInErrorKind.GEOLOCATION
    with pytest.raises(InvalidTransitionError):
        machine.submit()
    assert records.list_all() == []


def test_permission_gate_fix_cannot_be_replayed(make_machine, make_geolocator, media, school_fix, jpeg_data_url):
    # Same fix for the gate and the location step.
    replaying = make_geolocator(school_fix)
    machine = make_machine()
    _manual_until_selfie(machine, media, replaying)
    machine.capture_selfie(jpeg_data_url)

    assert machine.acquire_location(replaying) == CheckInStep.ACQUIRING_LOCATION
    assert machine.error.kind == CheckInErrorKind.GEOLOCATION
    assert machine.data.location is None


def test_location_can_be_refreshed(make_machine, media, geolocator, jpeg_data_url, fixed_now):
    machine = make_machine()
    _manual_until_selfie(machine, media, geolocator)
    machine.capture_selfie(jpeg_data_url)
    machine.acquire_location(geolocator)

    geolocator.coordinate = Coordinate(latitude=-6.18, longitude=106.83, accuracy=4.0, captured_at=fixed_now)
    assert machine.acquire_location(geolocator) == CheckInStep.READY_TO_SUBMIT
    assert machine.data.location.latitude == -6.18


def test_out_of_range_is_still_stored(make_machine, media, geolocator, jpeg_data_url, records, fixed_now):
    machine = make_machine()
    _manual_until_selfie(machine, media, geolocator)
    machine.capture_selfie(jpeg_data_url)
    geolocator.coordinate = Coordinate(latitude=-6.2, longitude=106.85, accuracy=4.0, captured_at=fixed_now)
    machine.acquire_location(geolocator)

    assert machine.submit() == CheckInStep.COMPLETED
    assert machine.summary.in_range is False
    assert machine.summary.distance_meters > 200
    assert len(records.list_all()) == 1


def test_manual_entry_requires_both_fields(make_machine, media, geolocator):
    machine = make_machine()
    machine.request_permissions(media, geolocator)

    assert machine.submit_manual_identity("  ", "Jane") == CheckInStep.CHOOSING_METHOD
    assert machine.error.kind == CheckInErrorKind.VALIDATION


def test_out_of_order_calls_raise(make_machine, jpeg_data_url):
    machine = make_machine()
    with pytest.raises(InvalidTransitionError):
        machine.choose_scan()
    with pytest.raises(InvalidTransitionError):
        machine.capture_selfie(jpeg_data_url)
    with pytest.raises(InvalidTransitionError):
        machine.submit()


def test_second_call_while_processing_is_busy(make_machine, media, geolocator, jpeg_data_url):
    seen = {}

    class ReentrantVerifier:
        def extract_identity(self, image):
            raise AssertionError("not used")

        def verify_selfie(self, image):
            seen["processing"] = machine.processing
            with pytest.raises(SessionBusyError):
                machine.capture_selfie(jpeg_data_url)
            return SelfieVerdict(VerificationStatus.VERIFIED, "ok")

    machine = make_machine(verifier=ReentrantVerifier())
    _manual_until_selfie(machine, media, geolocator)

    assert machine.capture_selfie(jpeg_data_url) == CheckInStep.ACQUIRING_LOCATION
    assert seen["processing"] is True
    assert machine.processing is False


def test_abort_persists_nothing(make_machine, media, geolocator, records):
    machine = make_machine()
    machine.request_permissions(media, geolocator)

    assert machine.abort() == CheckInStep.ABANDONED
    assert machine.data.identity is None
    assert records.list_all() == []
    with pytest.raises(InvalidTransitionError):
        machine.choose_scan()


def test_abort_not_allowed_after_identity(make_machine, media, geolocator):
    machine = make_machine()
    _manual_until_selfie(machine, media, geolocator)
    with pytest.raises(InvalidTransitionError):
        machine.abort()


def test_store_failure_moves_to_failed(make_machine, media, geolocator, jpeg_data_url, records, sink):
    records.fail_on_append = True
    machine = make_machine()
    _manual_until_selfie(machine, media, geolocator)

    assert _finish(machine, geolocator, jpeg_data_url) == CheckInStep.FAILED
    assert machine.error.kind == CheckInErrorKind.PERSISTENCE
    assert machine.summary is None
    assert sink.sent == []
    with pytest.raises(InvalidTransitionError):
        machine.submit()


def test_submit_notifies_registered_parent(make_machine, media, geolocator, jpeg_data_url, sink):
    machine = make_machine()
    _manual_until_selfie(machine, media, geolocator)
    _finish(machine, geolocator, jpeg_data_url)

    assert len(sink.sent) == 1
    address, text = sink.sent[0]
    assert address.chat_id == "12345"
    assert address.bot_token == "bot-token"
    assert "Jane Doe" in text
    assert "06:45:02" in text
    assert "2026-02-02" in text


def test_no_notification_without_chat_id(make_machine, media, geolocator, jpeg_data_url, sink):
    machine = make_machine()
    _manual_until_selfie(machine, media, geolocator, student_id="STU002", name="Siti Aminah")
    _finish(machine, geolocator, jpeg_data_url)
    assert sink.sent == []


def test_no_notification_without_bot_token(make_machine, media, geolocator, jpeg_data_url, sink, settings_repo):
    machine = make_machine(settings=SettingsService(settings_repo, defaults=default_settings()))
    _manual_until_selfie(machine, media, geolocator)
    _finish(machine, geolocator, jpeg_data_url)
    assert sink.sent == []


def test_notification_failure_does_not_block_completion(make_machine, media, geolocator, jpeg_data_url, sink, records):
    sink.error = NotificationError("chat not found")
    machine = make_machine()
    _manual_until_selfie(machine, media, geolocator)

    assert _finish(machine, geolocator, jpeg_data_url) == CheckInStep.COMPLETED
    assert machine.error is None
    assert len(records.list_all()) == 1


def test_snapshot_is_json_ready(make_machine, media, geolocator, jpeg_data_url):
    machine = make_machine(session_id="s1")
    _manual_until_selfie(machine, media, geolocator)
    machine.capture_selfie(jpeg_data_url)
    machine.acquire_location(geolocator)

    snap = machine.snapshot()
    assert snap["session_id"] == "s1"
    assert snap["step"] == "ready_to_submit"
    assert snap["finished"] is False
    assert snap["selfie_captured"] is True
    assert snap["verdict"]["status"] == "verified"
    assert snap["can_submit"] is True
    assert snap["geolocation_options"] == {"enableHighAccuracy": True, "timeout": 10000, "maximumAge": 0}


def test_oversized_selfie_is_capture_error(make_machine, media, geolocator, jpeg_data_url, monkeypatch):
    machine = make_machine()
    _manual_until_selfie(machine, media, geolocator)
    monkeypatch.setattr("PIL.Image.MAX_IMAGE_PIXELS", 10)

    assert machine.capture_selfie(jpeg_data_url) == CheckInStep.CAPTURING_SELFIE
    assert machine.error.kind == CheckInErrorKind.CAPTURE
