from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.web import json_endpoint
from ..container import Container
from ..devices.client_reported import ClientReportedGeolocator, ClientReportedMedia
from .machine import CheckInStateMachine

SESSION_KEY = "checkin_id"


def register(app: Flask, container: Container) -> None:
    def _current() -> CheckInStateMachine:
        return container.checkin_service.get(session.get(SESSION_KEY, ""))

    def _payload() -> dict:
        return request.get_json(silent=True) or {}

    def _respond(machine: CheckInStateMachine):
        state = machine.snapshot()
        return jsonify({"success": state["error"] is None, "state": state}), 200

    @app.route("/api/checkin/start", methods=["POST"], endpoint="checkin_start")
    @json_endpoint
    def checkin_start():
        previous = session.get(SESSION_KEY)
        if previous:
            container.checkin_service.discard(previous)
        machine = container.checkin_service.start()
        session[SESSION_KEY] = machine.session_id
        return _respond(machine)

    @app.route("/api/checkin", methods=["GET"], endpoint="checkin_state")
    @json_endpoint
    def checkin_state():
        return _respond(_current())

    @app.route("/api/checkin/permissions", methods=["POST"], endpoint="checkin_permissions")
    @json_endpoint
    def checkin_permissions():
        data = _payload()
        machine = _current()
        machine.request_permissions(
            ClientReportedMedia.from_payload(data.get("media")),
            ClientReportedGeolocator(data.get("position"), clock=container.clock),
        )
        return _respond(machine)

    @app.route("/api/checkin/scan", methods=["POST"], endpoint="checkin_scan")
    @json_endpoint
    def checkin_scan():
        machine = _current()
        machine.choose_scan()
        return _respond(machine)

    @app.route("/api/checkin/manual", methods=["POST"], endpoint="checkin_manual")
    @json_endpoint
    def checkin_manual():
        data = _payload()
        machine = _current()
        machine.submit_manual_identity(data.get("student_id", ""), data.get("student_name", ""))
        return _respond(machine)

    @app.route("/api/checkin/id-card", methods=["POST"], endpoint="checkin_id_card")
    @json_endpoint
    def checkin_id_card():
        machine = _current()
        machine.capture_id_card(_payload().get("image"))
        return _respond(machine)

    @app.route("/api/checkin/id-card/confirm", methods=["POST"], endpoint="checkin_id_confirm")
    @json_endpoint
    def checkin_id_confirm():
        machine = _current()
        machine.confirm_identity()
        return _respond(machine)

    @app.route("/api/checkin/id-card/reject", methods=["POST"], endpoint="checkin_id_reject")
    @json_endpoint
    def checkin_id_reject():
        machine = _current()
        machine.reject_identity()
        return _respond(machine)

    @app.route("/api/checkin/back", methods=["POST"], endpoint="checkin_back")
    @json_endpoint
    def checkin_back():
        machine = _current()
        machine.back_to_method()
        return _respond(machine)

    @app.route("/api/checkin/selfie", methods=["POST"], endpoint="checkin_selfie")
    @json_endpoint
    def checkin_selfie():
        machine = _current()
        machine.capture_selfie(_payload().get("image"))
        return _respond(machine)

    @app.route("/api/checkin/location", methods=["POST"], endpoint="checkin_location")
    @json_endpoint
    def checkin_location():
        machine = _current()
        machine.acquire_location(ClientReportedGeolocator(_payload().get("position"), clock=container.clock))
        return _respond(machine)

    @app.route("/api/checkin/submit", methods=["POST"], endpoint="checkin_submit")
    @json_endpoint
    def checkin_submit():
        machine = _current()
        machine.submit()
        return _respond(machine)

    @app.route("/api/checkin/abort", methods=["POST"], endpoint="checkin_abort")
    @json_endpoint
    def checkin_abort():
        machine = _current()
        machine.abort()
        container.checkin_service.discard(machine.session_id)
        session.pop(SESSION_KEY, None)
        return _respond(machine)
