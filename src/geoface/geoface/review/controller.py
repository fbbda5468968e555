from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request, session

from ..common.web import ADMIN_SESSION_KEY, admin_required, json_endpoint
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _csv(data: bytes, filename: str):
        return app.response_class(
            data,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/admin/login", methods=["POST"], endpoint="admin_login")
    @json_endpoint
    def admin_login():
        data = request.get_json(silent=True) or request.form
        container.admin_auth.authenticate(str(data.get("password", "")))
        session[ADMIN_SESSION_KEY] = True
        return jsonify({"success": True})

    @app.route("/admin/logout", methods=["POST"], endpoint="admin_logout")
    def admin_logout():
        session.pop(ADMIN_SESSION_KEY, None)
        return jsonify({"success": True})

    @app.route("/admin/records", methods=["GET"], endpoint="admin_records")
    @admin_required
    @json_endpoint
    def admin_records():
        include_selfie = request.args.get("selfie") == "1"
        rows = container.review_service.list_rows()
        return jsonify({"success": True, "records": [r.to_dict(include_selfie=include_selfie) for r in rows]})

    @app.route("/admin/records", methods=["DELETE"], endpoint="admin_records_clear")
    @admin_required
    @json_endpoint
    def admin_records_clear():
        container.review_service.clear_records()
        return jsonify({"success": True})

    @app.route("/admin/stats", methods=["GET"], endpoint="admin_stats")
    @admin_required
    @json_endpoint
    def admin_stats():
        return jsonify({"success": True, "stats": container.review_service.stats()})

    @app.route("/admin/records/<record_id>/status", methods=["POST"], endpoint="admin_record_status")
    @admin_required
    @json_endpoint
    def admin_record_status(record_id: str):
        data = request.get_json(silent=True) or {}
        changed = container.review_service.update_status(record_id, data.get("status", ""), data.get("note"))
        return jsonify({"success": True, "changed": changed})

    @app.route("/admin/records/export.csv", methods=["GET"], endpoint="admin_records_export")
    @admin_required
    @json_endpoint
    def admin_records_export():
        return _csv(container.review_service.export_csv(), "attendance_log.csv")

    @app.route("/admin/recap", methods=["GET"], endpoint="admin_recap")
    @admin_required
    @json_endpoint
    def admin_recap():
        month = request.args.get("month") or date.today().strftime("%Y-%m")
        recap = container.review_service.monthly_recap(month, class_name=request.args.get("class") or None)
        return jsonify({"success": True, "recap": recap.to_dict()})

    @app.route("/admin/recap/export.csv", methods=["GET"], endpoint="admin_recap_export")
    @admin_required
    @json_endpoint
    def admin_recap_export():
        month = request.args.get("month") or date.today().strftime("%Y-%m")
        data = container.review_service.export_recap_csv(month, class_name=request.args.get("class") or None)
        return _csv(data, f"recap_{month}.csv")
