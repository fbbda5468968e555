from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import admin_required, json_endpoint
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/settings/public", methods=["GET"], endpoint="settings_public")
    @json_endpoint
    def settings_public():
        # What the check-in page may show; never the bot token.
        s = container.settings_service.get()
        return jsonify(
            {
                "success": True,
                "school_name": s.school_name,
                "start_time": s.schedule.start_time,
                "end_time": s.schedule.end_time,
            }
        )

    @app.route("/admin/settings", methods=["GET"], endpoint="admin_settings")
    @admin_required
    @json_endpoint
    def admin_settings():
        return jsonify({"success": True, "settings": container.settings_service.get().to_dict()})

    @app.route("/admin/settings", methods=["PUT", "POST"], endpoint="admin_settings_save")
    @admin_required
    @json_endpoint
    def admin_settings_save():
        saved = container.settings_service.save(request.get_json(silent=True) or {})
        return jsonify({"success": True, "settings": saved.to_dict()})
