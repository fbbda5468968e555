from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import admin_required, json_endpoint
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/students", methods=["GET"], endpoint="admin_students")
    @admin_required
    @json_endpoint
    def admin_students():
        students = container.student_service.list_all()
        return jsonify({"success": True, "students": [s.to_dict() for s in students]})

    @app.route("/admin/students", methods=["POST"], endpoint="admin_students_save")
    @admin_required
    @json_endpoint
    def admin_students_save():
        student = container.student_service.register(request.get_json(silent=True) or {})
        return jsonify({"success": True, "student": student.to_dict()}), 201
