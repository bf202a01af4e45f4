from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.clock import parse_iso_date
from ..common.web import admin_required, current_actor, error_response
from ..container import Container
from ..core.exceptions import ValidationError


def _date_arg(name: str):
    value = (request.args.get(name) or "").strip()
    if not value:
        raise ValidationError(f"{name} is required", fields={name: "required"})
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{name} must be YYYY-MM-DD", fields={name: "format:YYYY-MM-DD"})


def register(app: Flask, container: Container) -> None:
    @app.route("/api/reports/access-logs", methods=["GET"], endpoint="report_access_logs")
    @admin_required
    def report_access_logs():
        try:
            start = _date_arg("startDate")
            end = _date_arg("endDate")
            employee_id = request.args.get("employeeId", type=int)
            report = container.report_service.build_access_report(
                current_actor(), start=start, end=end, employee_id=employee_id
            )
        except Exception as e:
            return error_response(e)

        return jsonify({"success": True, "logs": report.rows, "stats": report.stats, "summary": report.summary}), 200

    @app.route("/api/reports/employees", methods=["GET"], endpoint="report_employees")
    @admin_required
    def report_employees():
        try:
            employees = container.report_service.list_employees(current_actor())
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "employees": employees}), 200
