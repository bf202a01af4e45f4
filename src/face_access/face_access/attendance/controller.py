from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import admin_required, current_actor, error_response, login_required
from ..container import Container
from ..core.enums import ActionKind
from ..core.exceptions import ValidationError
from ..identity.provider import decode_image_payload


def _parse_action(value) -> ActionKind:
    try:
        return ActionKind(str(value or "").strip())
    except ValueError:
        raise ValidationError("type must be check_in or check_out", fields={"type": "invalid"})


def _parse_id(value, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is required", fields={field_name: "required"})


def register(app: Flask, container: Container) -> None:
    @app.route("/api/access/register", methods=["POST"], endpoint="access_register")
    @login_required
    def access_register():
        actor = current_actor()
        data = request.get_json(silent=True) or {}
        try:
            action = _parse_action(data.get("type"))
            image = decode_image_payload(data.get("imageData", ""))
            result = container.attendance_service.register_by_face(
                image=image,
                action=action,
                organization_id=actor.organization_id,
            )
        except Exception as e:
            return error_response(e)

        clock = container.clock
        return jsonify(
            {
                "success": True,
                "message": f"{result.entry.action.label} registered for {result.employee.name}",
                "employee": {
                    "employee_id": result.employee.employee_id,
                    "name": result.employee.name,
                    "employee_code": result.employee.employee_code,
                },
                "access_log_id": result.entry.entry_id,
                "type": result.entry.action.value,
                "timestamp": clock.normalize(result.entry.timestamp).isoformat(),
                "local_time": clock.format_local(result.entry.timestamp, "%Y-%m-%d %H:%M:%S"),
                "auto_close_generated": result.auto_close_generated,
            }
        ), 200

    @app.route("/api/access/last-logs", methods=["GET"], endpoint="access_last_logs")
    @login_required
    def access_last_logs():
        try:
            limit = request.args.get("limit", type=int)
            logs = container.report_service.last_logs(current_actor(), limit)
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "logs": logs}), 200

    @app.route("/api/access/update-time", methods=["PATCH"], endpoint="access_update_time")
    @admin_required
    def access_update_time():
        data = request.get_json(silent=True) or {}
        try:
            result = container.audit_service.edit_entry_time(
                _parse_id(data.get("logId"), "logId"),
                data.get("newTime", ""),
                data.get("reason", ""),
                current_actor(),
                evidence_url=data.get("evidenceUrl"),
            )
        except Exception as e:
            return error_response(e)

        return jsonify(
            {
                "success": True,
                "message": "Access log time updated",
                "access_log_id": result.access_log_id,
                "previous_timestamp": result.previous_timestamp.isoformat(),
                "new_timestamp": result.new_timestamp.isoformat(),
                "audit_id": result.audit.audit_id,
            }
        ), 200

    @app.route("/api/access/edit-history", methods=["GET"], endpoint="access_edit_history")
    @admin_required
    def access_edit_history():
        try:
            access_log_id = _parse_id(request.args.get("accessLogId"), "accessLogId")
            history = container.audit_service.get_edit_history(access_log_id, current_actor())
        except Exception as e:
            return error_response(e)

        return jsonify(
            {
                "success": True,
                "history": [
                    {
                        "id": h.audit.audit_id,
                        "previous_timestamp": h.audit.previous_timestamp.isoformat(),
                        "new_timestamp": h.audit.new_timestamp.isoformat(),
                        "reason": h.audit.reason,
                        "evidence_url": h.audit.evidence_url,
                        "created_at": h.audit.created_at.isoformat(),
                        "admin_name": h.admin_name,
                    }
                    for h in history
                ],
            }
        ), 200
