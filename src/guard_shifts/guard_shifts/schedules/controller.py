from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_datetime
from ..common.http import admin_required, current_role, error_response, json_body, query_date, server_error
from ..container import Container
from ..core.enums import ShiftStatus
from ..core.exceptions import DomainError, ValidationError


def register(app: Flask, container: Container) -> None:
    def _parse_datetime(data: dict, key: str):
        raw = data.get(key)
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            raise ValidationError("All fields are required: guard_id, service_id, scheduled_start_time, scheduled_end_time")
        try:
            return parse_iso_datetime(raw)
        except ValueError:
            raise ValidationError(f"Invalid {key} (ISO-8601)")

    @app.route("/api/shifts/schedule", methods=["POST"], endpoint="shifts_schedule")
    @admin_required
    def schedule():
        try:
            data = json_body()
            shift = container.schedule_service.schedule_shift(
                current_role=current_role(),
                guard_id=data.get("guard_id"),
                service_id=data.get("service_id"),
                scheduled_start_time=_parse_datetime(data, "scheduled_start_time"),
                scheduled_end_time=_parse_datetime(data, "scheduled_end_time"),
                notes=data.get("notes"),
            )
            return jsonify({"success": True, "shift": shift.to_dict(), "message": "Shift scheduled successfully"})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("schedule the shift")

    @app.route("/api/shifts/all", methods=["GET"], endpoint="shifts_all")
    @admin_required
    def list_all():
        try:
            status_s = request.args.get("status")
            service_s = request.args.get("service_id")
            try:
                status = ShiftStatus(status_s) if status_s else None
            except ValueError:
                raise ValidationError(f"Unknown status {status_s!r}")

            shifts = container.schedule_service.list_shifts(
                start=query_date("start_date"),
                end=query_date("end_date"),
                status=status,
                service_id=int(service_s) if service_s and service_s.isdigit() else None,
            )
            return jsonify({"success": True, "shifts": [s.to_dict() for s in shifts]})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("list shifts")
