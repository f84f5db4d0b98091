from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_datetime
from ..common.http import current_user_id, error_response, json_body, login_required, server_error
from ..common.validators import require_positive_id
from ..container import Container
from ..core.exceptions import DomainError, ValidationError
from .model import GeoLocation


def register(app: Flask, container: Container) -> None:
    engine = container.shift_service

    def _ok(shift, message: str):
        return jsonify({"success": True, "shift": shift.to_dict() if shift else None, "message": message})

    def _location():
        try:
            return GeoLocation.from_mapping(json_body().get("location"))
        except (TypeError, ValueError):
            raise ValidationError("Invalid location")

    @app.route("/api/shifts/available-services", methods=["GET"], endpoint="shifts_available_services")
    @login_required
    def available_services():
        try:
            services = engine.get_available_services(current_user_id())
            return jsonify({"success": True, "services": [s.to_dict() for s in services]})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("list available services")

    @app.route("/api/shifts/active", methods=["GET"], endpoint="shifts_active")
    @login_required
    def active():
        try:
            shift = engine.get_active_shift(current_user_id())
            return jsonify({"success": True, "shift": shift.to_dict() if shift else None})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("load the active shift")

    @app.route("/api/shifts/today", methods=["GET"], endpoint="shifts_today")
    @login_required
    def today():
        try:
            shift = engine.get_today_shift(current_user_id())
            return jsonify({"success": True, "shift": shift.to_dict() if shift else None})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("load today's shift")

    @app.route("/api/shifts/biometric-entry", methods=["POST"], endpoint="shifts_biometric_entry")
    @login_required
    def biometric_entry():
        try:
            raw = json_body().get("timestamp")
            try:
                timestamp = None if raw is None or raw == "" else parse_iso_datetime(raw)
            except ValueError:
                raise ValidationError("Invalid timestamp (ISO-8601)")
            shift = engine.register_biometric_entry(current_user_id(), timestamp)
            return _ok(shift, "Biometric entry registered successfully")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("register the biometric entry")

    @app.route("/api/shifts/start", methods=["POST"], endpoint="shifts_start")
    @login_required
    def start():
        try:
            service_id = json_body().get("service_id")
            if not service_id:
                raise ValidationError("Service ID is required")
            shift = engine.start_shift_in_app(current_user_id(), require_positive_id(service_id, "Service"))
            return _ok(shift, "Shift started successfully")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("start the shift")

    @app.route("/api/shifts/break/start", methods=["POST"], endpoint="shifts_break_start")
    @login_required
    def break_start():
        try:
            return _ok(engine.start_break(current_user_id()), "Break started")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("start the break")

    @app.route("/api/shifts/break/end", methods=["POST"], endpoint="shifts_break_end")
    @login_required
    def break_end():
        try:
            return _ok(engine.end_break(current_user_id()), "Break ended")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("end the break")

    @app.route("/api/shifts/patrol/start", methods=["POST"], endpoint="shifts_patrol_start")
    @login_required
    def patrol_start():
        try:
            return _ok(engine.start_patrol(current_user_id(), _location()), "Patrol started")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("start the patrol")

    @app.route("/api/shifts/patrol/end", methods=["POST"], endpoint="shifts_patrol_end")
    @login_required
    def patrol_end():
        try:
            return _ok(engine.end_patrol(current_user_id(), _location()), "Patrol ended")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("end the patrol")

    @app.route("/api/shifts/incident", methods=["POST"], endpoint="shifts_incident")
    @login_required
    def incident():
        try:
            notes = json_body().get("notes") or ""
            return _ok(engine.log_incident(current_user_id(), notes, _location()), "Incident logged")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("log the incident")

    @app.route("/api/shifts/end", methods=["POST"], endpoint="shifts_end")
    @login_required
    def end():
        try:
            return _ok(engine.end_shift(current_user_id()), "Shift ended successfully")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("end the shift")
