from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import admin_required, error_response, query_date, server_error
from ..container import Container
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    reports = container.report_service

    @app.route("/api/shifts/by-service/<int:service_id>", methods=["GET"], endpoint="shifts_by_service")
    @admin_required
    def by_service(service_id: int):
        try:
            shifts = reports.get_shifts_by_service(
                service_id, start=query_date("start_date"), end=query_date("end_date")
            )
            return jsonify({"success": True, "shifts": [s.to_dict() for s in shifts]})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("list shifts by service")

    @app.route("/api/shifts/stats/<int:service_id>", methods=["GET"], endpoint="shifts_stats")
    @admin_required
    def stats(service_id: int):
        try:
            report = reports.build_stats_report(
                service_id, start=query_date("start_date"), end=query_date("end_date")
            )
            return jsonify(
                {
                    "success": True,
                    "stats": report.rows,
                    "total_shifts": report.total_shifts,
                    "total_worked_minutes": report.total_worked_minutes,
                }
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("compute shift stats")
