from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Service
from .repository import ServiceDirectory


def _row_to_service(r: dict) -> Service:
    return Service(
        service_id=int(r["service_id"]),
        code=r["service_code"],
        name=r["name"],
        display_name=r.get("display_name") or r["name"],
        is_active=bool(r.get("is_active", True)),
    )


class MySQLServiceDirectory(ServiceDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, service_id: int) -> Optional[Service]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT service_id, service_code, name, display_name, is_active
                FROM services
                WHERE service_id=%s
                """,
                (int(service_id),),
            )
            r = fetchone(cur)
            return _row_to_service(r) if r else None

    def list_active(self) -> Sequence[Service]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT service_id, service_code, name, display_name, is_active
                FROM services
                WHERE is_active=1
                ORDER BY display_name
                """
            )
            return [_row_to_service(r) for r in fetchall(cur)]

    def list_active_by_codes(self, codes: Sequence[str]) -> Sequence[Service]:
        codes = [c.upper() for c in codes if c]
        if not codes:
            return []

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT service_id, service_code, name, display_name, is_active
                FROM services
                WHERE is_active=1 AND UPPER(service_code) IN ({in_clause(codes)})
                ORDER BY display_name
                """,
                tuple(codes),
            )
            return [_row_to_service(r) for r in fetchall(cur)]
