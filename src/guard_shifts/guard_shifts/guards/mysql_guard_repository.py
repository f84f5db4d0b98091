from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Guard
from .repository import GuardRepository


class MySQLGuardRepository(GuardRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, guard_id: int) -> Optional[Guard]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, full_name, role, service_code, is_active
                FROM users
                WHERE user_id=%s
                """,
                (int(guard_id),),
            )
            row = fetchone(cur)
            if not row:
                return None

            cur.execute(
                """
                SELECT service_code
                FROM user_service_codes
                WHERE user_id=%s
                ORDER BY service_code
                """,
                (int(guard_id),),
            )
            codes = tuple(r["service_code"].upper() for r in fetchall(cur))

            service_code = row.get("service_code")
            return Guard(
                guard_id=int(row["user_id"]),
                full_name=row["full_name"],
                role=Role.parse(row["role"]),
                service_code=service_code.upper() if service_code else None,
                service_codes=codes,
                is_active=bool(row.get("is_active", True)),
            )
