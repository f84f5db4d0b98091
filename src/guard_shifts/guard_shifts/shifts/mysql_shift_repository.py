from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import OPEN_STATUSES, STARTED_STATUSES, ActivityType, ShiftStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import GeoLocation, Shift, ShiftActivity, ShiftStatusStats
from .repository import ShiftRepository

logger = logging.getLogger(__name__)

_SHIFT_COLUMNS = """
    shift_id, guard_id, service_id, shift_date, scheduled_start_time, scheduled_end_time,
    biometric_start_time, app_start_time, end_time, status, is_within_time_window,
    total_worked_minutes, total_break_minutes, total_patrol_minutes, notes, version,
    created_at, updated_at
"""


def _row_to_activity(r: dict) -> ShiftActivity:
    location = None
    if r.get("latitude") is not None and r.get("longitude") is not None:
        location = GeoLocation(latitude=float(r["latitude"]), longitude=float(r["longitude"]))
    return ShiftActivity(
        activity_type=ActivityType(r["activity_type"]),
        timestamp=r["occurred_at"],
        notes=r.get("notes") or "",
        location=location,
    )


def _row_to_shift(r: dict, activities: tuple[ShiftActivity, ...]) -> Shift:
    return Shift(
        shift_id=int(r["shift_id"]),
        guard_id=int(r["guard_id"]),
        service_id=int(r["service_id"]),
        shift_date=r["shift_date"],
        scheduled_start_time=r["scheduled_start_time"],
        scheduled_end_time=r["scheduled_end_time"],
        status=ShiftStatus(r["status"]),
        biometric_start_time=r.get("biometric_start_time"),
        app_start_time=r.get("app_start_time"),
        end_time=r.get("end_time"),
        activities=activities,
        is_within_time_window=bool(r.get("is_within_time_window")),
        total_worked_minutes=float(r.get("total_worked_minutes") or 0),
        total_break_minutes=float(r.get("total_break_minutes") or 0),
        total_patrol_minutes=float(r.get("total_patrol_minutes") or 0),
        notes=r.get("notes") or "",
        version=int(r.get("version") or 0),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _date_range_clause(start: Optional[date], end: Optional[date], clauses: list[str], params: list[object]) -> None:
    if start is not None and end is not None:
        clauses.append("shift_date BETWEEN %s AND %s")
        params.extend([start, end])


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load(self, cur, rows: list[dict]) -> list[Shift]:
        if not rows:
            return []

        ids = [int(r["shift_id"]) for r in rows]
        cur.execute(
            f"""
            SELECT shift_id, seq, activity_type, occurred_at, notes, latitude, longitude
            FROM shift_activities
            WHERE shift_id IN ({in_clause(ids)})
            ORDER BY shift_id, seq
            """,
            tuple(ids),
        )
        by_shift: dict[int, list[ShiftActivity]] = {}
        for a in fetchall(cur):
            by_shift.setdefault(int(a["shift_id"]), []).append(_row_to_activity(a))

        return [_row_to_shift(r, tuple(by_shift.get(int(r["shift_id"]), ()))) for r in rows]

    def _select(
        self,
        where: str,
        params: Sequence[object],
        *,
        order: str = "scheduled_start_time ASC",
        limit: Optional[int] = None,
    ) -> list[Shift]:
        sql = f"SELECT {_SHIFT_COLUMNS} FROM shifts WHERE {where} ORDER BY {order}"
        if limit is not None:
            sql += f" LIMIT {int(limit)}"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return self._load(cur, fetchall(cur))

    def create(
        self,
        *,
        guard_id: int,
        service_id: int,
        shift_date: date,
        scheduled_start_time: datetime,
        scheduled_end_time: datetime,
        notes: str = "",
        created_at: Optional[datetime] = None,
    ) -> Shift:
        created_at = created_at or datetime.now()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shifts(guard_id, service_id, shift_date, scheduled_start_time, scheduled_end_time,
                                   status, notes, version, created_at, updated_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,0,%s,%s)
                """,
                (
                    int(guard_id),
                    int(service_id),
                    shift_date,
                    scheduled_start_time,
                    scheduled_end_time,
                    ShiftStatus.SCHEDULED.value,
                    notes or "",
                    created_at,
                    created_at,
                ),
            )
            shift_id = int(cur.lastrowid)

        return Shift(
            shift_id=shift_id,
            guard_id=int(guard_id),
            service_id=int(service_id),
            shift_date=shift_date,
            scheduled_start_time=scheduled_start_time,
            scheduled_end_time=scheduled_end_time,
            notes=notes or "",
            created_at=created_at,
            updated_at=created_at,
        )

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        items = self._select("shift_id=%s", (int(shift_id),))
        return items[0] if items else None

    def find_scheduled_for_day(self, guard_id: int, shift_date: date) -> Optional[Shift]:
        return self.find_for_guard_in_status(guard_id, (ShiftStatus.SCHEDULED,), shift_date=shift_date)

    def find_for_guard_in_status(
        self, guard_id: int, statuses: Iterable[ShiftStatus], *, shift_date: Optional[date] = None
    ) -> Optional[Shift]:
        values = [s.value for s in statuses]
        clauses = ["guard_id=%s", f"status IN ({in_clause(values)})"]
        params: list[object] = [int(guard_id), *values]
        if shift_date is not None:
            clauses.append("shift_date=%s")
            params.append(shift_date)

        items = self._select(" AND ".join(clauses), params, limit=1)
        return items[0] if items else None

    def find_active(self, guard_id: int) -> Optional[Shift]:
        return self.find_for_guard_in_status(guard_id, STARTED_STATUSES)

    def list_for_guard_on_date(self, guard_id: int, shift_date: date) -> Sequence[Shift]:
        return self._select("guard_id=%s AND shift_date=%s", (int(guard_id), shift_date))

    def save(self, shift: Shift, *, expected_status: ShiftStatus, expected_version: int) -> bool:
        opening = shift.status in OPEN_STATUSES and expected_status not in OPEN_STATUSES
        open_values = [s.value for s in OPEN_STATUSES]

        with db_cursor(self._conn_factory) as (_, cur):
            # Per-guard serialization point for the one-open-shift rule.
            cur.execute("SELECT user_id FROM users WHERE user_id=%s FOR UPDATE", (shift.guard_id,))
            fetchone(cur)

            if opening:
                cur.execute(
                    f"""
                    SELECT COUNT(*) AS open_count
                    FROM shifts
                    WHERE guard_id=%s AND shift_id<>%s AND status IN ({in_clause(open_values)})
                    """,
                    (shift.guard_id, shift.shift_id, *open_values),
                )
                if int(fetchone(cur)["open_count"]):
                    logger.warning("Guard %s already holds an open shift", shift.guard_id)
                    return False

            cur.execute(
                """
                UPDATE shifts
                SET status=%s, biometric_start_time=%s, app_start_time=%s, end_time=%s,
                    is_within_time_window=%s, total_worked_minutes=%s, total_break_minutes=%s,
                    total_patrol_minutes=%s, notes=%s, version=%s, updated_at=%s
                WHERE shift_id=%s AND status=%s AND version=%s
                """,
                (
                    shift.status.value,
                    shift.biometric_start_time,
                    shift.app_start_time,
                    shift.end_time,
                    int(shift.is_within_time_window),
                    shift.total_worked_minutes,
                    shift.total_break_minutes,
                    shift.total_patrol_minutes,
                    shift.notes,
                    shift.version,
                    shift.updated_at or datetime.now(),
                    shift.shift_id,
                    expected_status.value,
                    int(expected_version),
                ),
            )
            if cur.rowcount != 1:
                return False

            cur.execute("SELECT COUNT(*) AS stored FROM shift_activities WHERE shift_id=%s", (shift.shift_id,))
            stored = int(fetchone(cur)["stored"])
            for seq, activity in enumerate(shift.activities[stored:], start=stored):
                cur.execute(
                    """
                    INSERT INTO shift_activities(shift_id, seq, activity_type, occurred_at, notes, latitude, longitude)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        shift.shift_id,
                        seq,
                        activity.activity_type.value,
                        activity.timestamp,
                        activity.notes,
                        activity.location.latitude if activity.location else None,
                        activity.location.longitude if activity.location else None,
                    ),
                )
            return True

    def list_by_service(
        self, service_id: int, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> Sequence[Shift]:
        return self.list_filtered(start=start, end=end, service_id=service_id)

    def list_filtered(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        status: Optional[ShiftStatus] = None,
        service_id: Optional[int] = None,
    ) -> Sequence[Shift]:
        clauses = ["1=1"]
        params: list[object] = []
        _date_range_clause(start, end, clauses, params)
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if service_id is not None:
            clauses.append("service_id=%s")
            params.append(int(service_id))

        return self._select(" AND ".join(clauses), params, order="shift_date DESC, scheduled_start_time ASC")

    def aggregate_by_status(
        self, service_id: int, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> Sequence[ShiftStatusStats]:
        clauses = ["service_id=%s"]
        params: list[object] = [int(service_id)]
        _date_range_clause(start, end, clauses, params)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT status,
                       COUNT(*) AS shift_count,
                       COALESCE(SUM(total_worked_minutes), 0) AS worked,
                       COALESCE(SUM(total_break_minutes), 0) AS break_minutes,
                       COALESCE(SUM(total_patrol_minutes), 0) AS patrol
                FROM shifts
                WHERE {" AND ".join(clauses)}
                GROUP BY status
                ORDER BY status
                """,
                tuple(params),
            )
            return [
                ShiftStatusStats(
                    status=ShiftStatus(r["status"]),
                    count=int(r["shift_count"]),
                    total_worked_minutes=float(r["worked"]),
                    total_break_minutes=float(r["break_minutes"]),
                    total_patrol_minutes=float(r["patrol"]),
                )
                for r in fetchall(cur)
            ]
