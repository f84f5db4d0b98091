from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .core.constants import (
    DEFAULT_APP_START_WINDOW_MINUTES,
    DEFAULT_BIOMETRIC_TOLERANCE_MINUTES,
    DEFAULT_SHIFT_STORE,
)
from .database.connection import DatabaseConnection, DBConfig
from .directory.memory_service_directory import InMemoryServiceDirectory
from .directory.mysql_service_directory import MySQLServiceDirectory
from .directory.repository import ServiceDirectory
from .guards.memory_guard_repository import InMemoryGuardRepository
from .guards.mysql_guard_repository import MySQLGuardRepository
from .guards.repository import GuardRepository
from .reports.service import ShiftReportService
from .schedules.service import ScheduleService
from .shifts.memory_shift_repository import InMemoryShiftRepository
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository
from .shifts.service import ShiftLifecycleService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    guards_repo: GuardRepository
    services_repo: ServiceDirectory
    shifts_repo: ShiftRepository

    shift_service: ShiftLifecycleService
    schedule_service: ScheduleService
    report_service: ShiftReportService


def build_container(
    *,
    db_config: Optional[dict] = None,
    shift_store: str = DEFAULT_SHIFT_STORE,
    biometric_tolerance_minutes: int = DEFAULT_BIOMETRIC_TOLERANCE_MINUTES,
    app_start_window_minutes: int = DEFAULT_APP_START_WINDOW_MINUTES,
) -> Container:
    """Wire repositories and services.

    ``shift_store="memory"`` swaps every collaborator for its in-memory
    adapter (no database needed); anything else uses MySQL and requires
    ``db_config``.
    """
    conn: Optional[DatabaseConnection] = None
    if shift_store == "memory":
        guards_repo: GuardRepository = InMemoryGuardRepository()
        services_repo: ServiceDirectory = InMemoryServiceDirectory()
        shifts_repo: ShiftRepository = InMemoryShiftRepository()
    else:
        if db_config is None:
            raise ValueError("db_config is required for the MySQL shift store")
        conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
        guards_repo = MySQLGuardRepository(conn)
        services_repo = MySQLServiceDirectory(conn)
        shifts_repo = MySQLShiftRepository(conn)
    logger.debug("Using %s shift store", shift_store)

    shift_service = ShiftLifecycleService(
        shifts_repo,
        guards_repo,
        services_repo,
        biometric_tolerance_minutes=biometric_tolerance_minutes,
        app_start_window_minutes=app_start_window_minutes,
    )
    schedule_service = ScheduleService(shifts_repo, guards_repo, services_repo)
    report_service = ShiftReportService(shifts_repo)

    return Container(
        conn=conn,
        guards_repo=guards_repo,
        services_repo=services_repo,
        shifts_repo=shifts_repo,
        shift_service=shift_service,
        schedule_service=schedule_service,
        report_service=report_service,
    )
