from src.guard_shifts.guard_shifts.core.enums import Role
from src.guard_shifts.guard_shifts.guards.mysql_guard_repository import MySQLGuardRepository


class FakeCursor:
    def __init__(self, user_row, code_rows):
        self._user_row = user_row
        self._code_rows = code_rows
        self._last_sql = ""

    def execute(self, sql, params=None):
        self._last_sql = sql

    def fetchone(self):
        return self._user_row

    def fetchall(self):
        return self._code_rows if "user_service_codes" in self._last_sql else []

    def close(self):
        pass


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        pass

    def rollback(self):
        pass

    def close(self):
        pass


class FakeConnectionFactory:
    def __init__(self, user_row, code_rows=()):
        self._cursor = FakeCursor(user_row, list(code_rows))

    def connect(self, with_database=True):
        return FakeConnection(self._cursor)


def user_row(role: str) -> dict:
    return {"user_id": 3, "full_name": "Resident", "role": role, "service_code": "cartagena", "is_active": 1}


def test_english_resident_role_is_loaded():
    repo = MySQLGuardRepository(FakeConnectionFactory(user_row("resident")))

    guard = repo.get_by_id(3)

    assert guard.role == Role.RESIDENT_EN
    assert guard.service_code == "CARTAGENA"


def test_unknown_role_string_falls_back_to_resident():
    repo = MySQLGuardRepository(FakeConnectionFactory(user_row("vecino"), [{"service_code": "alba"}]))

    guard = repo.get_by_id(3)

    assert guard.role == Role.RESIDENT
    assert guard.service_codes == ("ALBA",)


def test_missing_user_is_none():
    assert MySQLGuardRepository(FakeConnectionFactory(None)).get_by_id(3) is None
