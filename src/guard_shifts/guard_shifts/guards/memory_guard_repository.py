from __future__ import annotations

from typing import Iterable, Optional

from .model import Guard
from .repository import GuardRepository


class InMemoryGuardRepository(GuardRepository):
    def __init__(self, guards: Iterable[Guard] = ()):
        self._by_id: dict[int, Guard] = {g.guard_id: g for g in guards}

    def add(self, guard: Guard) -> None:
        self._by_id[guard.guard_id] = guard

    def get_by_id(self, guard_id: int) -> Optional[Guard]:
        return self._by_id.get(int(guard_id))
