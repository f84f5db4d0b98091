from __future__ import annotations

from typing import Iterable, Optional, Sequence

from .model import Service
from .repository import ServiceDirectory


class InMemoryServiceDirectory(ServiceDirectory):
    def __init__(self, services: Iterable[Service] = ()):
        self._by_id: dict[int, Service] = {s.service_id: s for s in services}

    def add(self, service: Service) -> None:
        self._by_id[service.service_id] = service

    def get_by_id(self, service_id: int) -> Optional[Service]:
        return self._by_id.get(int(service_id))

    def list_active(self) -> Sequence[Service]:
        items = [s for s in self._by_id.values() if s.is_active]
        items.sort(key=lambda s: s.display_name)
        return items

    def list_active_by_codes(self, codes: Sequence[str]) -> Sequence[Service]:
        wanted = {c.upper() for c in codes if c}
        return [s for s in self.list_active() if s.code.upper() in wanted]
