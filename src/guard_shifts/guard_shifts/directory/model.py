from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Service:
    """Domain entity: a managed property/community guards are assigned to."""

    service_id: int
    code: str
    name: str
    display_name: str
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "service_id": self.service_id,
            "code": self.code,
            "name": self.name,
            "display_name": self.display_name,
        }
