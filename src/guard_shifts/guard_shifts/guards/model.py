from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Guard:
    """Domain entity: a user as seen by the shift engine.

    Note: Plain data object; ``service_codes`` only matters for guards, other
    roles are scoped by their single ``service_code``.
    """

    guard_id: int
    full_name: str
    role: Role
    service_code: Optional[str] = None
    service_codes: tuple[str, ...] = ()
    is_active: bool = True
