from __future__ import annotations

from typing import Optional, Protocol

from .model import Guard


class GuardRepository(Protocol):
    """Identity provider interface.

    Note (DIP): the shift engine depends on this interface, never on a concrete store.
    """

    def get_by_id(self, guard_id: int) -> Optional[Guard]:
        raise NotImplementedError
