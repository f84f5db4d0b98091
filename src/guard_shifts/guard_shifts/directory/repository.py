from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Service


class ServiceDirectory(Protocol):
    def get_by_id(self, service_id: int) -> Optional[Service]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Service]:
        raise NotImplementedError

    def list_active_by_codes(self, codes: Sequence[str]) -> Sequence[Service]:
        """Active services whose code is in ``codes`` (case-insensitive)."""

        raise NotImplementedError
