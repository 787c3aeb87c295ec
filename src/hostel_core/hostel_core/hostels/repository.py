from __future__ import annotations

from typing import Mapping, Optional, Protocol

from .model import Hostel


class HostelRepository(Protocol):
    def create(self, data: Mapping) -> str:
        raise NotImplementedError

    def get_by_id(self, hostel_id: str) -> Optional[Hostel]:
        raise NotImplementedError
