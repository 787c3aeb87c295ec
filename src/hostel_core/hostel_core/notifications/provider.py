from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence


class NotificationProvider(Protocol):
    """Push delivery. Implementations raise NotificationDeliveryFailure on failure."""

    def send(self, token: str, title: str, body: str, data: Optional[Mapping[str, Any]] = None) -> None:
        raise NotImplementedError

    def send_bulk(self, tokens: Sequence[str], title: str, body: str, data: Optional[Mapping[str, Any]] = None) -> None:
        raise NotImplementedError
