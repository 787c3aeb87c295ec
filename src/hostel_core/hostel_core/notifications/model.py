from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class PushMessage:
    tokens: Tuple[str, ...]
    title: str
    body: str
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_bulk(self) -> bool:
        return len(self.tokens) > 1
