from __future__ import annotations

from dataclasses import dataclass

from .strategies.base import RollCallStrategy
from .strategies.bypass_strategy import BypassStrategy
from .strategies.standard_strategy import StandardStrategy


@dataclass
class RollCallStrategyFactory:
    """Factory Pattern: choose the roll-call policy for an attempt."""

    def for_attempt(self, *, bypass: bool) -> RollCallStrategy:
        if bypass:
            return BypassStrategy()
        return StandardStrategy()
