from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, tzinfo
from typing import Union

from ...geofence.distance import GeoPoint
from ..model import RollCallAttempt


class RollCallStrategy(ABC):
    """Strategy Pattern: which policy checks a roll-call attempt must pass.

    Biometric verification is not part of the strategy; it always runs.
    """

    @abstractmethod
    def check_time(self, attempt: RollCallAttempt, *, now: datetime, tz: Union[str, tzinfo, None]) -> None:
        raise NotImplementedError

    @abstractmethod
    def check_geofence(self, attempt: RollCallAttempt, *, position: GeoPoint, center: GeoPoint, radius_meters: float) -> None:
        raise NotImplementedError
