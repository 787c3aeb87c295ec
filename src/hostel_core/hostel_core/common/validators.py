from __future__ import annotations

import re
from typing import Optional

from ..core.constants import DEFAULT_COUNTRY_CODE
from ..core.exceptions import ValidationError

_DIGITS = re.compile(r"^\d+$")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_digits(value: Optional[str], field_name: str, length: int) -> str:
    value = require_non_empty(value, field_name)
    if len(value) != length or not _DIGITS.match(value):
        raise ValidationError(f"{field_name} must be a valid {length}-digit number")
    return value


def require_coordinates(latitude, longitude) -> tuple[float, float]:
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        raise ValidationError("Invalid coordinates")
    if not (-90 <= lat <= 90) or not (-180 <= lon <= 180):
        raise ValidationError("Invalid coordinates")
    return lat, lon


def normalize_phone(value: Optional[str]) -> str:
    """Strip spaces and dashes; keep a leading '+'."""
    raw = require_non_empty(value, "Phone number")
    return re.sub(r"[\s\-()]", "", raw)


def alternate_phone(phone: str, country_code: str = DEFAULT_COUNTRY_CODE) -> Optional[str]:
    """The same number with the country prefix toggled, or None if there is no other form.

    Registration may store "98765..." while login yields "+9198765..." (or vice versa).
    """
    if phone.startswith(country_code):
        return phone[len(country_code):].strip()
    if len(phone) == 10 and _DIGITS.match(phone):
        return country_code + phone
    return None
