from __future__ import annotations

import re
from datetime import time

from ..core.exceptions import ValidationError

_HH_MM = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


def text_field(value, field_name: str) -> str:
    """Trimmed string value of a JSON field; missing counts as empty."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string", fields={field_name: "type:string"})
    return value.strip()


def require_non_empty(value, field_name: str) -> str:
    value = text_field(value, field_name)
    if not value:
        raise ValidationError(f"{field_name} is required", fields={field_name: "required"})
    return value


def parse_hh_mm(value, field_name: str = "new_time") -> time:
    """Parse a 24-hour HH:MM string (the hour may have one digit)."""
    match = _HH_MM.match(text_field(value, field_name))
    if not match:
        raise ValidationError(
            "Invalid time format, use HH:MM (e.g. 17:30)",
            fields={field_name: "format:HH:MM"},
        )
    return time(int(match.group(1)), int(match.group(2)))
