# Filename: cloudnest/utils.py
from typing import Optional

from .exceptions import ValidationError


def parse_optional_id(value: Optional[str]) -> Optional[int]:
    """Read a folder reference sent by a client; "", "null" and None mean root level."""
    if value is None:
        return None
    value = value.strip()
    if value in ("", "null", "None"):
        return None
    if not value.isdigit():
        raise ValidationError(f"Invalid folder id: {value}")
    return int(value)
