"""Shared field limits and validators for entity models."""
from typing import Optional

INT32_MAX = 2**31 - 1
INT64_MAX = 2**63 - 1


def blank_to_none(value: Optional[str]) -> Optional[str]:
    """Store empty optional text as missing."""
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value
