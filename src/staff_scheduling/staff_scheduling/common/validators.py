from __future__ import annotations

from typing import Optional

from ..core.constants import MAX_LIST_LIMIT
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} must not be empty")
    return value.strip()


def require_positive_id(value: int, field_name: str) -> int:
    if int(value) <= 0:
        raise ValidationError(f"{field_name} is invalid")
    return int(value)


def optional_text(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


def clamp_limit(limit: int) -> int:
    return max(1, min(int(limit), MAX_LIST_LIMIT))
