from __future__ import annotations

import re

from ..core.exceptions import ValidationError

_UID_RE = re.compile(r"^[0-9A-F]{8}$")


def require_non_empty(value: str | None, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required", code="MISSING_FIELD")
    return str(value).strip()


def normalize_badge_uid(value: str | None) -> str:
    """Strip whitespace and uppercase a badge UID (``"a1 b2 c3 d4"`` -> ``"A1B2C3D4"``)."""
    return re.sub(r"\s", "", value or "").upper()


def is_valid_badge_uid(value: str) -> bool:
    return bool(_UID_RE.match(value))
