from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import ValidationError

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^\d{2}:\d{2}(:\d{2})?$"
DATETIME_PATTERN = r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:\d{2})?$"

M = TypeVar("M", bound=BaseModel)


class StrictPayload(BaseModel):
    """Inbound JSON body. Unknown keys are rejected; camelCase aliases are accepted."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, str_strip_whitespace=True)


def parse_payload(model: Type[M], payload: Any) -> M:
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object", code="INVALID_PAYLOAD")
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(p) for p in first.get("loc", ())) or "body"
        raise ValidationError(f"{where}: {first.get('msg')}", code="INVALID_PAYLOAD")


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Invalid datetime {value!r}", code="INVALID_DATETIME")
