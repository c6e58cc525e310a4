from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence

from ..core.exceptions import DomainError, ValidationError
from .model import AttendanceRecord, ManualEvent

logger = logging.getLogger(__name__)


@dataclass
class BulkResult:
    successful: list[dict[str, Any]] = field(default_factory=list)
    failed: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "successful": self.successful,
            "failed": self.failed,
            "summary": {
                "total": len(self.successful) + len(self.failed),
                "successful": len(self.successful),
                "failed": len(self.failed),
            },
        }


class BulkOperationProcessor:
    """Runs manual events one by one, in input order.

    Not transactional: an item that fails leaves the earlier ones in place. Every
    input item ends up in exactly one of the two result lists.
    """

    def __init__(
        self,
        parse: Callable[[Mapping[str, Any]], ManualEvent],
        submit: Callable[[ManualEvent], AttendanceRecord],
    ):
        self._parse = parse
        self._submit = submit

    def process(self, items: Sequence[Any] | None) -> BulkResult:
        if not items:
            raise ValidationError("Records array is required and must not be empty", code="EMPTY_BATCH")

        result = BulkResult()
        for index, item in enumerate(items):
            try:
                event = item if isinstance(item, ManualEvent) else self._parse(item)
                record = self._submit(event)
            except DomainError as e:
                result.failed.append({"index": index, "item": _echo(item), "code": e.code, "reason": e.message})
                continue
            except Exception:
                logger.exception("Bulk item %s failed unexpectedly", index)
                result.failed.append(
                    {"index": index, "item": _echo(item), "code": "SYSTEM_ERROR", "reason": "Unexpected error"}
                )
                continue
            result.successful.append({"index": index, "item": _echo(item), "record": record.to_dict()})

        logger.info("Bulk run: %s ok, %s failed", len(result.successful), len(result.failed))
        return result


def _echo(item: Any) -> Any:
    if isinstance(item, ManualEvent):
        return {
            "employee_id": item.employee_id,
            "date": item.work_date.isoformat(),
            "time": item.clock_time.strftime("%H:%M:%S"),
            "action": item.action.value,
            "notes": item.notes,
        }
    return item
