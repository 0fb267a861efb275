from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from ..core.enums import ActivityType
from ..core.exceptions import StoreError
from ..staff.model import Actor
from .model import StaffActivityLog
from .repository import ActivityLogRepository

logger = logging.getLogger(__name__)


class StaffActivityLogger:
    """Best-effort audit trail: a failed log write never fails the action being logged."""

    def __init__(self, logs: ActivityLogRepository, *, clock: Callable[[], datetime] = datetime.now):
        self._logs = logs
        self._clock = clock

    def log(
        self,
        actor: Optional[Actor],
        activity_type: ActivityType,
        *,
        related_staff_id: str,
        site_id: Optional[str] = None,
        **details: Any,
    ) -> Optional[int]:
        if actor is None:
            logger.warning("Staff activity logging skipped, no actor: %s %s", activity_type.value, related_staff_id)
            return None

        entry = StaffActivityLog(
            activity_type=activity_type,
            related_staff_id=related_staff_id,
            site_id=site_id,
            user_id=actor.uid,
            user_name=actor.name or "Unknown User",
            timestamp=self._clock(),
            details={k: v for k, v in details.items() if v is not None},
        )
        try:
            return self._logs.add(entry)
        except StoreError as exc:
            logger.error("Failed to log staff activity %s for %s: %s", activity_type.value, related_staff_id, exc)
            return None

    def recent(self, *, site_id: Optional[str] = None, staff_id: Optional[str] = None, limit: int = 100):
        return self._logs.list_recent(site_id=site_id, staff_id=staff_id, limit=limit)
