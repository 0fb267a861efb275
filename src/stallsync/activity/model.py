from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..core.enums import ActivityType


@dataclass(frozen=True)
class StaffActivityLog:
    """Audit entry for an action taken on a staff member."""

    activity_type: ActivityType
    related_staff_id: str
    site_id: Optional[str]
    user_id: str
    user_name: str
    timestamp: datetime
    details: dict[str, Any] = field(default_factory=dict)
    log_id: Optional[int] = None
