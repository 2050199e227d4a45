"""Result and window types produced by the conflict engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class TimeWindow:
    """One contiguous booked interval. Always ``start < end``."""

    start: datetime
    end: datetime

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


def make_window(start: datetime | None, end: datetime | None) -> TimeWindow | None:
    """Build a window, or None when an end is missing or the range is empty/inverted."""
    if start is None or end is None:
        return None
    try:
        if not start < end:
            return None
    except TypeError:
        return None
    return TimeWindow(start=start, end=end)


class ScheduleShape(Enum):
    MULTI_DAY_BLOCKS = "multi_day_blocks"
    MULTI_DAY_SCHEDULE = "multi_day_schedule"
    SINGLE_INSTANT = "single_instant"
    LEGACY_SPLIT = "legacy_split"
    NONE = "none"


@dataclass
class ConflictResult:
    has_conflict: bool
    conflicting_job: dict[str, Any] | None = None
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"hasConflict": self.has_conflict}
        if self.has_conflict:
            out["conflictingJob"] = self.conflicting_job
            out["reason"] = self.reason
        return out


@dataclass
class AvailabilityResult:
    available: bool
    day_name: str

    def to_dict(self) -> dict[str, Any]:
        return {"available": self.available, "dayName": self.day_name}


@dataclass
class CrewIssue:
    tech_id: str
    tech_name: str
    type: str
    severity: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "techId": self.tech_id,
            "techName": self.tech_name,
            "type": self.type,
            "severity": self.severity,
            "message": self.message,
        }


@dataclass
class CrewCheckResult:
    conflicts: list[CrewIssue] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    @property
    def has_errors(self) -> bool:
        return any(c.severity == "error" for c in self.conflicts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "hasConflicts": self.has_conflicts,
            "hasErrors": self.has_errors,
            "conflicts": [c.to_dict() for c in self.conflicts],
        }
