"""Technician day-off and crew assignment checks."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .conflicts import check_crew_conflict
from .crew import (
    DEFAULT_MAX_JOBS_PER_DAY,
    get_assigned_tech_ids,
    is_active_job,
    same_job,
)
from .models import AvailabilityResult, CrewCheckResult, CrewIssue
from .time_utils import to_reference
from .windows import extract_windows

WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def day_name(value: Any) -> str:
    """Lower-case English weekday name of ``value``, or "" if it is not a date."""
    dt = to_reference(value)
    if dt is None:
        return ""
    return WEEKDAY_NAMES[dt.weekday()]


def check_day_off(technician: dict[str, Any] | None, day: Any) -> AvailabilityResult:
    """A technician is off only when workingHours[<weekday>].enabled is explicitly False."""
    name = day_name(day)
    hours = technician.get("workingHours") if isinstance(technician, dict) else None
    if not name or not isinstance(hours, dict):
        return AvailabilityResult(available=True, day_name=name)

    entry = hours.get(name)
    if isinstance(entry, dict) and entry.get("enabled") is False:
        return AvailabilityResult(available=False, day_name=name)
    return AvailabilityResult(available=True, day_name=name)


def _max_jobs_per_day(tech: dict[str, Any]) -> int:
    try:
        return int(tech.get("maxJobsPerDay") or DEFAULT_MAX_JOBS_PER_DAY)
    except (TypeError, ValueError):
        return DEFAULT_MAX_JOBS_PER_DAY


def _starts_on(job: dict[str, Any], day: datetime) -> bool:
    for window in extract_windows(job):
        start = window.start.astimezone(day.tzinfo) if day.tzinfo else window.start.astimezone()
        if start.date() == day.date():
            return True
    return False


def count_jobs_on_day(
    tech_id: str,
    jobs: list[Any],
    day: Any,
    *,
    exclude: dict[str, Any] | None = None,
) -> int:
    """Active jobs for ``tech_id`` with a window starting on ``day``.

    When ``day`` is not a date every active assigned job counts.
    """
    target = to_reference(day)
    count = 0
    for job in jobs or []:
        if not isinstance(job, dict) or not is_active_job(job):
            continue
        if exclude is not None and same_job(job, exclude):
            continue
        if tech_id not in get_assigned_tech_ids(job):
            continue
        if target is None or _starts_on(job, target):
            count += 1
    return count


def check_crew_assignment(
    proposed_crew: list[dict[str, Any]] | None,
    existing_jobs: list[Any] | None,
    day: Any,
    team_members: list[dict[str, Any]] | None,
    *,
    target_job: dict[str, Any] | None = None,
    timezone: str | None = None,
) -> CrewCheckResult:
    """Check every proposed crew member for day off, double booking and daily capacity.

    Day off is an error and stops further checks for that member. Double
    booking (only when ``target_job`` is given) is an error. Reaching
    ``maxJobsPerDay`` is a warning. Members missing from ``team_members``
    are skipped.
    """
    result = CrewCheckResult()
    techs = {t.get("id"): t for t in team_members or [] if isinstance(t, dict) and t.get("id")}
    jobs = list(existing_jobs or [])

    for member in proposed_crew or []:
        tech_id = member.get("techId") if isinstance(member, dict) else None
        tech = techs.get(tech_id) if tech_id else None
        if tech is None:
            continue
        name = member.get("techName") or tech.get("name") or tech_id

        availability = check_day_off(tech, day)
        if not availability.available:
            result.conflicts.append(CrewIssue(
                tech_id=tech_id,
                tech_name=name,
                type="day_off",
                severity="error",
                message=f"{name} doesn't work on {availability.day_name}s",
            ))
            continue

        if target_job is not None:
            conflict = check_crew_conflict(tech_id, target_job, jobs, timezone)
            if conflict.has_conflict:
                result.conflicts.append(CrewIssue(
                    tech_id=tech_id,
                    tech_name=name,
                    type="double_booking",
                    severity="error",
                    message=conflict.reason or "",
                ))

        booked = count_jobs_on_day(tech_id, jobs, day, exclude=target_job)
        if booked >= _max_jobs_per_day(tech):
            result.conflicts.append(CrewIssue(
                tech_id=tech_id,
                tech_name=name,
                type="capacity",
                severity="warning",
                message=f"{name} already has {booked} jobs scheduled",
            ))

    return result
