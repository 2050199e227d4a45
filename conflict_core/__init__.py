"""Scheduling conflict engine for technician and crew assignments."""

from .availability import check_crew_assignment, check_day_off, count_jobs_on_day, day_name
from .conflicts import check_crew_conflict
from .crew import (
    CREW_ROLES,
    create_crew_member,
    get_assigned_tech_ids,
    get_crew_lead,
    get_crew_size,
    is_active_job,
    is_tech_assigned,
    job_has_crew,
    legacy_to_crew_format,
)
from .models import (
    AvailabilityResult,
    ConflictResult,
    CrewCheckResult,
    CrewIssue,
    ScheduleShape,
    TimeWindow,
    make_window,
)
from .time_utils import format_time, format_time_range, parse_instant, parse_time_of_day, to_reference
from .windows import classify_schedule, extract_windows, windows_overlap

__all__ = [
    "CREW_ROLES",
    "AvailabilityResult",
    "ConflictResult",
    "CrewCheckResult",
    "CrewIssue",
    "ScheduleShape",
    "TimeWindow",
    "check_crew_assignment",
    "check_crew_conflict",
    "check_day_off",
    "create_crew_member",
    "classify_schedule",
    "count_jobs_on_day",
    "day_name",
    "extract_windows",
    "format_time",
    "format_time_range",
    "get_assigned_tech_ids",
    "get_crew_lead",
    "get_crew_size",
    "is_active_job",
    "is_tech_assigned",
    "job_has_crew",
    "legacy_to_crew_format",
    "make_window",
    "parse_instant",
    "parse_time_of_day",
    "to_reference",
    "windows_overlap",
]
