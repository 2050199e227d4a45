"""Double-booking check for assigning a technician to a job."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from .crew import get_assigned_tech_ids, is_active_job, same_job
from .models import ConflictResult, TimeWindow
from .time_utils import format_time_range
from .windows import extract_windows, windows_overlap

logger = logging.getLogger(__name__)


def job_label(job: dict[str, Any]) -> str:
    return str(job.get("title") or job.get("description") or "Untitled job")


def conflict_reason(job: dict[str, Any], window: TimeWindow, timezone: str | None = None) -> str:
    time_range = format_time_range(window.start, window.end, timezone)
    return f'Technician is already assigned to "{job_label(job)}" ({time_range})'


def candidate_jobs(
    tech_id: str,
    target_job: dict[str, Any],
    all_jobs: Iterable[Any],
) -> Iterator[dict[str, Any]]:
    """Active jobs other than ``target_job`` that ``tech_id`` is assigned to, in input order."""
    for job in all_jobs:
        if not isinstance(job, dict):
            continue
        if same_job(job, target_job) or not is_active_job(job):
            continue
        if tech_id in get_assigned_tech_ids(job):
            yield job


def check_crew_conflict(
    tech_id: str | None,
    target_job: dict[str, Any] | None,
    all_jobs: Iterable[Any] | None,
    timezone: str | None = None,
) -> ConflictResult:
    """Check whether assigning ``tech_id`` to ``target_job`` double-books them.

    The first overlapping pair wins (candidate jobs in input order, windows
    in extraction order). ``timezone`` only affects the reason text.
    Missing arguments and unresolvable schedules report no conflict.
    """
    if not tech_id or not target_job or not all_jobs or not isinstance(target_job, dict):
        return ConflictResult(has_conflict=False)

    target_windows = extract_windows(target_job)
    if not target_windows:
        logger.debug("Job %s has no resolvable schedule, skipping conflict check", target_job.get("id"))
        return ConflictResult(has_conflict=False)

    for job in candidate_jobs(tech_id, target_job, all_jobs):
        job_windows = extract_windows(job)
        for t_window in target_windows:
            for j_window in job_windows:
                if windows_overlap(t_window, j_window):
                    return ConflictResult(
                        has_conflict=True,
                        conflicting_job=job,
                        reason=conflict_reason(job, j_window, timezone),
                    )

    return ConflictResult(has_conflict=False)
