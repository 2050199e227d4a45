"""Schedule window extraction across the historical job schedule formats.

A job record carries its schedule in one of four shapes, accumulated as
the scheduling UI evolved:

  - multi-day blocks:    isMultiDay + scheduleBlocks[{date, startTime, endTime?}]
  - multi-day schedule:  multiDaySchedule.days[{startTime, endTime}] (ISO)
  - single instant:      scheduledTime (ISO) + scheduledEndTime? / estimatedDuration?
  - legacy split fields: scheduledDate + scheduledTime/scheduledEndTime ("HH:MM")

Shapes are tried in SHAPE_PRECEDENCE order. Multi-day blocks are terminal
once matched; the multi-day schedule and single instant shapes fall
through to the next shape when they produce nothing usable.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from datetime import datetime, time
from typing import Any

from .models import ScheduleShape, TimeWindow, make_window
from .time_utils import (
    add_minutes,
    at_local_time,
    looks_like_iso,
    parse_instant,
    parse_time_of_day,
    to_reference,
)

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MINUTES = 120
DEFAULT_BLOCK_HOURS = 2
BUSINESS_DAY_START = time(7, 30)

SHAPE_PRECEDENCE = (
    ScheduleShape.MULTI_DAY_BLOCKS,
    ScheduleShape.MULTI_DAY_SCHEDULE,
    ScheduleShape.SINGLE_INSTANT,
    ScheduleShape.LEGACY_SPLIT,
)


def _non_empty_list(value: Any) -> bool:
    return isinstance(value, list) and len(value) > 0


def _schedule_days(job: dict[str, Any]) -> list[Any]:
    schedule = job.get("multiDaySchedule")
    if not isinstance(schedule, dict):
        return []
    days = schedule.get("days")
    return days if _non_empty_list(days) else []


def matching_shapes(job: dict[str, Any]) -> list[ScheduleShape]:
    """All shapes whose fields are present on ``job``, in precedence order."""
    if not isinstance(job, dict):
        return []
    present = {
        ScheduleShape.MULTI_DAY_BLOCKS: bool(job.get("isMultiDay")) and _non_empty_list(job.get("scheduleBlocks")),
        ScheduleShape.MULTI_DAY_SCHEDULE: bool(_schedule_days(job)),
        ScheduleShape.SINGLE_INSTANT: looks_like_iso(job.get("scheduledTime")),
        ScheduleShape.LEGACY_SPLIT: bool(job.get("scheduledDate")),
    }
    return [shape for shape in SHAPE_PRECEDENCE if present[shape]]


def classify_schedule(job: dict[str, Any]) -> ScheduleShape:
    shapes = matching_shapes(job)
    return shapes[0] if shapes else ScheduleShape.NONE


def duration_minutes(job: dict[str, Any]) -> float:
    """estimatedDuration in minutes; missing, zero or non-numeric -> default."""
    raw = job.get("estimatedDuration")
    if raw is None or isinstance(raw, bool):
        return float(DEFAULT_DURATION_MINUTES)
    try:
        minutes = float(raw)
    except (TypeError, ValueError):
        return float(DEFAULT_DURATION_MINUTES)
    if not math.isfinite(minutes) or minutes == 0:
        return float(DEFAULT_DURATION_MINUTES)
    return minutes


# ---- Per-shape extractors ---------------------------------------------------
# Each returns a list of windows, or None to fall through to the next shape.


def _from_blocks(job: dict[str, Any]) -> list[TimeWindow] | None:
    windows: list[TimeWindow] = []
    for index, block in enumerate(job.get("scheduleBlocks") or []):
        if not isinstance(block, dict):
            continue
        day = block.get("date")
        start_time = block.get("startTime")
        if not day or not start_time:
            continue
        start = parse_time_of_day(day, start_time)
        if block.get("endTime"):
            end = parse_time_of_day(day, block["endTime"])
        else:
            end = add_minutes(start, DEFAULT_BLOCK_HOURS * 60)
        window = make_window(start, end)
        if window is None:
            logger.debug("Skipping schedule block %d of job %s", index, job.get("id"))
            continue
        windows.append(window)
    return windows


def _from_day_schedule(job: dict[str, Any]) -> list[TimeWindow] | None:
    windows: list[TimeWindow] = []
    for day in _schedule_days(job):
        if not isinstance(day, dict) or not day.get("startTime") or not day.get("endTime"):
            continue
        window = make_window(parse_instant(day["startTime"]), parse_instant(day["endTime"]))
        if window is None:
            logger.debug("Skipping multi-day entry of job %s", job.get("id"))
            continue
        windows.append(window)
    return windows or None


def _from_single_instant(job: dict[str, Any]) -> list[TimeWindow] | None:
    start = parse_instant(job.get("scheduledTime"))
    if start is None:
        return None

    end: datetime | None = None
    end_raw = job.get("scheduledEndTime")
    if looks_like_iso(end_raw):
        end = parse_instant(end_raw)
    if end is None:
        end = add_minutes(start, duration_minutes(job))

    window = make_window(start, end)
    if window is None:
        logger.debug("Job %s has an empty or inverted scheduled window", job.get("id"))
        return []
    return [window]


def _from_legacy_fields(job: dict[str, Any]) -> list[TimeWindow] | None:
    day = to_reference(job.get("scheduledDate"))
    if day is None:
        logger.debug("Unparsable scheduledDate on job %s", job.get("id"))
        return []

    time_raw = job.get("scheduledTime")
    if time_raw and looks_like_iso(time_raw):
        start = parse_instant(time_raw)
    elif time_raw:
        start = parse_time_of_day(day, time_raw)
    else:
        start = at_local_time(day, BUSINESS_DAY_START.hour, BUSINESS_DAY_START.minute)

    end_raw = job.get("scheduledEndTime")
    if end_raw and looks_like_iso(end_raw):
        end = parse_instant(end_raw)
    elif end_raw:
        end = parse_time_of_day(day, end_raw)
    else:
        end = add_minutes(start, duration_minutes(job))

    window = make_window(start, end)
    return [window] if window else []


_EXTRACTORS: dict[ScheduleShape, Callable[[dict[str, Any]], list[TimeWindow] | None]] = {
    ScheduleShape.MULTI_DAY_BLOCKS: _from_blocks,
    ScheduleShape.MULTI_DAY_SCHEDULE: _from_day_schedule,
    ScheduleShape.SINGLE_INSTANT: _from_single_instant,
    ScheduleShape.LEGACY_SPLIT: _from_legacy_fields,
}


def extract_windows(job: Any) -> list[TimeWindow]:
    """Return the booked windows of ``job``. Never raises; unknown shapes give []."""
    for shape in matching_shapes(job):
        windows = _EXTRACTORS[shape](job)
        if windows is not None:
            return windows
    return []


def windows_overlap(a: TimeWindow | None, b: TimeWindow | None) -> bool:
    """Half-open overlap test: windows that only touch at an endpoint do not overlap."""
    if a is None or b is None:
        return False
    if a.start is None or a.end is None or b.start is None or b.end is None:
        return False
    return a.start < b.end and a.end > b.start
