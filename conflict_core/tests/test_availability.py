"""Tests for day-off checks and crew assignment validation."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from conflict_core.availability import (
    check_crew_assignment,
    check_day_off,
    count_jobs_on_day,
    day_name,
)

MONDAY = date(2024, 6, 3)
TUESDAY = date(2024, 6, 4)


def tech(tech_id="T1", **extra):
    t = {"id": tech_id, "name": f"Tech {tech_id}", "workingHours": {"monday": {"enabled": False}}}
    t.update(extra)
    return t


def legacy_job(job_id, tech_id, start, end, day="2024-06-04", **extra):
    job = {
        "id": job_id,
        "title": f"Job {job_id}",
        "status": "scheduled",
        "assignedTechId": tech_id,
        "scheduledDate": day,
        "scheduledTime": start,
        "scheduledEndTime": end,
    }
    job.update(extra)
    return job


class TestDayName:
    def test_names(self):
        assert day_name(MONDAY) == "monday"
        assert day_name("2024-06-09") == "sunday"
        assert day_name(datetime(2024, 6, 4, 23, 30)) == "tuesday"

    def test_aware_uses_own_calendar_date(self):
        late = datetime(2024, 6, 3, 23, 30, tzinfo=ZoneInfo("America/Los_Angeles"))
        assert day_name(late) == "monday"

    def test_invalid(self):
        assert day_name("not a date") == ""
        assert day_name(None) == ""


class TestCheckDayOff:
    def test_disabled_day(self):
        result = check_day_off(tech(), MONDAY)
        assert result.available is False
        assert result.day_name == "monday"

    def test_missing_day_is_available(self):
        result = check_day_off(tech(), TUESDAY)
        assert result.available is True
        assert result.day_name == "tuesday"

    def test_enabled_day(self):
        t = tech(workingHours={"monday": {"enabled": True, "start": "08:00", "end": "17:00"}})
        assert check_day_off(t, MONDAY).available is True

    @pytest.mark.parametrize("entry", [{}, {"enabled": None}, {"enabled": 0}, "off", None])
    def test_only_explicit_false_marks_day_off(self, entry):
        assert check_day_off(tech(workingHours={"monday": entry}), MONDAY).available is True

    def test_no_working_hours(self):
        assert check_day_off({"id": "T1"}, MONDAY).to_dict() == {"available": True, "dayName": "monday"}
        assert check_day_off(None, MONDAY).available is True

    def test_bad_date(self):
        assert check_day_off(tech(), "whenever").to_dict() == {"available": True, "dayName": ""}


class TestCountJobsOnDay:
    def test_counts_active_jobs_on_that_date(self):
        jobs = [
            legacy_job("A", "T1", "08:00", "09:00"),
            legacy_job("B", "T1", "10:00", "11:00"),
            legacy_job("C", "T1", "10:00", "11:00", day="2024-06-05"),
            legacy_job("D", "T1", "12:00", "13:00", status="cancelled"),
            legacy_job("E", "T2", "12:00", "13:00"),
        ]
        assert count_jobs_on_day("T1", jobs, TUESDAY) == 2

    def test_exclude(self):
        a = legacy_job("A", "T1", "08:00", "09:00")
        assert count_jobs_on_day("T1", [a], TUESDAY, exclude=a) == 0

    def test_without_date_counts_everything(self):
        jobs = [legacy_job("A", "T1", "08:00", "09:00"), legacy_job("B", "T1", "08:00", "09:00", day="2024-07-01")]
        assert count_jobs_on_day("T1", jobs, None) == 2


class TestCheckCrewAssignment:
    def test_day_off_is_error(self):
        crew = [{"techId": "T1", "techName": "Dana", "role": "lead"}]
        result = check_crew_assignment(crew, [], MONDAY, [tech()])
        assert result.has_conflicts is True
        assert result.has_errors is True
        [issue] = result.conflicts
        assert issue.type == "day_off"
        assert issue.message == "Dana doesn't work on mondays"

    def test_capacity_is_warning(self):
        team = [tech(maxJobsPerDay=2)]
        jobs = [legacy_job("A", "T1", "08:00", "09:00"), legacy_job("B", "T1", "10:00", "11:00")]
        result = check_crew_assignment([{"techId": "T1"}], jobs, TUESDAY, team)
        assert result.has_errors is False
        [issue] = result.conflicts
        assert issue.type == "capacity"
        assert issue.severity == "warning"
        assert issue.message == "Tech T1 already has 2 jobs scheduled"

    def test_default_capacity(self):
        jobs = [legacy_job(str(i), "T1", f"{8 + i}:00", f"{8 + i}:30") for i in range(3)]
        assert check_crew_assignment([{"techId": "T1"}], jobs, TUESDAY, [tech()]).has_conflicts is False

    def test_double_booking_with_target(self):
        existing = legacy_job("A", "T1", "09:00", "11:00")
        target = legacy_job("B", None, "10:00", "12:00")
        result = check_crew_assignment(
            [{"techId": "T1", "techName": "Dana"}], [existing, target], TUESDAY, [tech()], target_job=target,
        )
        [issue] = result.conflicts
        assert issue.type == "double_booking"
        assert issue.severity == "error"
        assert '"Job A"' in issue.message

    def test_unknown_and_blank_members_skipped(self):
        crew = [{"techId": "T9"}, {"techId": ""}, {"role": "helper"}]
        assert check_crew_assignment(crew, [], MONDAY, [tech()]).to_dict() == {
            "hasConflicts": False,
            "hasErrors": False,
            "conflicts": [],
        }

    def test_empty_inputs(self):
        assert check_crew_assignment(None, None, MONDAY, None).has_conflicts is False


class TestStoredTimestampDates:
    # Local midnight 2024-06-01 (a Saturday) in Europe/Berlin, stored as UTC 2024-05-31T22:00:00Z.
    SATURDAY_MIDNIGHT = {"seconds": 1717192800, "nanoseconds": 0}

    def test_day_off_uses_local_weekday(self, pin_local_tz):
        pin_local_tz("Europe/Berlin")
        result = check_day_off({"workingHours": {"saturday": {"enabled": False}}}, self.SATURDAY_MIDNIGHT)
        assert result.to_dict() == {"available": False, "dayName": "saturday"}

    def test_utc_iso_date_uses_local_weekday(self, pin_local_tz):
        pin_local_tz("America/New_York")
        assert day_name("2024-06-04T02:00:00Z") == "monday"

    def test_capacity_counts_local_day(self, pin_local_tz):
        pin_local_tz("America/New_York")
        late = {"id": "L", "assignedTechId": "T1", "scheduledTime": "2024-06-04T02:00:00Z"}
        assert count_jobs_on_day("T1", [late], "2024-06-03") == 1
        assert count_jobs_on_day("T1", [late], "2024-06-04") == 0
