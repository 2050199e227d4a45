"""Technician-assignment helpers that understand both crew and single-tech job formats."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from .time_utils import parse_instant

INACTIVE_STATUSES = frozenset({"cancelled", "completed"})

DEFAULT_MAX_JOBS_PER_DAY = 4


def job_has_crew(job: dict[str, Any]) -> bool:
    crew = job.get("assignedCrew")
    return isinstance(crew, list) and len(crew) > 0


def get_assigned_tech_ids(job: dict[str, Any]) -> list[str]:
    """Return technician ids from the first non-empty assignment source.

    Sources, in order: ``assignedCrewIds``, ``assignedCrew[*].techId``,
    ``assignedTechId``.
    """
    crew_ids = job.get("assignedCrewIds")
    if isinstance(crew_ids, list) and crew_ids:
        return [tid for tid in crew_ids if tid]

    if job_has_crew(job):
        ids = [m.get("techId") for m in job["assignedCrew"] if isinstance(m, dict)]
        ids = [tid for tid in ids if tid]
        if ids:
            return ids

    tech_id = job.get("assignedTechId")
    return [tech_id] if tech_id else []


def is_tech_assigned(job: dict[str, Any], tech_id: str) -> bool:
    return tech_id in get_assigned_tech_ids(job)


def get_crew_size(job: dict[str, Any]) -> int:
    return len(get_assigned_tech_ids(job))


def get_crew_lead(crew: list[dict[str, Any]] | None) -> dict[str, Any] | None:
    if not crew:
        return None
    for member in crew:
        if member.get("role") == "lead":
            return member
    return crew[0]


def is_active_job(job: dict[str, Any]) -> bool:
    status = str(job.get("status") or "").strip().lower()
    return status not in INACTIVE_STATUSES


def same_job(job: dict[str, Any], other: dict[str, Any]) -> bool:
    """Identity by object or by id. Two id-less records are never the same job."""
    if job is other:
        return True
    job_id = job.get("id")
    return job_id is not None and job_id == other.get("id")


DEFAULT_MEMBER_COLOR = "#64748B"

CREW_ROLES = (
    {"id": "lead", "label": "Lead Tech", "description": "Primary technician, customer contact", "color": "#10B981"},
    {"id": "helper", "label": "Helper", "description": "Assists the lead technician", "color": "#3B82F6"},
    {"id": "apprentice", "label": "Apprentice", "description": "Learning, supervised work", "color": "#8B5CF6"},
    {"id": "specialist", "label": "Specialist", "description": "Specific skill needed for job", "color": "#F59E0B"},
)
CREW_ROLE_IDS = frozenset(role["id"] for role in CREW_ROLES)


def _iso_utc(instant: datetime) -> str:
    return instant.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def create_crew_member(
    tech: dict[str, Any],
    role: str = "helper",
    vehicle: dict[str, Any] | None = None,
    *,
    assigned_at: datetime | None = None,
) -> dict[str, Any]:
    """Build an ``assignedCrew`` entry for ``tech``.

    Raises ValueError for a role outside CREW_ROLES.
    """
    if role not in CREW_ROLE_IDS:
        raise ValueError(f"unknown crew role {role!r}")
    vehicle = vehicle or {}
    return {
        "techId": tech.get("id"),
        "techName": tech.get("name"),
        "role": role,
        "vehicleId": vehicle.get("id") or None,
        "vehicleName": vehicle.get("name") or None,
        "color": tech.get("color") or DEFAULT_MEMBER_COLOR,
        "assignedAt": _iso_utc(assigned_at or datetime.now(timezone.utc)),
    }


def legacy_to_crew_format(job: dict[str, Any]) -> list[dict[str, Any]]:
    """The job's crew, converting a single ``assignedTechId`` into a one-member crew led by that tech."""
    if job_has_crew(job):
        return job["assignedCrew"]
    tech_id = job.get("assignedTechId")
    if not tech_id:
        return []
    assigned_at = parse_instant(job.get("assignedAt")) or datetime.now(timezone.utc)
    return [{
        "techId": tech_id,
        "techName": job.get("assignedTechName") or "Technician",
        "role": "lead",
        "vehicleId": job.get("assignedVehicleId") or None,
        "vehicleName": job.get("assignedVehicleName") or None,
        "color": DEFAULT_MEMBER_COLOR,
        "assignedAt": _iso_utc(assigned_at),
    }]
