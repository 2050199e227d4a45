from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

UTC = timezone.utc


def now_utc_iso() -> str:
    return datetime.now(UTC).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def new_snapshot_id() -> str:
    return f"snap-{datetime.now(UTC).strftime('%Y%m%d')}-{uuid4().hex[:8]}"


def find_by_id(records: list[dict[str, Any]], record_id: str, kind: str) -> dict[str, Any]:
    for record in records:
        if isinstance(record, dict) and record.get("id") == record_id:
            return record
    raise ValueError(f"{kind} '{record_id}' not found in snapshot")


def normalize_snapshot(payload: dict[str, Any]) -> dict[str, Any]:
    """Validate an incoming snapshot and fill in id/timestamp if missing."""
    jobs = payload.get("jobs", [])
    technicians = payload.get("technicians", [])
    if not isinstance(jobs, list) or not isinstance(technicians, list):
        raise ValueError("snapshot 'jobs' and 'technicians' must be lists")
    return {
        "snapshot_id": payload.get("snapshot_id") or new_snapshot_id(),
        "generated_at": payload.get("generated_at") or now_utc_iso(),
        "jobs": jobs,
        "technicians": technicians,
    }
