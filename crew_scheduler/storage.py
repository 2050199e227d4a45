"""Local cache of job/technician snapshots.

Each snapshot is a single file, ``<artifact_root>/snapshots/<snapshot_id>.json``.
The id of the most recently saved snapshot is kept in ``snapshots/LATEST``.
Snapshots are checked on the way in and again on the way out, so the tools
never run the conflict engine over a hand-edited or truncated file.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SNAPSHOT_DIR = "snapshots"
LATEST_POINTER = "LATEST"


def snapshot_dir(artifact_root: Path) -> Path:
    path = artifact_root / SNAPSHOT_DIR
    path.mkdir(parents=True, exist_ok=True)
    return path


def _snapshot_path(artifact_root: Path, snapshot_id: str) -> Path:
    if not snapshot_id or "/" in snapshot_id or "\\" in snapshot_id or snapshot_id.startswith("."):
        raise ValueError(f"invalid snapshot id {snapshot_id!r}")
    return snapshot_dir(artifact_root) / f"{snapshot_id}.json"


def check_snapshot(snapshot: Any, snapshot_id: str | None = None) -> dict[str, Any]:
    """Raise ValueError unless ``snapshot`` has the stored snapshot layout."""
    label = snapshot_id or "<unsaved>"
    if not isinstance(snapshot, dict):
        raise ValueError(f"snapshot '{label}' is not a JSON object")
    if snapshot_id is not None and snapshot.get("snapshot_id") != snapshot_id:
        raise ValueError(f"snapshot '{label}' records id {snapshot.get('snapshot_id')!r}")
    for key in ("jobs", "technicians"):
        records = snapshot.get(key)
        if not isinstance(records, list):
            raise ValueError(f"snapshot '{label}': '{key}' must be a list")
        if any(not isinstance(record, dict) for record in records):
            raise ValueError(f"snapshot '{label}': every entry in '{key}' must be an object")
    return snapshot


def summarize(snapshot: dict[str, Any]) -> dict[str, Any]:
    """Listing row for a snapshot: id, timestamp and record counts."""
    statuses: dict[str, int] = {}
    for job in snapshot["jobs"]:
        status = str(job.get("status") or "unknown")
        statuses[status] = statuses.get(status, 0) + 1
    return {
        "snapshot_id": snapshot["snapshot_id"],
        "generated_at": snapshot.get("generated_at"),
        "counts": {"jobs": len(snapshot["jobs"]), "technicians": len(snapshot["technicians"])},
        "job_statuses": statuses,
    }


def save_snapshot(artifact_root: Path, snapshot: dict[str, Any]) -> Path:
    check_snapshot(snapshot)
    sid = snapshot["snapshot_id"]
    path = _snapshot_path(artifact_root, sid)
    path.write_text(json.dumps(snapshot, indent=2, ensure_ascii=False, default=str), encoding="utf-8")
    (path.parent / LATEST_POINTER).write_text(sid, encoding="utf-8")
    return path


def _read(path: Path, snapshot_id: str) -> dict[str, Any]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"snapshot '{snapshot_id}' is not valid JSON: {exc}") from exc
    return check_snapshot(payload, snapshot_id)


def load_snapshot(artifact_root: Path, snapshot_id: str | None = None) -> dict[str, Any]:
    """Load a snapshot by id, or the most recently saved one.

    FileNotFoundError when there is nothing to load, ValueError when the
    stored file is corrupt or malformed.
    """
    if not snapshot_id:
        pointer = snapshot_dir(artifact_root) / LATEST_POINTER
        if not pointer.exists():
            raise FileNotFoundError("no snapshot has been saved yet")
        snapshot_id = pointer.read_text(encoding="utf-8").strip()
    path = _snapshot_path(artifact_root, snapshot_id)
    if not path.exists():
        raise FileNotFoundError(f"snapshot not found: {snapshot_id}")
    return _read(path, snapshot_id)


def list_snapshots(artifact_root: Path, limit: int = 20) -> list[dict[str, Any]]:
    """Summaries of readable snapshots, newest ``generated_at`` first."""
    rows: list[dict[str, Any]] = []
    for path in snapshot_dir(artifact_root).glob("*.json"):
        try:
            rows.append(summarize(_read(path, path.stem)))
        except (OSError, ValueError) as exc:
            logger.warning("Skipping snapshot %s: %s", path.name, exc)
    rows.sort(key=lambda row: row.get("generated_at") or "", reverse=True)
    return rows[:limit]
