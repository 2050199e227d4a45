"""crew-scheduler MCP server.

Exposes the scheduling conflict engine (conflict_core) as tools over
locally cached job/technician snapshots. Snapshots are supplied by the
caller; nothing here writes back to the job store.
"""
from __future__ import annotations

import argparse
import json
import logging
import os
from typing import Any

from mcp.server.fastmcp import FastMCP

from conflict_core import (
    check_crew_assignment as _check_crew_assignment,
    check_crew_conflict as _check_crew_conflict,
    check_day_off as _check_day_off,
    classify_schedule,
    extract_windows,
)
from conflict_core.time_utils import resolve_zone

from .config import load_env, runtime_config
from .storage import (
    list_snapshots as _list_snapshots,
    load_snapshot as _load_snapshot,
    save_snapshot as _save_snapshot,
)
from .utils import find_by_id, normalize_snapshot

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "crew-scheduler",
    host=os.getenv("HOST", "127.0.0.1"),
    port=int(os.getenv("PORT", "8000")),
    instructions=(
        "Scheduling conflict checks for field-service technicians and crews. "
        "Detects double bookings and days off against a stored snapshot of "
        "jobs and technicians. All checks are read-only."
    ),
)

_ENV_FILE: str | None = None


def _config():
    load_env(_ENV_FILE or os.getenv("CREW_SCHEDULER_ENV_FILE"))
    return runtime_config()


def _snapshot(snapshot_id: str | None) -> dict[str, Any]:
    return _load_snapshot(_config().artifact_root, snapshot_id=snapshot_id)


# -- Snapshots --

@mcp.tool()
def save_snapshot(snapshot_json: str) -> dict[str, Any]:
    """Store a snapshot of jobs and technicians for later checks.

    Accepts {"jobs": [...], "technicians": [...]} as a JSON string.
    Returns the snapshot_id and the file it was written to.
    """
    snapshot = normalize_snapshot(json.loads(snapshot_json))
    target = _save_snapshot(_config().artifact_root, snapshot)
    logger.info("Saved snapshot %s (%d jobs)", snapshot["snapshot_id"], len(snapshot["jobs"]))
    return {"snapshot_id": snapshot["snapshot_id"], "path": str(target)}


@mcp.tool()
def list_snapshots(limit: int = 20) -> list[dict[str, Any]]:
    """List stored snapshots (id, timestamp, record counts), newest first."""
    return _list_snapshots(_config().artifact_root, limit=limit)


# -- Conflict engine --

@mcp.tool()
def job_windows(job_id: str, snapshot_id: str | None = None) -> dict[str, Any]:
    """Show which schedule format a job uses and the time windows it books."""
    job = find_by_id(_snapshot(snapshot_id).get("jobs", []), job_id, "job")
    return {
        "job_id": job_id,
        "shape": classify_schedule(job).value,
        "windows": [w.to_dict() for w in extract_windows(job)],
    }


@mcp.tool()
def check_crew_conflict(
    tech_id: str,
    job_id: str,
    snapshot_id: str | None = None,
    timezone: str | None = None,
) -> dict[str, Any]:
    """Check whether assigning a technician to a job double-books them.

    The reason text is formatted in `timezone` (IANA name), falling back to
    CREW_SCHEDULER_TIMEZONE and then server local time.
    """
    snapshot = _snapshot(snapshot_id)
    jobs = snapshot.get("jobs", [])
    job = find_by_id(jobs, job_id, "job")
    tz = timezone or _config().default_timezone
    return _check_crew_conflict(tech_id, job, jobs, tz).to_dict()


@mcp.tool()
def check_day_off(tech_id: str, date: str, snapshot_id: str | None = None) -> dict[str, Any]:
    """Check whether a technician is scheduled off on a date (YYYY-MM-DD)."""
    tech = find_by_id(_snapshot(snapshot_id).get("technicians", []), tech_id, "technician")
    return _check_day_off(tech, date).to_dict()


@mcp.tool()
def check_crew_assignment(
    job_id: str,
    tech_ids: list[str],
    date: str | None = None,
    snapshot_id: str | None = None,
    timezone: str | None = None,
) -> dict[str, Any]:
    """Validate a proposed crew for a job: days off, double bookings and daily capacity.

    `date` defaults to the day the job's first scheduled window starts on,
    read in `timezone` (or the configured default, else host local time).
    """
    snapshot = _snapshot(snapshot_id)
    jobs = snapshot.get("jobs", [])
    job = find_by_id(jobs, job_id, "job")
    technicians = snapshot.get("technicians", [])
    tz = timezone or _config().default_timezone

    day: Any = date
    if day is None:
        windows = extract_windows(job)
        if not windows:
            raise ValueError(f"job '{job_id}' has no resolvable schedule; pass a date")
        zone = resolve_zone(tz)
        day = windows[0].start.astimezone(zone) if zone else windows[0].start.astimezone()

    by_id = {t.get("id"): t for t in technicians if isinstance(t, dict)}
    crew = [
        {"techId": tid, "techName": (by_id.get(tid) or {}).get("name") or tid}
        for tid in tech_ids
    ]
    result = _check_crew_assignment(
        crew,
        jobs,
        day,
        technicians,
        target_job=job,
        timezone=tz,
    )
    return result.to_dict()


# -- Server entrypoints --

async def _run_http() -> None:
    import uvicorn
    from starlette.middleware.base import BaseHTTPMiddleware
    from starlette.responses import JSONResponse, PlainTextResponse
    from starlette.routing import Route

    api_key = os.getenv("MCP_API_KEY")

    class BearerAuth(BaseHTTPMiddleware):
        async def dispatch(self, request, call_next):
            if request.url.path == "/health":
                return await call_next(request)
            auth = request.headers.get("authorization", "")
            if not auth.startswith("Bearer ") or auth[7:] != api_key:
                return JSONResponse({"error": "unauthorized"}, status_code=401)
            return await call_next(request)

    starlette_app = mcp.streamable_http_app()

    if api_key:
        starlette_app.add_middleware(BearerAuth)

    starlette_app.routes.append(
        Route("/health", lambda r: PlainTextResponse("ok"))
    )

    config = uvicorn.Config(
        starlette_app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
        log_level="info",
    )
    await uvicorn.Server(config).serve()


def main() -> None:
    global _ENV_FILE

    parser = argparse.ArgumentParser(description="Run crew-scheduler MCP server")
    parser.add_argument("--env-file", default=None, help="Path to .env file")
    parser.add_argument(
        "--transport",
        default=None,
        choices=["stdio", "sse", "streamable-http"],
        help="MCP transport (default: streamable-http when PORT is set, else stdio)",
    )
    args = parser.parse_args()
    _ENV_FILE = args.env_file

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    transport = args.transport
    if transport is None:
        transport = "streamable-http" if os.getenv("PORT") else "stdio"

    if transport == "streamable-http":
        import anyio
        anyio.run(_run_http)
    else:
        mcp.run(transport=transport)


if __name__ == "__main__":
    main()
