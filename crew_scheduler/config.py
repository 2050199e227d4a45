from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


@dataclass(frozen=True)
class RuntimeConfig:
    artifact_root: Path
    default_timezone: str | None


def load_env(dotenv_path: str | Path | None = None) -> None:
    path = Path(dotenv_path) if dotenv_path else None
    if path and path.exists():
        load_dotenv(path)
        return
    load_dotenv()


def runtime_config() -> RuntimeConfig:
    artifact_root = Path(os.getenv("CREW_SCHEDULER_ARTIFACT_DIR", "./artifacts")).expanduser().resolve()
    default_timezone = os.getenv("CREW_SCHEDULER_TIMEZONE", "").strip() or None
    artifact_root.mkdir(parents=True, exist_ok=True)
    return RuntimeConfig(artifact_root=artifact_root, default_timezone=default_timezone)
