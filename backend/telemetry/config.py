from __future__ import annotations

import os
from pathlib import Path


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def telemetry_path() -> Path:
    return Path(
        os.getenv("VGRID_TELEMETRY_PATH")
        or (_repo_root() / "data" / "telemetry" / "selection.duckdb")
    )


def telemetry_enabled() -> bool:
    v = (os.getenv("VGRID_TELEMETRY") or "1").strip().lower()
    return v not in {"0", "false", "no", "off"}


def log_level() -> str:
    return (os.getenv("VGRID_LOG_LEVEL") or "INFO").strip().upper()


def log_file() -> Path | None:
    v = (os.getenv("VGRID_LOG_FILE") or "").strip()
    return Path(v) if v else None
