"""Settings loaded from environment variables (+ optional .env).

`PORT` keeps its conventional unprefixed name; everything else lives
under the `TRACKER_` prefix.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "TRACKER"
PROJECT_ROOT = Path(__file__).resolve().parent.parent

DEFAULT_PORT = 3000


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    debug: bool

    data_file: Path
    static_dir: Path

    log_level: str
    log_file: Optional[Path]


def load_settings() -> Settings:
    load_dotenv(override=False)

    log_file_raw = _env(_k("LOG_FILE")).strip()
    return Settings(
        host=_env(_k("HOST"), "127.0.0.1"),
        port=_env_int("PORT", DEFAULT_PORT),
        debug=_env_bool(_k("DEBUG"), False),
        data_file=_env_path(_k("DATA_FILE"), PROJECT_ROOT / "data.json"),
        static_dir=_env_path(_k("STATIC_DIR"), PROJECT_ROOT / "frontend"),
        log_level=_env(_k("LOG_LEVEL"), "INFO").upper(),
        log_file=Path(log_file_raw).expanduser() if log_file_raw else None,
    )
