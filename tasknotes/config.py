# tasknotes/config.py

"""Settings loaded from environment variables.

Every variable carries the TASKNOTES_ prefix. Values are read on each
``load_settings()`` call so tests can switch them with monkeypatch.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "TASKNOTES"


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Optional[Path]) -> Optional[Path]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True)
class Settings:
    db_path: Path
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    host: str = "127.0.0.1"
    port: int = 8000

    @property
    def db_url(self) -> str:
        return f"sqlite:///{self.db_path}"


def load_settings() -> Settings:
    db_path = _env_path(_k("DB_PATH"), Path.home() / ".tasknotes" / "tasknotes.db")
    return Settings(
        db_path=db_path,
        log_level=(os.getenv(_k("LOG_LEVEL")) or "INFO").strip().upper(),
        log_file=_env_path(_k("LOG_FILE"), None),
        host=os.getenv(_k("HOST")) or "127.0.0.1",
        port=_env_int(_k("PORT"), 8000),
    )
