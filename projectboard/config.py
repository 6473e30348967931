"""Environment-driven settings.

    PROJECTBOARD_LOG_LEVEL   log level name (default INFO)
    PROJECTBOARD_LOG_FILE    optional path for JSON-lines logs
    PROJECTBOARD_AUTO_LOGIN  email logged in at start; empty disables
    PROJECTBOARD_SEED        load the demo dataset (default 1)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .seed import SEED_ADMIN_EMAIL

LOG_LEVEL_ENV = "PROJECTBOARD_LOG_LEVEL"
LOG_FILE_ENV = "PROJECTBOARD_LOG_FILE"
AUTO_LOGIN_ENV = "PROJECTBOARD_AUTO_LOGIN"
SEED_ENV = "PROJECTBOARD_SEED"

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class Settings:
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    auto_login_email: Optional[str] = SEED_ADMIN_EMAIL
    seed: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Read settings from ``environ`` (defaults to ``os.environ``)."""
        env = os.environ if environ is None else environ

        log_file = env.get(LOG_FILE_ENV)
        auto_login = env.get(AUTO_LOGIN_ENV, SEED_ADMIN_EMAIL).strip()

        return cls(
            log_level=env.get(LOG_LEVEL_ENV, "INFO").strip().upper() or "INFO",
            log_file=Path(log_file).expanduser() if log_file else None,
            auto_login_email=auto_login or None,
            seed=env.get(SEED_ENV, "1").strip().lower() not in _FALSE_VALUES,
        )
