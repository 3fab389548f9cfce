from __future__ import annotations

import os
from dataclasses import dataclass


_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    log_json: bool = False
    session_name: str = "deliberate-thinking"

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from the environment.

        - DELIBERATE_LOG_LEVEL: root level for the deliberate_thinking loggers
        - DELIBERATE_LOG_JSON: 1/true/yes for JSON lines instead of console output
        - DELIBERATE_SESSION_NAME: bound into every log event as ``session``
        """

        level = (os.getenv("DELIBERATE_LOG_LEVEL", "") or "").strip().upper() or cls.log_level
        log_json = (os.getenv("DELIBERATE_LOG_JSON", "") or "").strip().lower() in _TRUE
        name = (os.getenv("DELIBERATE_SESSION_NAME", "") or "").strip() or cls.session_name
        return cls(log_level=level, log_json=log_json, session_name=name)
