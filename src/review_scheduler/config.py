"""Runtime settings with environment overrides."""
import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_DB_PATH = str(Path.home() / ".review_scheduler" / "schedule.db")

_TRUTHY = {"1", "true", "yes", "on"}


class ConfigError(ValueError):
    """An environment variable holds a value the settings cannot use."""


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class Settings:
    db_path: str = DEFAULT_DB_PATH
    log_level: str = "WARNING"
    log_json: bool = False
    due_limit: int = 15

    @classmethod
    def load(cls) -> "Settings":
        """Construct settings from REVIEW_SCHEDULER_* environment variables."""
        return cls(
            db_path=os.environ.get("REVIEW_SCHEDULER_DB_PATH", cls.db_path),
            log_level=os.environ.get("REVIEW_SCHEDULER_LOG_LEVEL", cls.log_level).upper(),
            log_json=os.environ.get("REVIEW_SCHEDULER_LOG_JSON", "").strip().lower() in _TRUTHY,
            due_limit=_env_int("REVIEW_SCHEDULER_DUE_LIMIT", cls.due_limit),
        )
