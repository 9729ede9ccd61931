"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

CLAUDE_HOME = Path.home() / ".claude"
DEFAULT_TEAMS_DIR = CLAUDE_HOME / "teams"
DEFAULT_TASKS_DIR = CLAUDE_HOME / "tasks"

# On-disk layout
CONFIG_FILE_NAME = "config.json"
INBOX_DIR_NAME = "inboxes"
RECORD_SUFFIX = ".json"


PathLike = Union[str, Path]


def resolve_dir(env_value: PathLike | None, default: Path) -> Path:
    """Resolve a directory setting to an absolute path (``~`` expanded)."""
    if not env_value:
        return default

    candidate = Path(env_value).expanduser()
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Runtime settings, normally read from the environment."""

    teams_dir: Path = DEFAULT_TEAMS_DIR
    tasks_dir: Path = DEFAULT_TASKS_DIR
    api_host: str = "localhost"
    api_port: int = 3001
    cors_origins: tuple[str, ...] = ("http://localhost:5173",)
    emit_inbox_removed: bool = False
    send_timeout: float = 5.0  # seconds a subscriber may take to accept one event

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        origins = os.getenv("CORS_ORIGIN", "http://localhost:5173")
        return cls(
            teams_dir=resolve_dir(os.getenv("TEAMS_DIR"), DEFAULT_TEAMS_DIR),
            tasks_dir=resolve_dir(os.getenv("TASKS_DIR"), DEFAULT_TASKS_DIR),
            api_host=os.getenv("API_HOST", "localhost"),
            api_port=int(os.getenv("API_PORT", "3001")),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
            emit_inbox_removed=_env_flag("EMIT_INBOX_REMOVED"),
            send_timeout=float(os.getenv("SEND_TIMEOUT", "5.0")),
        )
