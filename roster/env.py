import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_DB_PATH = "employee.db"
DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    db_path: Path
    log_level: str
    log_dir: Path
    log_to_file: bool
    seed_on_empty: bool


def load_env() -> None:
    """Load .env from the working directory if present.

    Variables already set in the environment win over the file.
    """
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() not in _FALSE_VALUES


def get_settings() -> Settings:
    """Read ROSTER_* settings from the environment."""
    level = os.getenv("ROSTER_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    if level not in LOG_LEVELS:
        level = DEFAULT_LOG_LEVEL
    return Settings(
        db_path=Path(os.getenv("ROSTER_DB") or DEFAULT_DB_PATH),
        log_level=level,
        log_dir=Path(os.getenv("ROSTER_LOG_DIR") or DEFAULT_LOG_DIR),
        log_to_file=_flag("ROSTER_LOG_FILE", True),
        seed_on_empty=_flag("ROSTER_SEED", True),
    )
