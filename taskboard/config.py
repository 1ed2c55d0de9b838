from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _resolve_project_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]


PROJECT_ROOT = _resolve_project_root()


def load_env() -> None:
    """Load ``.env`` and then ``.env.<APP_ENV>`` on top of it.

    The working directory wins over the project root for both files.
    """
    env_name = os.getenv("APP_ENV", "development")
    candidates = [Path.cwd(), PROJECT_ROOT]
    for filename, override in ((".env", False), (f".env.{env_name}", True)):
        for base in candidates:
            env_path = base / filename
            if env_path.exists():
                load_dotenv(env_path, override=override)
                break


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str = "INFO"
    log_dir: str = "logs"
    default_owner: str | None = None


def _env(name: str) -> str | None:
    return os.getenv(name, "").strip() or None


def load_settings() -> Settings:
    load_env()
    return Settings(
        database_url=_env("DATABASE_URL") or f"sqlite:///{PROJECT_ROOT / 'taskboard.db'}",
        log_level=_env("LOG_LEVEL") or "INFO",
        log_dir=_env("LOG_DIR") or "logs",
        default_owner=_env("TASKBOARD_OWNER"),
    )


SETTINGS = load_settings()
