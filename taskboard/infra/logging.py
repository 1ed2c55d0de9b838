from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from taskboard.config import SETTINGS, PROJECT_ROOT

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(verbose: bool = False, log_dir: Path | None = None) -> Path:
    """Log everything at the configured level to a rotating file.

    The console only gets warnings unless ``verbose`` is set, so command
    output on stdout stays readable.
    """
    log_dir = log_dir or PROJECT_ROOT / SETTINGS.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "taskboard.log"
    level = logging.getLevelName(SETTINGS.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    file_handler = RotatingFileHandler(log_file, maxBytes=2_000_000, backupCount=3, encoding="utf-8")
    file_handler.setFormatter(formatter)
    file_handler.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level if verbose else logging.WARNING)

    logging.basicConfig(level=level, handlers=[file_handler, console_handler], force=True)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    return log_file
