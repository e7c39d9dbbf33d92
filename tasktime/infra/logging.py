from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from tasktime.config import PROJECT_ROOT, Settings


def setup_logging(settings: Settings) -> list[logging.Handler]:
    log_dir = Path(settings.log_dir)
    if not log_dir.is_absolute():
        log_dir = PROJECT_ROOT / log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "tasktime.log"

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = RotatingFileHandler(log_file, maxBytes=2_000_000, backupCount=3)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    handlers: list[logging.Handler] = [file_handler, console_handler]
    root = logging.getLogger()
    root.setLevel(settings.log_level.upper())
    for handler in handlers:
        root.addHandler(handler)
    return handlers


def shutdown_logging(handlers: list[logging.Handler]) -> None:
    root = logging.getLogger()
    for handler in handlers:
        handler.flush()
        root.removeHandler(handler)
        handler.close()
