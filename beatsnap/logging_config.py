from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

from beatsnap.config import CONFIG_DIR

if TYPE_CHECKING:
    from pathlib import Path

LOG_FILE = CONFIG_DIR / "logs" / "beatsnap.log"

# 500 KB per file, 2 backups
_MAX_BYTES = 500_000
_BACKUP_COUNT = 2

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(*, console_level: int | str = logging.INFO, log_file: Path | None = None) -> None:
    """Attach console and rotating file handlers to the root logger.

    The file always records DEBUG, which is where the snap engine reports each
    directional seek. No-op if the root logger already has handlers.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    path = log_file or LOG_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)

    handlers: list[tuple[logging.Handler, int | str]] = [
        (
            RotatingFileHandler(path, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8"),
            logging.DEBUG,
        ),
        (logging.StreamHandler(), console_level),
    ]
    for handler, level in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    root.setLevel(logging.DEBUG)
