from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from playstats.config import LoggingCfg

CONSOLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(cfg: LoggingCfg | None = None) -> None:
    """
    Configure the ``playstats`` logger tree once at startup.

    Console output always; a rotating file log (10MB x 5) when ``cfg.log_file``
    is set. With ``capture_warnings`` the ``warnings`` module (unknown tag
    warnings from ingestion) is routed through logging as well.
    """
    cfg = cfg or LoggingCfg()
    level = getattr(logging, cfg.level.upper())

    root = logging.getLogger("playstats")
    root.setLevel(level)
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(console)

    if cfg.log_file:
        Path(cfg.log_file).parent.mkdir(parents=True, exist_ok=True)
        fh = logging.handlers.RotatingFileHandler(
            cfg.log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(fh)

    if cfg.capture_warnings:
        logging.captureWarnings(True)
        logging.getLogger("py.warnings").handlers = root.handlers[:]

    root.debug("logging initialized level=%s file=%s", cfg.level, cfg.log_file)
