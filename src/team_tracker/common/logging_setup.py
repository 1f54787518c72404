from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATEFMT = "%Y-%m-%d %H:%M:%S"

_configured = False


def setup_logging(app_name: str = "team_tracker", *, level: str = "INFO", log_dir: Optional[str] = None) -> Optional[Path]:
    """Configure the root logger once per process.

    Console always; a rotating file (5MB, keep 7) when log_dir is set.
    Returns the log file path, if any.
    """
    global _configured

    lvl = getattr(logging, (level or "INFO").upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(lvl)
    if _configured:
        return None

    formatter = logging.Formatter(FORMAT, DATEFMT)

    ch = logging.StreamHandler(sys.stdout)
    ch.setFormatter(formatter)
    ch.setLevel(lvl)
    root.addHandler(ch)

    logfile = None
    if log_dir:
        d = Path(log_dir).expanduser()
        d.mkdir(parents=True, exist_ok=True)
        logfile = d / f"{app_name}.log"
        fh = RotatingFileHandler(logfile, maxBytes=5_000_000, backupCount=7, encoding="utf-8")
        fh.setFormatter(formatter)
        fh.setLevel(lvl)
        root.addHandler(fh)

    _configured = True
    logging.getLogger(__name__).info("Logging initialized at %s; file: %s", logging.getLevelName(lvl), logfile)
    return logfile
