"""
Process-wide logging setup.

Modules log through `logging.getLogger(__name__)`; this only installs the
root handler once, at application start.
"""
from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    resolved = getattr(logging, (level or "INFO").upper(), logging.INFO)
    root.setLevel(resolved)

    # Avoid adding handlers multiple times (reloads, test sessions)
    if any(getattr(h, "_salesup", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    handler._salesup = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    # SQLAlchemy echoes every statement at INFO; keep it quiet unless asked.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
