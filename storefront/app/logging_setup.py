from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from pathlib import Path

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE")  # ex: /var/log/storefront/storefront.log

_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def setup_logging(level: str | None = None, log_file: str | None = None) -> None:
    """Console + fichier rotatif optionnel, sans doublon de handlers."""
    level_name = (level or LOG_LEVEL).upper()
    log_file = log_file or LOG_FILE

    root = logging.getLogger()
    root.setLevel(level_name)
    fmt = logging.Formatter(_FORMAT)

    # type exact : FileHandler / handlers pytest sont des sous-classes de StreamHandler
    has_console = any(
        type(h) is logging.StreamHandler and getattr(h, "stream", None) is sys.stderr
        for h in root.handlers
    )
    if not has_console:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(fmt)
        root.addHandler(console)

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        already = any(
            isinstance(h, logging.handlers.RotatingFileHandler)
            and getattr(h, "baseFilename", "") == os.path.abspath(path)
            for h in root.handlers
        )
        if not already:
            handler = logging.handlers.RotatingFileHandler(
                path, maxBytes=5_000_000, backupCount=3, encoding="utf-8"
            )
            handler.setFormatter(fmt)
            root.addHandler(handler)

    # uvicorn garde ses propres handlers, on aligne seulement le niveau
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level_name)
