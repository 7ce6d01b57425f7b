# stardom/logging_setup.py
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from stardom.settings import LogSettings, get_settings

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"
LOG_FILE_BYTES = 1_000_000
LOG_FILE_BACKUPS = 5

# handler names owned by this module; anything else on the root logger is left alone
FILE_HANDLER = "stardom-file"
CONSOLE_HANDLER = "stardom-console"


def _named(handler: logging.Handler, name: str, level, formatter: logging.Formatter) -> logging.Handler:
    handler.set_name(name)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(settings: Optional[LogSettings] = None) -> None:
    """Console at the configured level, full DEBUG trail in a rotating file.

    Calling it again swaps our handlers for fresh ones, so a reload or a
    changed LOG_LEVEL never doubles the output.
    """
    settings = settings or get_settings().logging
    settings.directory.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT)

    teardown_logging()
    root = logging.getLogger()
    log_file = settings.directory / settings.file_name
    root.addHandler(_named(
        RotatingFileHandler(log_file, maxBytes=LOG_FILE_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8"),
        FILE_HANDLER,
        logging.DEBUG,
        formatter,
    ))
    root.addHandler(_named(logging.StreamHandler(sys.stdout), CONSOLE_HANDLER, settings.level.upper(), formatter))
    root.setLevel(logging.DEBUG)

    logging.getLogger(__name__).debug("Logging to %s at console level %s", log_file, settings.level.upper())


def teardown_logging() -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() in (FILE_HANDLER, CONSOLE_HANDLER):
            root.removeHandler(handler)
            handler.close()
