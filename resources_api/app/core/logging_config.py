"""
Logging setup for the resources service.

``LOG_LEVEL`` sets the level of the ``resources_api`` package loggers;
``LOG_FILE``, when set, adds a file next to the console output.  Records
from ``urllib3`` (the transport under the contact and rate lookups) are
kept at WARNING unless the service itself runs at DEBUG.

The handlers are attached to the root logger once and carry a name, so a
second ``create_app()`` in the same process only adjusts levels.
"""

import logging
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "resources_api"
CONSOLE_HANDLER = "resources_api.console"
FILE_HANDLER = "resources_api.file"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _level(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> logging.Logger:
    """Configure logging from the ``LOG_LEVEL``/``LOG_FILE`` settings.

    Unknown level names fall back to INFO.  Returns the package logger.
    """
    numeric = _level(level)
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(numeric)
    logging.getLogger("urllib3").setLevel(logging.DEBUG if numeric <= logging.DEBUG else logging.WARNING)

    root = logging.getLogger()
    names = {handler.get_name() for handler in root.handlers}
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    if CONSOLE_HANDLER not in names:
        console_handler = logging.StreamHandler()
        console_handler.set_name(CONSOLE_HANDLER)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        if root.level == logging.WARNING:
            root.setLevel(logging.INFO)

    if logfile and FILE_HANDLER not in names:
        log_path = Path(logfile).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.set_name(FILE_HANDLER)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        package_logger.info("Writing service log to %s", log_path)

    return package_logger
