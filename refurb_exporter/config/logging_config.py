# refurb_exporter/config/logging_config.py

"""Logging for the exporter's scrape and serve paths.

``DEBUG`` (or ``--debug``) is the only switch. When it is off the
exporter stays quiet: failed fetches, missing bootstraps and 500s are
still written with their tracebacks, but per-request fetch and gauge
chatter is dropped. Records go to stderr and to a ``run_<timestamp>.log``
under ``logs/``. Uvicorn keeps its own loggers; its level is chosen in
``main.py`` from the same flag.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from refurb_exporter.config.settings import Settings

# Record layouts: the file keeps call sites, the console only the message

_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(funcName)s:%(lineno)d | "
    "%(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(debug: bool | None = None) -> Path:
    """Initialise the root ``refurb_exporter`` logger for the current run.

    Args:
        debug: Enable INFO/DEBUG output. Defaults to ``Settings.DEBUG``.

    Returns:
        The :class:`~pathlib.Path` to the log file created for this run.
    """
    if debug is None:
        debug = Settings.DEBUG
    level = logging.DEBUG if debug else logging.WARNING

    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"run_{timestamp}.log"

    # Every refurb_exporter.* logger propagates here
    root_logger = logging.getLogger("refurb_exporter")
    root_logger.setLevel(level)

    # Already configured: only the level may change
    if root_logger.handlers:
        for handler in root_logger.handlers:
            handler.setLevel(level)
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(
        logging.Formatter(_DETAILED_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    root_logger.info(
        "Logging initialised (debug=%s), log file: %s", debug, log_file
    )

    return log_file
