import logging
import logging.config
import re
from pathlib import Path
from typing import Optional

from feed_engine.config import settings

# ANSI escape codes (colours, bold, ...) emitted by coloured console formatters
ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")

DEFAULT_LOGGING_INI = Path(__file__).resolve().parent.parent.parent / "logging.ini"


class StripAnsiFilter(logging.Filter):
    """Remove ANSI colour codes from log records written to files."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if isinstance(record.msg, str):
            record.msg = ANSI_ESCAPE_RE.sub("", record.msg)
        return True


def attach_strip_ansi_to_file_handlers() -> None:
    """
    Attach StripAnsiFilter to every FileHandler on the root logger.

    Call after logging.config.fileConfig(...) so handlers from logging.ini exist.
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            handler.addFilter(StripAnsiFilter())


def configure_logging(config_path: Optional[Path] = None) -> bool:
    """
    Configure logging from logging.ini, falling back to basicConfig.

    Returns True when the ini file was used.
    """
    config_path = config_path or DEFAULT_LOGGING_INI
    if config_path.exists():
        logging.config.fileConfig(
            config_path, disable_existing_loggers=False
        )
        attach_strip_ansi_to_file_handlers()
        logging.getLogger(__name__).info("Logging configured from %s", config_path)
        return True

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger(__name__).info(
        "Logging config file not found at %s, using basic configuration", config_path
    )
    return False
