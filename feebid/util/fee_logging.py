from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, cast

import colorlog
from concurrent_log_handler import ConcurrentRotatingFileHandler

from feebid import __version__

default_log_level = "WARNING"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def get_file_log_handler(
    formatter: logging.Formatter, root_path: Path, logging_config: dict[str, object]
) -> ConcurrentRotatingFileHandler:
    # relative log filenames live under the root path
    log_path = Path(root_path).expanduser() / str(logging_config.get("log_filename", "log/debug.log"))
    log_path.parent.mkdir(parents=True, exist_ok=True)
    maxrotation = cast(int, logging_config.get("log_maxfilesrotation", 7))
    maxbytesrotation = cast(int, logging_config.get("log_maxbytesrotation", 50 * 1024 * 1024))
    use_gzip = cast(bool, logging_config.get("log_use_gzip", False))
    handler = ConcurrentRotatingFileHandler(
        os.fspath(log_path), "a", maxBytes=maxbytesrotation, backupCount=maxrotation, use_gzip=use_gzip
    )
    handler.setFormatter(formatter)
    return handler


def log_format(service_name: str, colored: bool) -> str:
    """
    One line per record: timestamp, tool version and command, level, logger name, message.
    `colored` wraps the level in colorlog escapes for terminals.
    """
    level = "%(log_color)s%(levelname)-8s%(reset)s" if colored else "%(levelname)-8s"
    return f"%(asctime)s.%(msecs)03d feebid-{__version__} [{service_name}] {level} %(name)s: %(message)s"


def initialize_logging(service_name: str, logging_config: dict[str, Any], root_path: Path) -> None:
    log_level = logging_config.get("log_level", default_log_level)
    handler: logging.Handler
    if logging_config.get("log_stdout", False):
        handler = colorlog.StreamHandler()
        handler.setFormatter(
            colorlog.ColoredFormatter(log_format(service_name, colored=True), datefmt=LOG_DATE_FORMAT, reset=True)
        )
    else:
        file_log_formatter = logging.Formatter(fmt=log_format(service_name, colored=False), datefmt=LOG_DATE_FORMAT)
        handler = get_file_log_handler(file_log_formatter, root_path, logging_config)

    root_logger = logging.getLogger()
    root_logger.addHandler(handler)

    set_log_level(log_level=log_level, service_name=service_name)


def set_log_level(log_level: str, service_name: str) -> list[str]:
    root_logger = logging.getLogger()
    log_level_exceptions = {}

    for handler in root_logger.handlers:
        try:
            handler.setLevel(log_level)
        except ValueError as e:
            handler.setLevel(default_log_level)
            log_level_exceptions[handler] = e

    error_strings = [
        f"Handler {handler}: Invalid log level '{log_level}' for {service_name}. "
        f"Defaulting to: {default_log_level}. Error: {exception}"
        for handler, exception in log_level_exceptions.items()
    ]
    for error_string in error_strings:
        root_logger.error(error_string)

    # The root logger defaults to WARNING, which would hide the lower levels of specific handlers
    if len(root_logger.handlers) > 0:
        root_logger.setLevel(min(handler.level for handler in root_logger.handlers))

    if root_logger.level <= logging.DEBUG:
        logging.getLogger("aiohttp").setLevel(logging.INFO)  # Too much logging on debug level

    return error_strings
