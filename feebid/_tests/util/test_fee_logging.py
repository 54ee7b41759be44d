from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator

import colorlog
import pytest
from concurrent_log_handler import ConcurrentRotatingFileHandler

from feebid import __version__
from feebid.util.fee_logging import initialize_logging, log_format, set_log_level


@pytest.fixture(name="root_logger")
def root_logger_fixture() -> Iterator[logging.Logger]:
    root_logger = logging.getLogger()
    saved_handlers = list(root_logger.handlers)
    saved_level = root_logger.level
    root_logger.handlers = []
    yield root_logger
    for handler in added_handlers(root_logger):
        handler.close()
    root_logger.handlers = saved_handlers
    root_logger.setLevel(saved_level)


def added_handlers(root_logger: logging.Logger) -> list[logging.Handler]:
    # pytest installs its own capture handlers on the root logger while a test runs
    return [h for h in root_logger.handlers if type(h).__module__.split(".")[0] != "_pytest"]


def test_file_logging(tmp_path: Path, root_logger: logging.Logger) -> None:
    logging_config: dict[str, Any] = {
        "log_stdout": False,
        "log_filename": "log/debug.log",
        "log_level": "INFO",
    }
    initialize_logging("feebid", logging_config, tmp_path)

    file_handlers = [h for h in root_logger.handlers if isinstance(h, ConcurrentRotatingFileHandler)]
    assert len(file_handlers) == 1
    assert file_handlers[0].level == logging.INFO
    assert root_logger.level <= logging.INFO

    logging.getLogger("feebid.test").info("window sampled")
    file_handlers[0].flush()
    contents = (tmp_path / "log" / "debug.log").read_text()
    assert "window sampled" in contents
    assert f"feebid-{__version__} [feebid] INFO     feebid.test: window sampled" in contents


def test_stdout_logging(tmp_path: Path, root_logger: logging.Logger) -> None:
    initialize_logging("feebid", {"log_stdout": True, "log_level": "DEBUG"}, tmp_path)

    assert len(added_handlers(root_logger)) == 1
    assert isinstance(added_handlers(root_logger)[0], colorlog.StreamHandler)
    assert added_handlers(root_logger)[0].level == logging.DEBUG
    assert root_logger.level == logging.DEBUG
    assert logging.getLogger("aiohttp").level == logging.INFO
    assert not (tmp_path / "log").exists()


def test_invalid_log_level(tmp_path: Path, root_logger: logging.Logger) -> None:
    initialize_logging("feebid", {"log_stdout": True, "log_level": "INFO"}, tmp_path)
    errors = set_log_level("LOUD", "feebid")

    (stdout_handler,) = added_handlers(root_logger)
    assert any("Invalid log level 'LOUD'" in e and str(stdout_handler) in e for e in errors)
    assert stdout_handler.level == logging.WARNING


def test_log_format() -> None:
    assert "%(log_color)s" in log_format("feebid", colored=True)
    plain = log_format("feebid", colored=False)
    assert "%(log_color)s" not in plain
    assert f"feebid-{__version__} [feebid]" in plain
