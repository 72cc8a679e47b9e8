"""Tests for logging setup."""
import logging
from pathlib import Path

import pytest

from course_planner.log_setup import ROOT_LOGGER, setup_logging


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


def test_level_from_argument() -> None:
    logger = setup_logging(level="debug", console=True)
    assert logger.name == ROOT_LOGGER
    assert logger.level == logging.DEBUG


def test_level_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("COURSE_PLANNER_LOG_LEVEL", "ERROR")
    assert setup_logging().level == logging.ERROR


def test_unknown_level_falls_back_to_info() -> None:
    assert setup_logging(level="chatty").level == logging.INFO


def test_repeated_setup_does_not_stack_handlers() -> None:
    setup_logging()
    logger = setup_logging()
    assert len(logger.handlers) == 1


def test_writes_log_file(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "planner.log"
    setup_logging(level="INFO", log_file=log_file, console=False)

    logging.getLogger("course_planner.engine.scheduler").info("placed %d courses", 3)
    for handler in logging.getLogger(ROOT_LOGGER).handlers:
        handler.flush()

    text = log_file.read_text(encoding="utf-8")
    assert "| INFO     | course_planner.engine.scheduler | placed 3 courses" in text
