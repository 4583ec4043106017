"""Tests for logging setup."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from termsession.config.settings import LoggingConfig
from termsession.utils.logging import PACKAGE_LOGGER, setup_logging


@pytest.fixture(autouse=True)
def restore_package_logger() -> Iterator[None]:
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield
    for handler in list(package_logger.handlers):
        if handler not in handlers:
            package_logger.removeHandler(handler)
            handler.close()
    package_logger.setLevel(level)


class TestSetupLogging:
    """Test handler installation on the package logger."""

    def test_defaults_to_info_on_stderr(self) -> None:
        package_logger = setup_logging()
        assert package_logger.name == "termsession"
        assert package_logger.level == logging.INFO
        assert any(isinstance(h, logging.StreamHandler) for h in package_logger.handlers)

    def test_repeated_calls_do_not_stack_handlers(self) -> None:
        package_logger = setup_logging()
        count = len(package_logger.handlers)
        setup_logging(LoggingConfig(level="debug"))
        assert len(package_logger.handlers) == count
        assert package_logger.level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self) -> None:
        assert setup_logging(LoggingConfig(level="loud")).level == logging.INFO

    def test_file_handler(self, tmp_path: Path) -> None:
        path = tmp_path / "termsession.log"
        package_logger = setup_logging(LoggingConfig(file=str(path), format="%(message)s"))
        logging.getLogger("termsession.session.engine").warning("written to file")
        for handler in package_logger.handlers:
            handler.flush()
        assert "written to file" in path.read_text()
