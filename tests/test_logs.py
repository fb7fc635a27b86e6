import logging

import pytest

from utf8bom.config import load_settings
from utf8bom.logs import get_logger, setup_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger("utf8bom")
    saved_handlers, saved_level = list(logger.handlers), logger.level
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in saved_handlers:
        logger.addHandler(handler)
    logger.setLevel(saved_level)


def test_log_file_receives_status_lines(tmp_path, package_logger):
    log_file = tmp_path / "logs" / "utf8bom.log"
    setup_logging(log_file)

    get_logger("utf8bom.pipeline").info("Converted %s", "a.txt")
    for handler in package_logger.handlers:
        handler.flush()

    assert "Converted a.txt" in log_file.read_text(encoding="utf-8")


def test_repeated_setup_does_not_duplicate_handlers(tmp_path, package_logger):
    setup_logging(tmp_path / "one.log")
    setup_logging()

    assert len(package_logger.handlers) == 1
    assert isinstance(package_logger.handlers[0], logging.StreamHandler)


def test_log_file_comes_from_environment(tmp_path):
    settings = load_settings({"UTF8BOM_LOG_FILE": str(tmp_path / "hook.log")})
    assert settings.log_file == tmp_path / "hook.log"


def test_child_loggers_live_under_package():
    assert get_logger("utf8bom.detect").name == "utf8bom.detect"
    assert get_logger().name == "utf8bom"
