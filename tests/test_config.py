import logging
import os

import pytest

import config
from logging_config import LOGGER_NAME, setup_logging

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))


def test_resource_paths_resolve_against_repo_root():
    assert config.get_resource_path("VERSION") == os.path.join(REPO_ROOT, "VERSION")
    assert os.path.isdir(config.DOCS_PATH)


def test_app_version():
    assert config.app_version() == "0.1.0"


def test_app_version_missing_file(tmp_path):
    assert config.app_version(str(tmp_path / "VERSION")) == "unversioned"


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, logging.WARNING),
        ("", logging.WARNING),
        ("debug", logging.DEBUG),
        ("INFO", logging.INFO),
        ("15", 15),
        ("verbose", logging.WARNING),
    ],
)
def test_log_level_from_env(monkeypatch, raw, expected):
    if raw is None:
        monkeypatch.delenv("MATSEL_LOG_LEVEL", raising=False)
    else:
        monkeypatch.setenv("MATSEL_LOG_LEVEL", raw)
    assert config.log_level() == expected


@pytest.fixture
def matsel_logger():
    yield
    setup_logging(logging.WARNING)


def test_setup_logging_does_not_stack_handlers(matsel_logger):
    setup_logging(logging.INFO)
    logger = setup_logging(logging.DEBUG)
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_setup_logging_writes_log_file(matsel_logger, tmp_path):
    log_file = tmp_path / "matsel.log"
    logger = setup_logging(logging.INFO, str(log_file))
    assert len(logger.handlers) == 2
    logging.getLogger("matsel.dataset").info("Loaded %d materials", 3)
    for handler in logger.handlers:
        handler.flush()
    text = log_file.read_text(encoding="utf-8")
    assert "matsel.dataset - INFO - Loaded 3 materials" in text
