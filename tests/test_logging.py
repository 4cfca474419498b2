"""Tests for logging setup."""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from cmdgraph.core.config.models import LoggingConfig
from cmdgraph.core.logging import setup_logging, setup_logging_from_config


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_setup_logging_creates_file(tmp_path):
    log_dir = tmp_path / "logs"

    setup_logging(level="DEBUG", directory=log_dir)
    logging.getLogger("cmdgraph.test").debug("hello from test")

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert any(isinstance(h, RotatingFileHandler) for h in root.handlers)
    for handler in root.handlers:
        handler.flush()
    assert "hello from test" in (log_dir / "cmdgraph.log").read_text()


def test_setup_logging_replaces_handlers(tmp_path):
    setup_logging(directory=tmp_path)
    setup_logging(directory=tmp_path)

    file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1


def test_setup_logging_from_config(tmp_path):
    config = LoggingConfig(level="warning", directory=str(tmp_path), max_size_mb=1, backup_count=2)

    setup_logging_from_config(config)

    root = logging.getLogger()
    assert root.level == logging.WARNING
    [handler] = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
    assert handler.maxBytes == 1024 * 1024
    assert handler.backupCount == 2
