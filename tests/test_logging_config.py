"""Tests for logging setup."""

import json
import logging
from logging.handlers import RotatingFileHandler

import pytest
import structlog

from perfmon.config_loader import ConfigLoader
from perfmon.logging_config import setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if handler not in saved_handlers:
            handler.close()
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_level)
    structlog.reset_defaults()


def config_with(**logging_overrides):
    config = ConfigLoader()
    config.config['logging'].update(logging_overrides)
    return config


def test_bootstrap_logging_is_console_only():
    setup_logging()

    root = logging.getLogger()
    assert root.level == logging.INFO
    assert len(root.handlers) == 1
    assert not isinstance(root.handlers[0], RotatingFileHandler)


def test_file_handler_rotation_settings(tmp_path):
    log_file = tmp_path / 'logs' / 'monitor.log'
    setup_logging(config_with(file=str(log_file), max_size_mb=2, backup_count=3))

    [file_handler] = [h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)]
    assert file_handler.maxBytes == 2 * 1024 * 1024
    assert file_handler.backupCount == 3
    assert log_file.parent.is_dir()


def test_events_are_written_as_json(tmp_path):
    log_file = tmp_path / 'monitor.log'
    setup_logging(config_with(file=str(log_file), level='DEBUG'))

    structlog.get_logger('perfmon.test').warning("High CPU usage detected", cpu_usage=91.2)

    lines = log_file.read_text(encoding='utf-8').strip().splitlines()
    record = json.loads(lines[-1])
    assert record['event'] == "High CPU usage detected"
    assert record['cpu_usage'] == 91.2
    assert record['level'] == 'warning'


def test_level_from_config():
    setup_logging(config_with(file='', level='warning'))
    assert logging.getLogger().level == logging.WARNING


def test_unknown_level_falls_back_to_info():
    setup_logging(config_with(file='', level='LOUD'))
    assert logging.getLogger().level == logging.INFO


def test_repeated_setup_does_not_duplicate_handlers(tmp_path):
    config = config_with(file=str(tmp_path / 'm.log'))
    setup_logging(config)
    setup_logging(config)

    assert len(logging.getLogger().handlers) == 2
