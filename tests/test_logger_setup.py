import logging
import os

import pytest

import logger_setup
from constants import LOGGER_NAME


@pytest.fixture
def app_logger():
    logger = logging.getLogger(LOGGER_NAME)
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def test_setup_logging_creates_run_log_file(tmp_path, app_logger):
    config = {'run_id': 'run-1', 'logging': {'level': 'debug', 'format': '%(levelname)s %(message)s'}}

    log_file = logger_setup.setup_logging(config, log_root=str(tmp_path))
    app_logger.info("hello canvas")
    for handler in app_logger.handlers:
        handler.flush()

    assert log_file == os.path.join(str(tmp_path), 'run-1', 'simulation.log')
    with open(log_file) as f:
        contents = f.read()
    assert "INFO hello canvas" in contents
    assert app_logger.level == logging.DEBUG
    assert app_logger.propagate is False


def test_setup_logging_twice_does_not_duplicate_handlers(tmp_path, app_logger):
    config = {'run_id': 'run-2'}
    logger_setup.setup_logging(config, log_root=str(tmp_path))
    logger_setup.setup_logging(config, log_root=str(tmp_path))

    assert len(app_logger.handlers) == 2
    assert app_logger.level == logging.INFO
