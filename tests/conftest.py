"""Shared pytest fixtures."""

import logging

import pytest


@pytest.fixture(autouse=True)
def _restore_db_sync_logger():
    """Undo ``setup_logging()`` side effects so caplog sees every record."""
    logger = logging.getLogger("db_sync")
    level, propagate = logger.level, logger.propagate
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)
    logger.propagate = propagate
