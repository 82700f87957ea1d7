from __future__ import annotations

import logging
from typing import Iterator

import pytest


@pytest.fixture(name="root_logger")
def root_logger_fixture() -> Iterator[logging.Logger]:
    root_logger = logging.getLogger()
    saved_handlers = list(root_logger.handlers)
    saved_levels = [handler.level for handler in saved_handlers]
    saved_level = root_logger.level
    root_logger.handlers = []
    yield root_logger
    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers = saved_handlers
    for handler, level in zip(saved_handlers, saved_levels):
        handler.setLevel(level)
    root_logger.setLevel(saved_level)
