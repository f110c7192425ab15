"""
Shared pytest fixtures for tests.
"""

import logging
from typing import Callable

import pytest

from apibind import Binder, BinderConfig
from apibind.testing import LocalClient


@pytest.fixture
def binder() -> Binder:
    return Binder(BinderConfig())


@pytest.fixture
def lc() -> LocalClient:
    return LocalClient()


@pytest.fixture
def error_logs(
    caplog: pytest.LogCaptureFixture,
) -> Callable[[], list[logging.LogRecord]]:
    """
    Usage:
        records = error_logs()
        assert len(records) == 1
    """
    caplog.set_level(logging.ERROR, logger="apibind")

    def _records() -> list[logging.LogRecord]:
        return [
            r
            for r in caplog.records
            if r.name == "apibind" and r.levelno >= logging.ERROR
        ]

    return _records
