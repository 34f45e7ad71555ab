"""Shared pytest fixtures for NavSim."""

from __future__ import annotations

import logging

import pytest

from logger import setup_logger


@pytest.fixture(scope="session", autouse=True)
def isolated_logger(tmp_path_factory):
    """Keep log files out of the user's home directory during tests."""
    return setup_logger(
        log_dir=tmp_path_factory.mktemp("logs"), console_level=logging.WARNING
    )


@pytest.fixture()
def restore_logger(isolated_logger):
    """Reinstall the quiet session logger after a test replaced it."""
    yield
    setup_logger(log_dir=isolated_logger.log_dir, console_level=logging.WARNING)


@pytest.fixture(scope="module")
def qt_app():
    from PySide6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app
