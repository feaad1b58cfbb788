# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# tests/conftest.py
"""Pytest configuration for btrbk-check tests."""

import pytest
from loguru import logger

from tests.fixtures.fake_rsync import make_fake_command


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--run-rsync-tests",
        action="store_true",
        default=False,
        help="Run tests that execute the real rsync binary",
    )


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers",
        "rsync_required: mark test as requiring the rsync binary",
    )


def pytest_collection_modifyitems(config, items):
    """Skip rsync tests unless --run-rsync-tests is passed."""
    if not config.getoption("--run-rsync-tests"):
        skip_rsync = pytest.mark.skip(
            reason="need --run-rsync-tests option to run"
        )
        for item in items:
            if "rsync_required" in item.keywords:
                item.add_marker(skip_rsync)


@pytest.fixture
def fake_rsync(tmp_path):
    """Factory for executables that print canned rsync output."""
    def factory(lines=(), exit_code=0, name="rsync"):
        return make_fake_command(tmp_path, lines, exit_code, name)
    return factory


@pytest.fixture
def log_records():
    """Collect loguru records emitted during the test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record),
                            level="DEBUG")
    yield records
    logger.remove(handler_id)
