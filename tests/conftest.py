"""pytest configuration and fixtures for pyqt-logtail tests."""

import os
import time

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtCore import QCoreApplication
from PyQt6.QtWidgets import QApplication


@pytest.fixture(scope="session")
def qapp():
    """Create QApplication instance for tests."""
    app = QApplication.instance() or QApplication([])
    yield app
    # Don't quit - may cause issues with other tests


@pytest.fixture(autouse=True)
def reset_tail_settings():
    """Each test starts from default settings."""
    from pyqt_logtail.protocols.tail_config import set_tail_settings
    set_tail_settings(None)
    yield
    set_tail_settings(None)


def wait_until(predicate, timeout=5.0):
    """Pump the Qt event loop until predicate() is true or timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        QCoreApplication.processEvents()
        if predicate():
            return True
        time.sleep(0.01)
    QCoreApplication.processEvents()
    return bool(predicate())


@pytest.fixture
def collect_lines():
    """Connect to a source's lines_ready and accumulate the texts."""
    def _attach(source):
        received = []
        source.lines_ready.connect(lambda gen, lines: received.extend(lines))
        return received
    return _attach
