"""
Shared fixtures for errplay tests.
"""

import pytest

from errplay.config import Config
from errplay.storage import FileSessionStore


class RecordingTransport:
    """Transport that keeps every payload instead of sending it."""

    def __init__(self, calls=None):
        self.sent = []
        self.calls = calls

    def send(self, payload):
        self.sent.append(payload)
        if self.calls is not None:
            self.calls.append(("send", payload))


class FakeHost:
    """Host whose capture points are fired by hand."""

    def __init__(self, supported=True):
        self._supported = supported
        self.install_count = 0
        self.on_error = None
        self.on_rejection = None
        self.on_log = None

    def supported(self):
        return self._supported

    def install(self, on_error, on_rejection, on_log):
        self.install_count += 1
        self.on_error = on_error
        self.on_rejection = on_rejection
        self.on_log = on_log


@pytest.fixture
def dev_config(tmp_path):
    """Development config with an isolated session directory."""
    return Config(
        environment="development",
        session_id="test-session",
        session_dir=tmp_path / "sessions",
    )


@pytest.fixture
def prod_config(tmp_path):
    return Config(
        environment="production",
        session_id="test-session",
        session_dir=tmp_path / "sessions",
    )


@pytest.fixture
def file_store(dev_config):
    return FileSessionStore(session_dir=dev_config.session_path())


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def fake_host():
    return FakeHost()
