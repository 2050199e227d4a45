import time

import pytest


@pytest.fixture
def pin_local_tz(monkeypatch):
    """Switch the process-local timezone for the duration of a test."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")

    def _pin(name: str) -> None:
        monkeypatch.setenv("TZ", name)
        time.tzset()

    yield _pin
    monkeypatch.undo()
    time.tzset()
