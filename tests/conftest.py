"""Shared fixtures: isolated log directory and a fake extraction client."""

from __future__ import annotations

import os
import tempfile
import threading
import time

# Keep test logs out of the package directory and ignore any real credential.
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="insta-username-logs-"))
os.environ.pop("OPENROUTER_API_KEY", None)

import pytest  # noqa: E402

from insta_username_app.processing import InputFile  # noqa: E402


class FakeExtractionClient:
    """
    Stands in for ExtractionClient. Outcomes are keyed by image bytes: a list
    of usernames is returned, an exception instance is raised.
    """

    def __init__(self, outcomes=None, delays=None, barrier=None):
        self.outcomes = outcomes or {}
        self.delays = delays or {}
        self.barrier = barrier
        self.calls = []
        self._lock = threading.Lock()

    def extract(self, image_bytes: bytes, mime_type: str):
        with self._lock:
            self.calls.append((image_bytes, mime_type))
        if self.barrier is not None:
            self.barrier.wait()
        time.sleep(self.delays.get(image_bytes, 0))
        outcome = self.outcomes.get(image_bytes, [])
        if isinstance(outcome, BaseException):
            raise outcome
        return list(outcome)


def make_file(data: bytes, name: str | None = None, mime_type: str = "image/png") -> InputFile:
    return InputFile(name=name or f"{data.decode()}.png", mime_type=mime_type, data=data)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake_client():
    return FakeExtractionClient()
