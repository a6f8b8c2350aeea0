"""
Pytest configuration.

The package lives under ``src/``. When it has not been installed (for example
``pip install -e .`` was skipped, or the editable ``.pth`` file is ignored by
``site``), ``src/`` is put on ``sys.path`` so ``import microblink_api`` still
works.
"""

from __future__ import annotations

import sys
import threading
from pathlib import Path

import pytest


def _ensure_src_on_path() -> None:
    try:
        import microblink_api  # noqa: F401
        return
    except ModuleNotFoundError:
        pass

    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root / "src"))


_ensure_src_on_path()

from microblink_api.client import RecognitionClient  # noqa: E402

ENDPOINT = "https://api.test"
RECOGNIZE_URL = f"{ENDPOINT}/recognize/execute"
IMAGE_BASE64 = "aGVsbG8gd29ybGQ="


@pytest.fixture
def client():
    """A client pointed at the mocked test endpoint."""
    return RecognitionClient(ENDPOINT)


class SignalRecorder:
    """Collects observable signals so tests can assert on them."""

    def __init__(self):
        self.values = []
        self.errors = []
        self.completed = 0
        self.terminated = threading.Event()

    def on_next(self, value):
        self.values.append(value)

    def on_error(self, error):
        self.errors.append(error)
        self.terminated.set()

    def on_complete(self):
        self.completed += 1
        self.terminated.set()

    def subscribe(self, call):
        call.subscribe(self.on_next, self.on_error, self.on_complete)


@pytest.fixture
def recorder():
    return SignalRecorder()


@pytest.fixture
def gate():
    """
    An event that mocked responses wait on, keeping requests in flight.

    Always released at teardown so no background thread is left blocked.
    """
    event = threading.Event()
    yield event
    event.set()
