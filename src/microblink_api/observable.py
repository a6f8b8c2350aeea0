"""
Single-value observable used to deliver recognition results.

A ``RecognitionCall`` wraps a producer function. Nothing happens until
``subscribe()`` is called; every subscription runs the producer again, so each
one performs its own HTTP request. A subscription ends with exactly one
terminal signal: ``on_next(value)`` followed by ``on_complete()``, or
``on_error(error)``.
"""

from __future__ import annotations

import threading
from typing import Any, Callable

import structlog

log = structlog.get_logger(__name__)


class Observer:
    """Forwards signals to user callbacks and enforces a single terminal signal."""

    def __init__(
        self,
        on_next: Callable[[Any], None] | None = None,
        on_error: Callable[[BaseException], None] | None = None,
        on_complete: Callable[[], None] | None = None,
    ):
        self._on_next = on_next
        self._on_error = on_error
        self._on_complete = on_complete
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def next(self, value: Any) -> None:
        if self._closed:
            return
        self._call(self._on_next, value)

    def error(self, error: BaseException) -> None:
        if not self._close():
            return
        if self._on_error is None:
            log.warning("Unhandled recognition error", error=repr(error))
            return
        self._call(self._on_error, error)

    def complete(self) -> None:
        if not self._close():
            return
        self._call(self._on_complete)

    def _close(self) -> bool:
        with self._lock:
            if self._closed:
                return False
            self._closed = True
            return True

    @staticmethod
    def _call(callback, *args) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            log.exception("Observer callback raised")


class RecognitionCall:
    """A cold, single-emission stream of one recognition result."""

    def __init__(self, producer: Callable[[Observer], None]):
        self._producer = producer

    def subscribe(
        self,
        on_next: Callable[[Any], None] | None = None,
        on_error: Callable[[BaseException], None] | None = None,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        """Start a new request and route its outcome to the given callbacks."""
        observer = Observer(on_next, on_error, on_complete)
        try:
            self._producer(observer)
        except Exception as exc:
            observer.error(exc)

    def result(self, timeout: float | None = None) -> Any:
        """
        Subscribe and block until the result arrives.

        Returns the parsed response or raises the error that ended the
        subscription. Raises ``TimeoutError`` when nothing arrives within
        ``timeout`` seconds, which is also what happens to a request that was
        aborted silently.
        """
        finished = threading.Event()
        outcome: dict[str, Any] = {}

        def on_next(value):
            outcome["value"] = value

        def on_error(error):
            outcome["error"] = error
            finished.set()

        self.subscribe(on_next, on_error, finished.set)

        if not finished.wait(timeout):
            raise TimeoutError("No recognition result received")
        if "error" in outcome:
            raise outcome["error"]
        return outcome.get("value")
