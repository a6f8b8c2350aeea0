"""
HTTP Transfers
==============

A ``Transfer`` is a single cancellable HTTP request. It is the Python
counterpart of a browser ``XMLHttpRequest``: it is configured up front,
dispatched with ``send()`` (which returns immediately and performs the request
on a background thread) and reports back through two callbacks:

- ``on_ready(response)`` once a response of any status has been received;
- ``on_error(exc)`` when the request failed at the transport level.

At most one of the two is ever invoked. ``abort()`` can be called at any time
from the controlling thread; after it nothing is reported, unless the
transfer was created with ``abort_as_error=True`` in which case a single
``TransferAborted`` error is reported instead. Aborting a transfer that has
already finished is a no-op.

Requests are made with ``requests``. Upload progress is observed by handing
``requests`` a file-like body that reports every chunk read from it while the
body is written to the socket.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from io import BytesIO
from typing import Callable, Mapping

import requests
import structlog

from .errors import TransferAborted

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class UploadProgress:
    """Progress of the outbound request body."""

    loaded: int
    total: int
    length_computable: bool = True


ProgressCallback = Callable[[UploadProgress], None]
ReadyCallback = Callable[[requests.Response], None]
ErrorCallback = Callable[[BaseException], None]


class ProgressBody:
    """
    Read-only request body that reports upload progress.

    ``requests`` sends objects exposing ``read`` chunk by chunk and takes the
    Content-Length from ``len()``. Each non-empty chunk triggers one
    ``UploadProgress`` event. Once ``is_aborted`` returns true the next read
    raises ``TransferAborted`` so the upload stops early.
    """

    def __init__(
        self,
        data: bytes,
        on_progress: ProgressCallback,
        is_aborted: Callable[[], bool] = lambda: False,
    ):
        self._buffer = BytesIO(data)
        self._total = len(data)
        self._on_progress = on_progress
        self._is_aborted = is_aborted

    def __len__(self) -> int:
        return self._total

    def read(self, size: int = -1) -> bytes:
        if self._is_aborted():
            raise TransferAborted("Upload aborted")
        chunk = self._buffer.read(size)
        if chunk:
            self._on_progress(UploadProgress(self._buffer.tell(), self._total))
        return chunk


class Transfer:
    """One in-flight HTTP request that can be aborted."""

    def __init__(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        body: bytes,
        cookies: requests.cookies.RequestsCookieJar | None = None,
        with_credentials: bool = True,
        timeout: float | None = None,
        upload_progress: ProgressCallback | None = None,
        abort_as_error: bool = False,
    ):
        self.method = method
        self.url = url
        self.headers = dict(headers)
        self.timeout = timeout
        self.abort_as_error = abort_as_error
        self._body = body
        self._upload_progress = upload_progress

        self._session = requests.Session()
        if with_credentials and cookies is not None:
            # Cookies set by the server land back in the shared jar.
            self._session.cookies = cookies

        self._lock = threading.Lock()
        self._finished = threading.Event()
        self._thread: threading.Thread | None = None
        self._settled = False
        self._aborted = False
        self._on_ready: ReadyCallback | None = None
        self._on_error: ErrorCallback | None = None

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def done(self) -> bool:
        """True once the background request has returned or failed."""
        return self._finished.is_set()

    def send(self, on_ready: ReadyCallback, on_error: ErrorCallback) -> None:
        """Dispatch the request on a background thread and return immediately."""
        if self._thread is not None:
            raise RuntimeError("Transfer has already been sent")
        self._on_ready = on_ready
        self._on_error = on_error
        self._thread = threading.Thread(
            target=self._run, name=f"transfer-{id(self):x}", daemon=True
        )
        if self._aborted:
            self._finished.set()
            return
        self._thread.start()
        log.debug("Transfer dispatched", method=self.method, url=self.url)

    def abort(self) -> None:
        """
        Cancel the request.

        Safe to call repeatedly and after completion. The background thread
        may still be unwinding when this returns.
        """
        with self._lock:
            if self._settled or self._aborted:
                return
            self._aborted = True
            if self.abort_as_error:
                self._settled = True

        log.debug("Transfer aborted", url=self.url)
        self._session.close()

        if self.abort_as_error and self._on_error is not None:
            self._on_error(TransferAborted(f"Request to {self.url} was aborted"))

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the background request has finished."""
        return self._finished.wait(timeout)

    def _run(self) -> None:
        try:
            try:
                response = self._session.request(
                    self.method,
                    self.url,
                    data=self._prepare_body(),
                    headers=self.headers,
                    timeout=self.timeout,
                )
            except Exception as exc:
                if self._settle():
                    log.warning("Transfer failed", url=self.url, error=str(exc))
                    self._on_error(exc)
                return

            if self._settle():
                log.debug(
                    "Transfer completed",
                    url=self.url,
                    status_code=response.status_code,
                )
                self._on_ready(response)
        except Exception:
            log.exception("Transfer callback raised", url=self.url)
        finally:
            self._session.close()
            self._finished.set()

    def _prepare_body(self):
        if self._upload_progress is None:
            return self._body
        return ProgressBody(
            self._body, self._upload_progress, is_aborted=lambda: self._aborted
        )

    def _settle(self) -> bool:
        """Claim the single terminal signal; False if already taken or aborted."""
        with self._lock:
            if self._settled or self._aborted:
                return False
            self._settled = True
            return True
