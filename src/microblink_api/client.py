"""
Microblink API Client
=====================

This module provides the HTTP layer for the Microblink recognition API.

``RecognitionClient.recognize`` builds the JSON payload for
``POST {endpoint}/recognize/execute`` and returns a lazy ``RecognitionCall``.
The request is only sent once the call is subscribed to, and every
subscription sends its own request. Each dispatched request is tracked so
that ``terminate_all`` can abort everything still outstanding.

Results are not masked locally. When no ``Bearer`` authorization is
configured the server anonymizes the results itself.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Union

import requests
import structlog

from .errors import RecognitionError
from .observable import Observer, RecognitionCall
from .transfer import ProgressCallback, Transfer

log = structlog.get_logger(__name__)

DEFAULT_ENDPOINT = "https://api.microblink.com"
RECOGNIZE_PATH = "/recognize/execute"
BEARER_PREFIX = "Bearer "

Recognizers = Union[str, Sequence[str]]


def _reject_constant(name: str):
    """Refuse NaN and Infinity, which are not part of JSON."""
    raise ValueError(f"Invalid JSON constant: {name}")


def build_request_body(recognizers: Recognizers, image_base64: str) -> dict:
    """
    Build the request payload.

    A single recognizer is sent as ``recognizer``; a list is sent as
    ``recognizers`` with its order preserved.
    """
    body = {"imageBase64": image_base64}
    if isinstance(recognizers, str):
        body["recognizer"] = recognizers
        return body

    if isinstance(recognizers, (bytes, bytearray)) or not isinstance(
        recognizers, Sequence
    ):
        raise TypeError(
            "recognizers must be a string or a sequence of strings, "
            f"got {type(recognizers).__name__}"
        )
    recognizer_list = list(recognizers)
    if not recognizer_list:
        raise ValueError("recognizers must contain at least one recognizer")
    if not all(isinstance(r, str) for r in recognizer_list):
        raise TypeError("every recognizer must be a string")
    body["recognizers"] = recognizer_list
    return body


def is_bearer_authorization(header_value: str) -> bool:
    """Return True if the value can be sent as an Authorization header."""
    return header_value.startswith(BEARER_PREFIX)


class RecognitionClient:
    """HTTP client for the Microblink recognition API."""

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        authorization: str = "",
        *,
        timeout: float | None = None,
        auto_prune: bool = False,
        abort_as_error: bool = False,
    ):
        """
        Args:
            endpoint: Base URL of the API.
            authorization: Full Authorization header value, e.g. ``"Bearer <token>"``.
            timeout: Optional per-request timeout in seconds. A timeout is
                reported as a network error.
            auto_prune: Drop finished requests from ``outstanding_requests``
                whenever a new request is dispatched. By default requests stay
                tracked until ``terminate_all``.
            abort_as_error: Signal ``TransferAborted`` to subscribers of
                requests aborted by ``terminate_all`` instead of ending them
                silently.
        """
        self.endpoint = endpoint
        self.authorization = authorization
        self.timeout = timeout
        self.auto_prune = auto_prune
        self.abort_as_error = abort_as_error
        self.cookies = requests.cookies.RequestsCookieJar()
        self._active_requests: list[Transfer] = []

    @classmethod
    def from_settings(cls, settings) -> "RecognitionClient":
        """Create a client from a ``Settings`` instance."""
        return cls(
            settings.API_ENDPOINT,
            settings.API_AUTHORIZATION,
            timeout=settings.REQUEST_TIMEOUT,
            auto_prune=settings.AUTO_PRUNE_REQUESTS,
            abort_as_error=settings.ABORT_AS_ERROR,
        )

    @property
    def outstanding_requests(self) -> tuple[Transfer, ...]:
        """Dispatched requests in submission order, until ``terminate_all``."""
        return tuple(self._active_requests)

    def set_endpoint(self, endpoint: str) -> None:
        """Change the API endpoint used by future requests."""
        self.endpoint = endpoint

    def set_authorization(self, authorization: str) -> None:
        """Change the Authorization header value used by future requests."""
        self.authorization = authorization

    def terminate_all(self) -> None:
        """Abort every outstanding request and forget about them."""
        active_requests = self._active_requests
        self._active_requests = []
        for transfer in active_requests:
            transfer.abort()
        if active_requests:
            log.info("Terminated outstanding requests", count=len(active_requests))

    def recognize(
        self,
        recognizers: Recognizers,
        image_base64: str,
        upload_progress: ProgressCallback | None = None,
    ) -> RecognitionCall:
        """
        Execute remote recognition.

        Args:
            recognizers: One recognizer id, or a non-empty list of ids.
            image_base64: The image, already base64 encoded.
            upload_progress: Optional callback receiving ``UploadProgress``
                events while the request body is uploaded.

        Returns:
            A ``RecognitionCall``. Subscribing to it sends the request.
        """
        body = build_request_body(recognizers, image_base64)
        recognizer_field = "recognizer" if "recognizer" in body else "recognizers"

        def produce(observer: Observer) -> None:
            transfer = self._create_transfer(body, upload_progress)
            log.debug(
                "Sending recognition request",
                url=transfer.url,
                recognizers=body[recognizer_field],
                authorized="Authorization" in transfer.headers,
            )
            transfer.send(
                on_ready=lambda response: self._handle_response(response, observer),
                on_error=observer.error,
            )
            if self.auto_prune:
                self._prune_finished()
            self._active_requests.append(transfer)

        return RecognitionCall(produce)

    def _create_transfer(
        self, body: dict, upload_progress: ProgressCallback | None
    ) -> Transfer:
        headers = {"Content-Type": "application/json"}
        # Without a Bearer token the server masks the results.
        if is_bearer_authorization(self.authorization):
            headers["Authorization"] = self.authorization

        return Transfer(
            "POST",
            self.endpoint + RECOGNIZE_PATH,
            headers=headers,
            body=json.dumps(body).encode("utf-8"),
            cookies=self.cookies,
            with_credentials=True,
            timeout=self.timeout,
            upload_progress=upload_progress,
            abort_as_error=self.abort_as_error,
        )

    @staticmethod
    def _handle_response(response: requests.Response, observer: Observer) -> None:
        try:
            data = response.json(parse_constant=_reject_constant)
        except ValueError:
            log.warning(
                "Recognition result is not valid JSON",
                url=response.url,
                status_code=response.status_code,
            )
            observer.error(RecognitionError(response.text))
            return
        observer.next(data)
        observer.complete()

    def _prune_finished(self) -> None:
        self._active_requests = [t for t in self._active_requests if not t.done]
