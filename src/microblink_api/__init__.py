"""
Microblink recognition API client.

This package contains:

- the ``RecognitionClient`` HTTP layer and its payload helpers
- the cancellable ``Transfer`` used for every request
- the single-value ``RecognitionCall`` observable returned by ``recognize``
- environment configuration, logging setup and a small CLI
"""

from .client import (
    DEFAULT_ENDPOINT,
    RecognitionClient,
    build_request_body,
    is_bearer_authorization,
)
from .errors import RecognitionError, StatusCodes, TransferAborted
from .observable import RecognitionCall
from .transfer import Transfer, UploadProgress

__all__ = [
    "DEFAULT_ENDPOINT",
    "RecognitionCall",
    "RecognitionClient",
    "RecognitionError",
    "StatusCodes",
    "Transfer",
    "TransferAborted",
    "UploadProgress",
    "build_request_body",
    "is_bearer_authorization",
]
