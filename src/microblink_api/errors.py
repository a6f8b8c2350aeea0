"""
Error types
===========

Failures are delivered to subscribers through the observable's error signal.
Two shapes exist:

- ``RecognitionError``: the server answered, but the body was not valid JSON.
  It is synthesized locally and carries the raw response text.
- Transport errors: any ``requests.exceptions.RequestException`` raised while
  talking to the server. These are passed through untouched.

``TransferAborted`` is only ever signalled when a client is created with
``abort_as_error=True``; by default aborted requests end silently.
"""

from enum import Enum

RESULT_IS_NOT_VALID_JSON_MESSAGE = "Result is not valid JSON"


class StatusCodes(str, Enum):
    """Status codes reported by the recognition client."""

    RESULT_IS_NOT_VALID_JSON = "RESULT_IS_NOT_VALID_JSON"


class RecognitionError(Exception):
    """The response body could not be parsed as JSON."""

    def __init__(
        self,
        response_text: str,
        error: str = RESULT_IS_NOT_VALID_JSON_MESSAGE,
        code: StatusCodes = StatusCodes.RESULT_IS_NOT_VALID_JSON,
    ):
        super().__init__(error)
        self.error = error
        self.code = code
        self.response_text = response_text

    def as_dict(self) -> dict:
        """Return the wire-style representation of the error."""
        return {
            "error": self.error,
            "code": self.code,
            "responseText": self.response_text,
        }

    def __eq__(self, other):
        if not isinstance(other, RecognitionError):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __hash__(self):
        return hash((self.error, self.code, self.response_text))

    def __repr__(self):
        return (
            f"RecognitionError(error={self.error!r}, code={self.code.value!r}, "
            f"response_text={self.response_text!r})"
        )


class TransferAborted(Exception):
    """A request was aborted before it produced a result."""
