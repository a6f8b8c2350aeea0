"""
Microblink Recognition CLI
==========================

Runs a single recognition against the Microblink API and prints the JSON
result to stdout.

    microblink-recognize passport.jpg -r MRTD
    microblink-recognize id-front.jpg -r BLINK_ID -r MRTD

Configuration is read from environment variables (see ``config.Settings``),
most importantly ``MICROBLINK_API_ENDPOINT`` and
``MICROBLINK_API_AUTHORIZATION`` (``"Bearer <token>"``).
"""

from __future__ import annotations

import argparse
import base64
import json
import sys
from pathlib import Path

import requests
import structlog

from .client import RecognitionClient
from .config import Settings
from .errors import RecognitionError, TransferAborted
from .logging_config import configure_logging
from .transfer import UploadProgress


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="microblink-recognize",
        description="Run a Microblink recognition on an image file",
    )
    parser.add_argument("image", type=Path, help="Image file to recognize")
    parser.add_argument(
        "-r",
        "--recognizer",
        dest="recognizers",
        action="append",
        required=True,
        help="Recognizer id; repeat to run several recognizers",
    )
    parser.add_argument(
        "--endpoint", help="Override MICROBLINK_API_ENDPOINT for this run"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point of the ``microblink-recognize`` command."""
    log = structlog.get_logger(__name__)
    args = _parse_args(argv)

    try:
        settings = Settings()
        configure_logging(settings)
    except ValueError as e:
        log.error("Configuration error", error=str(e))
        return 2

    try:
        image_base64 = base64.b64encode(args.image.read_bytes()).decode("ascii")
    except OSError as e:
        log.error("Could not read image", path=str(args.image), error=str(e))
        return 2

    client = RecognitionClient.from_settings(settings)
    if args.endpoint:
        client.set_endpoint(args.endpoint.rstrip("/"))

    # One -r sends "recognizer", several send "recognizers".
    recognizers = args.recognizers[0] if len(args.recognizers) == 1 else args.recognizers

    def on_progress(progress: UploadProgress) -> None:
        log.debug("Upload progress", loaded=progress.loaded, total=progress.total)

    log.info(
        "Starting recognition",
        endpoint=client.endpoint,
        recognizers=args.recognizers,
        image=str(args.image),
    )
    try:
        result = client.recognize(recognizers, image_base64, on_progress).result(
            timeout=settings.REQUEST_TIMEOUT
        )
    except RecognitionError as e:
        log.error(
            "Recognition failed",
            error=e.error,
            code=e.code.value,
            response_text=e.response_text,
        )
        return 1
    except (requests.exceptions.RequestException, TransferAborted) as e:
        log.error("Request failed", error=str(e))
        return 1
    except TimeoutError:
        log.error("No result within timeout", timeout=settings.REQUEST_TIMEOUT)
        client.terminate_all()
        return 1
    except KeyboardInterrupt:
        log.info("Ctrl-C received; aborting")
        client.terminate_all()
        return 130

    json.dump(result, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
