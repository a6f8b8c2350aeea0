"""
Configuration module for the Microblink API client.

The ``RecognitionClient`` itself takes plain constructor arguments and never
reads the environment. This module is the outer layer used by the command
line tool (and by applications that prefer environment configuration): a
single ``Settings`` class loads and validates every value from environment
variables.
"""

import os

from .client import DEFAULT_ENDPOINT

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class Settings:
    """
    A container for all configuration settings, loaded from environment variables.

    Optional settings fall back to defaults; invalid values raise ``ValueError``.
    """

    # --- API Configuration ---
    API_ENDPOINT: str
    API_AUTHORIZATION: str
    REQUEST_TIMEOUT: float | None

    # --- Request tracking ---
    AUTO_PRUNE_REQUESTS: bool
    ABORT_AS_ERROR: bool

    # --- Logging ---
    LOG_LEVEL: str
    LOG_FORMAT: str

    def __init__(self):
        """
        Loads settings from environment variables and performs validation.
        """
        # --- API Configuration ---
        self.API_ENDPOINT = os.getenv("MICROBLINK_API_ENDPOINT", DEFAULT_ENDPOINT).rstrip(
            "/"
        )
        self.API_AUTHORIZATION = os.getenv("MICROBLINK_API_AUTHORIZATION", "")
        self.REQUEST_TIMEOUT = self._get_optional_positive_float("REQUEST_TIMEOUT")

        # --- Request tracking ---
        self.AUTO_PRUNE_REQUESTS = self._get_bool("AUTO_PRUNE_REQUESTS", False)
        self.ABORT_AS_ERROR = self._get_bool("ABORT_AS_ERROR", False)

        # --- Logging ---
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.LOG_FORMAT = os.getenv("LOG_FORMAT", "console").lower()
        if self.LOG_FORMAT not in ("console", "json"):
            raise ValueError("LOG_FORMAT must be 'console' or 'json'")

    def _get_optional_positive_float(self, var_name: str) -> float | None:
        """
        Gets an optional positive number, returning None when it is not set.
        """
        raw = os.getenv(var_name)
        if raw is None or raw.strip() == "":
            return None
        try:
            value = float(raw)
        except ValueError:
            raise ValueError(f"{var_name} must be a number, got '{raw}'") from None
        if value <= 0:
            raise ValueError(f"{var_name} must be greater than 0")
        return value

    def _get_bool(self, var_name: str, default: bool) -> bool:
        """
        Gets a boolean flag such as ``true``/``false`` or ``1``/``0``.
        """
        raw = os.getenv(var_name)
        if raw is None:
            return default
        value = raw.strip().lower()
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
        raise ValueError(f"{var_name} must be a boolean, got '{raw}'")
