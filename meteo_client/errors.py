"""Exceptions raised by the forecast client."""

from __future__ import annotations

from typing import Optional


class OpenMeteoError(Exception):
    """Base class for every failure this package raises itself."""


class InvalidURL(OpenMeteoError, ValueError):
    """Request parameters cannot be turned into a forecast URL."""


class InvalidResponse(OpenMeteoError):
    """The API answered with a status outside 200..299."""

    def __init__(self, status_code: int, url: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        super().__init__(f"Open-Meteo returned HTTP {status_code}")


class DecodingError(OpenMeteoError):
    """The response body did not match the expected forecast schema."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message if cause is None else f"{message}: {cause}")
