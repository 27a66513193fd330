"""Custom exceptions for the Jyotish calculation engine and API."""

from typing import Optional


class JyotishAPIException(Exception):
    """Base exception for all engine and API errors."""
    pass


class ChartCalculationError(JyotishAPIException):
    """Raised when a chart or analysis cannot be calculated."""
    pass


class EphemerisUnavailableError(ChartCalculationError):
    """Raised when the ephemeris provider cannot resolve a position."""

    def __init__(self, message: str, body: Optional[str] = None,
                 julian_day: Optional[float] = None):
        super().__init__(message)
        self.body = body
        self.julian_day = julian_day


class EphemerisSetupError(EphemerisUnavailableError):
    """Raised when auxiliary ephemeris files cannot be prepared."""
    pass


class MissingMoonError(ChartCalculationError):
    """Raised when a natal chart carries no Moon position."""
    pass


class InvalidDateTimeError(JyotishAPIException, ValueError):
    """Raised when datetime is invalid."""
    pass


class InvalidCoordinatesError(JyotishAPIException, ValueError):
    """Raised when coordinates are invalid."""
    pass


class InvalidTimezoneError(JyotishAPIException, ValueError):
    """Raised when timezone is invalid."""
    pass
