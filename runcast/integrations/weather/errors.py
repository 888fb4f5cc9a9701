"""Forecast provider errors.

Provider failures are classified into four kinds and propagate unchanged
through the forecast cache:

- FORECAST_UNAVAILABLE: provider 5xx, timeout, transport failure or an
  incomplete forecast (retryable)
- FORECAST_LOCATION_NOT_FOUND: unknown or malformed location (not retryable)
- FORECAST_RATE_LIMITED: provider throttling (retryable, later)
- FORECAST_REQUEST_REJECTED: any other 4xx, e.g. 401/403 (not retryable)
"""


class ForecastError(Exception):
    """Base exception for all forecast provider errors.

    Attributes:
        code: Stable error code
        message: Human-readable message
        status_code: HTTP status returned by the provider, if any
        retryable: Whether the same request may succeed later
    """

    code = "FORECAST_ERROR"
    retryable = False

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(f"{self.code}: {message}")


class ForecastUnavailable(ForecastError):
    """Raised when the provider is down, times out or returns unusable data."""

    code = "FORECAST_UNAVAILABLE"
    retryable = True


class ForecastLocationNotFound(ForecastError):
    """Raised when the location cannot be resolved by the provider."""

    code = "FORECAST_LOCATION_NOT_FOUND"
    retryable = False


class ForecastRateLimited(ForecastError):
    """Raised when the provider throttles requests."""

    code = "FORECAST_RATE_LIMITED"
    retryable = True


class ForecastRequestRejected(ForecastError):
    """Raised when the provider refuses the request itself (auth, validation)."""

    code = "FORECAST_REQUEST_REJECTED"
    retryable = False


def error_for_status(status_code: int, message: str) -> ForecastError:
    """Classify an HTTP error status into a forecast error."""
    if status_code == 429:
        return ForecastRateLimited(message, status_code)
    if status_code in {400, 404}:
        return ForecastLocationNotFound(message, status_code)
    if 400 <= status_code < 500:
        return ForecastRequestRejected(message, status_code)
    return ForecastUnavailable(message, status_code)
