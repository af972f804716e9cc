"""Failure classification for backend calls.

Turns httpx exceptions into the coach error taxonomy so callers can decide
between absorbing a failure (gateway timeouts, client timeouts, dropped
connections during generation start) and surfacing it.
"""
import httpx

from coach.utilities.errors import (
    BackendError,
    ClientTimeoutError,
    CoachError,
    GatewayError,
    NetworkError,
    NotFoundError,
)


def classify_failure(exc: BaseException) -> CoachError:
    """Return the coach error matching ``exc``.

    Errors that are already classified pass through unchanged.
    """
    if isinstance(exc, CoachError):
        return exc
    if isinstance(exc, httpx.TimeoutException):
        return ClientTimeoutError(detail=str(exc) or type(exc).__name__)
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        body = exc.response.text[:200]
        if status == 504:
            return GatewayError(detail=body)
        if status == 404:
            return NotFoundError(detail=body)
        return BackendError(f"Backend answered {status}", status_code=502, detail=body)
    if isinstance(exc, httpx.TransportError):
        return NetworkError(detail=str(exc) or type(exc).__name__)
    return BackendError(f"Unexpected failure: {type(exc).__name__}", detail=str(exc))


def is_absorbable_start_failure(error: CoachError) -> bool:
    """True when a failed generation start most likely left a job running."""
    return isinstance(error, (GatewayError, ClientTimeoutError, NetworkError))
