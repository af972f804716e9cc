"""
Exception hierarchy for the plan coach core.

Transport failures (network, timeout, gateway, not found, other HTTP status)
are raised by the backend clients; the orchestration layer adds guard,
start, reconciliation and poll-budget failures.
"""

from typing import Optional


class CoachError(Exception):
    """
    Base exception for the coach package.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code the local API answers with.
        detail: Additional error details.
    """

    def __init__(
        self,
        message: str = "An error occurred",
        status_code: int = 500,
        detail: Optional[str] = None
    ):
        self.message = message
        self.status_code = status_code
        self.detail = detail or message
        super().__init__(self.message)


class NetworkError(CoachError):
    """The backend could not be reached."""

    def __init__(self, message: str = "Network error", detail: Optional[str] = None):
        super().__init__(message=message, status_code=503, detail=detail)


class ClientTimeoutError(CoachError):
    """The client gave up waiting for the backend."""

    def __init__(self, message: str = "Request timed out", detail: Optional[str] = None):
        super().__init__(message=message, status_code=504, detail=detail)


class GatewayError(CoachError):
    """
    The backend gateway timed out (HTTP 504).

    During generation start this means the job most likely kept running
    behind the gateway.
    """

    def __init__(self, message: str = "Gateway timeout", detail: Optional[str] = None):
        super().__init__(message=message, status_code=504, detail=detail)


class NotFoundError(CoachError):
    """The requested resource does not exist (yet)."""

    def __init__(self, message: str = "Resource not found", detail: Optional[str] = None):
        super().__init__(message=message, status_code=404, detail=detail)


class BackendError(CoachError):
    """The backend answered with an unexpected HTTP status."""

    def __init__(self, message: str = "Backend error", status_code: int = 502, detail: Optional[str] = None):
        super().__init__(message=message, status_code=status_code, detail=detail)


class GenerationStartError(CoachError):
    """Plan generation could not be started; no polling takes place."""

    def __init__(self, message: str = "Could not start plan generation", detail: Optional[str] = None):
        super().__init__(message=message, status_code=502, detail=detail)


class EditGuardError(CoachError):
    """A mutation was attempted on a week that is read-only."""

    def __init__(self, week: str, current: str):
        self.week = week
        self.current = current
        super().__init__(
            message=f"Week {week} is read-only",
            status_code=409,
            detail=f"Only the current week ({current}) or later weeks can be modified",
        )


class ReconciliationMismatchError(CoachError):
    """
    A partial backend response does not fit the plan held by the client.

    Callers must re-fetch the full plan instead of trusting the update.
    """

    def __init__(self, message: str = "Plan out of sync with backend", detail: Optional[str] = None):
        super().__init__(message=message, status_code=409, detail=detail)


class PollExhaustedError(CoachError):
    """The poll budget ran out while the last fetch was failing."""

    def __init__(self, attempts: int, cause: Optional[BaseException] = None):
        self.attempts = attempts
        self.cause = cause
        super().__init__(
            message=f"Plan not available after {attempts} attempts",
            status_code=504,
            detail=str(cause) if cause else None,
        )
