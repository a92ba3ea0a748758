"""
Error taxonomy shared by the token store, calendar service and orchestration.

AuthFailure is the single signal for an unusable session. Callers treat it the
same way wherever it surfaces: stop related work, tear down the session's
credentials and ask the user to sign in again.
"""


class CalendarError(Exception):
    """Base error for calendar and session operations."""


class AuthFailure(CalendarError):
    """Raised when the provider rejects the session's credentials."""


class SessionExpired(AuthFailure):
    """Raised when the refresh capability itself is rejected or already spent."""


class NetworkFailure(CalendarError):
    """Raised on transport errors. Retryable by re-issuing the same action."""


class ProviderError(CalendarError):
    """Raised when the calendar provider answers with a non-auth error status."""

    def __init__(self, *, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Google Calendar API request failed ({status_code}): {message}")


class ValidationFailure(CalendarError):
    """Raised on malformed client input such as an inverted time window."""


class OperationInProgress(CalendarError):
    """Raised when a delete is triggered while another one is still running."""
