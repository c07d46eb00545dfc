"""
Booking domain errors.

Every failure the booking core can report has its own class so callers
(and the UI behind the API) can tell "choose another slot" apart from
"try again later". The API layer renders them through a single exception
handler in app.main.
"""
from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for all booking-domain failures."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "code": self.code, "details": self.details}


class InvalidTimeError(DomainError):
    """A time string could not be normalized to minutes since midnight."""

    status_code = 400

    def __init__(self, value: Any) -> None:
        super().__init__(f"Unrecognized time value: {value!r}", details={"value": value})
        self.value = value


class InvalidTimeSelectionError(DomainError):
    """The requested booking window is unusable."""

    status_code = 400


class SlotTakenError(DomainError):
    """The window overlaps another requester's non-cancelled booking."""

    status_code = 409


class DuplicateOwnBookingError(DomainError):
    """The window overlaps the requester's own existing booking."""

    status_code = 409


class BackendUnavailableError(DomainError):
    """The external store could not be reached or returned an unexpected error."""

    status_code = 503


class VerificationFailedError(DomainError):
    """A status write was not confirmed by the subsequent re-read."""

    status_code = 502


class NotFoundError(DomainError):
    status_code = 404


class NotAuthenticatedError(DomainError):
    status_code = 401


class ForbiddenError(DomainError):
    status_code = 403


class InvalidStatusTransitionError(DomainError):
    """The booking is not in a state that allows the requested status."""

    status_code = 409
