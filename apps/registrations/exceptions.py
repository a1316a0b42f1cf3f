"""
Error kinds raised by the registration lifecycle.

Every class carries a stable `default_code` that clients can switch on; the
HTTP status comes from the DRF base class.
"""

from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    NotFound,
    PermissionDenied,
    ValidationError,
)


class RegistrationError(APIException):
    """Base exception for registration business-rule failures."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "The registration request could not be processed."
    default_code = "registration_error"


class EventNotFound(NotFound):
    default_detail = "Event not found."
    default_code = "event_not_found"


class RegistrationNotFound(NotFound):
    default_detail = "Registration not found."
    default_code = "registration_not_found"


class Forbidden(PermissionDenied):
    default_detail = "You are not authorized to perform this action."
    default_code = "forbidden"


class DuplicateRegistration(RegistrationError):
    default_detail = "You are already registered for this event."
    default_code = "duplicate_registration"


class EventInactive(RegistrationError):
    default_detail = "Event is not active."
    default_code = "event_inactive"


class DeadlinePassed(RegistrationError):
    default_detail = "Registration deadline has passed."
    default_code = "deadline_passed"


class EventAlreadyOccurred(RegistrationError):
    default_detail = "Event has already occurred."
    default_code = "event_already_occurred"


class AlreadyPastDeadline(RegistrationError):
    default_detail = "Registration cannot be cancelled after the deadline."
    default_code = "already_past_deadline"


class AlreadyCancelled(RegistrationError):
    default_detail = "Registration is already cancelled."
    default_code = "already_cancelled"


class InvalidStatus(RegistrationError):
    default_detail = "Invalid status. Must be: confirmed, waitlist, or cancelled."
    default_code = "invalid_status"


class ValidationFailed(ValidationError):
    default_detail = "Validation failed."
    default_code = "validation_failed"


class EventNotYetOccurred(RegistrationError):
    default_detail = "Cannot submit feedback before the event occurs."
    default_code = "event_not_yet_occurred"


class RegistrationBusy(APIException):
    """Raised when the per-event lock cannot be acquired in time."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Registration is busy for this event. Please try again."
    default_code = "registration_busy"
