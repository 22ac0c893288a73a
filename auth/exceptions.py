"""Auth exceptions."""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION_ERROR = "validation_error"
    NOT_FOUND_OR_EXPIRED = "not_found_or_expired"
    EXPIRED = "expired"
    ATTEMPTS_EXCEEDED = "attempts_exceeded"
    INVALID_CODE = "invalid_code"
    NO_PENDING_REQUEST = "no_pending_request"
    ALREADY_REGISTERED = "already_registered"
    SEND_FAILED = "send_failed"
    UNAUTHORIZED = "unauthorized"
    INVALID_REFRESH_TOKEN = "invalid_refresh_token"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"


class AuthException(Exception):
    """Base auth exception with HTTP status."""

    def __init__(self, message: str, status_code: int = 400, kind: ErrorKind | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.kind = kind


class DuplicateContactNumberError(Exception):
    """Raised by user stores when the contact number is already taken."""

    def __init__(self, contact_number: str):
        super().__init__(f"Contact number already registered: {contact_number}")
        self.contact_number = contact_number


class SmsDeliveryError(Exception):
    """Raised by SMS gateways when a message could not be handed off."""
