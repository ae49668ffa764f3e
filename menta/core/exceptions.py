"""Domain errors raised by the service layer.

Every error carries an HTTP status, a stable machine-readable ``reason`` and a
human-readable message. The application renders them through a single
exception handler, so routes never translate them by hand.
"""
from typing import Optional

from fastapi import status


class MentaError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    reason: str = "error"
    default_message: str = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(MentaError):
    reason = "validation error"
    default_message = "Email and verification code are required"


class NotFoundError(MentaError):
    status_code = status.HTTP_404_NOT_FOUND
    reason = "no code requested"
    default_message = "No verification code found for this email"


class ExpiredError(MentaError):
    reason = "expired"
    default_message = "Verification code has expired"


class AttemptsExceededError(MentaError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    reason = "too many attempts"
    default_message = "Too many failed attempts. Please request a new code."


class MismatchError(MentaError):
    reason = "invalid code"
    default_message = "Invalid verification code"


class ConflictError(MentaError):
    status_code = status.HTTP_409_CONFLICT
    reason = "already registered"
    default_message = "Email is already registered"


class DeliveryError(MentaError):
    status_code = status.HTTP_502_BAD_GATEWAY
    reason = "delivery failed"
    default_message = "Failed to send verification code"


class EmailNotVerifiedError(MentaError):
    reason = "email not verified"
    default_message = "Email must be verified before registration"


class ResourceNotFoundError(MentaError):
    status_code = status.HTTP_404_NOT_FOUND
    reason = "not found"
    default_message = "Resource not found"
