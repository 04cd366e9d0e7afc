"""Failure kinds raised by the booking core and the identity layer.

Each error carries the HTTP status and stable code the transport layer reports.
"""

from fastapi import status


class BookingError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = 'internal_failure'
    default_detail = 'Server error.'

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class AuthRequired(BookingError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = 'auth_required'
    default_detail = 'No token, authorization denied.'


class Forbidden(BookingError):
    status_code = status.HTTP_403_FORBIDDEN
    code = 'forbidden'
    default_detail = 'You are not authorized to perform this action.'


class SlotNotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    code = 'slot_not_found'
    default_detail = 'Slot not found.'


class SlotUnavailable(BookingError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = 'slot_unavailable'
    default_detail = 'Slot is not available.'


class AppointmentNotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    code = 'appointment_not_found'
    default_detail = 'Appointment not found.'


class ValidationError(BookingError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = 'validation_error'
    default_detail = 'Please enter all fields.'


class UserAlreadyExists(BookingError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = 'user_exists'
    default_detail = 'User already exists.'


class InvalidCredentials(BookingError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = 'invalid_credentials'
    default_detail = 'Invalid credentials.'


class InternalFailure(BookingError):
    pass
