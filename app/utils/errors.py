# app/utils/errors.py
"""
Domain errors raised by the services.

Routers translate these into HTTP responses; the same error can map to a
different status code depending on the route (a missing user is a 400 on
email verification but a 404 on forgot-password).
"""


class AppError(Exception):
    """Base class for expected failures with a human-readable message."""

    default_message = "Request failed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    default_message = "Invalid input"


class ConflictError(AppError):
    default_message = "User already exists"


class NotFoundError(AppError):
    default_message = "Not found"


class InvalidCredentialsError(AppError):
    default_message = "Invalid email or password"


class InvalidTokenError(AppError):
    default_message = "Invalid or expired code"


class UnverifiedError(AppError):
    default_message = "Please verify your email before logging in"


class ForbiddenError(AppError):
    default_message = "User not authorized"


class DeliveryError(AppError):
    default_message = "Failed to send email"


class UnauthenticatedError(AppError):
    default_message = "Could not validate credentials"
