"""
Identity error taxonomy

Every error raised by the identity core carries a message and the HTTP status
the API layer should answer with.
"""


class IdentityError(Exception):
    """Base class for identity core errors"""

    status_code = 400

    def __init__(self, message="Identity error", status_code=None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class NotFoundError(IdentityError):
    status_code = 404


class ConflictError(IdentityError):
    status_code = 409


class UnauthorizedError(IdentityError):
    status_code = 401


class InvalidError(IdentityError):
    status_code = 400


class InvalidTokenError(IdentityError):
    status_code = 401

    def __init__(self, message="Invalid or expired token", status_code=None):
        super().__init__(message, status_code)


# OTP engine failures. The session layer folds these into UnauthorizedError.

class OTPError(IdentityError):
    status_code = 400
    reason = "otp_error"


class OTPNotFoundError(OTPError):
    reason = "not_found"

    def __init__(self, message="No OTP found for this phone number", status_code=None):
        super().__init__(message, status_code)


class OTPExpiredError(OTPError):
    reason = "expired"

    def __init__(self, message="OTP has expired. Please request a new one.", status_code=None):
        super().__init__(message, status_code)


class OTPThrottledError(OTPError):
    status_code = 429
    reason = "throttled"

    def __init__(
        self,
        message="Maximum verification attempts reached. Please request a new OTP.",
        status_code=None,
    ):
        super().__init__(message, status_code)


class InvalidOTPCodeError(OTPError):
    reason = "invalid_code"

    def __init__(self, message="Invalid OTP code", status_code=None):
        super().__init__(message, status_code)
