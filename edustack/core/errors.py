"""
Domain error hierarchy.

Services raise these exceptions and the server's exception handlers turn
them into ``{"success": false, "message": ...}`` JSON responses carrying the
matching HTTP status code.
"""

from typing import Any, Dict, Optional


class EduStackError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500
    error_code: Optional[str] = None

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        self.data = data


class BadRequestError(EduStackError):
    status_code = 400


class ConflictError(BadRequestError):
    """A uniqueness rule was violated (reported as 400 by the API)."""

    error_code = "CONFLICT"


class AuthenticationError(EduStackError):
    status_code = 401


class PaymentRequiredError(EduStackError):
    status_code = 402


class ForbiddenError(EduStackError):
    status_code = 403


class NotFoundError(EduStackError):
    status_code = 404


class PaymentGatewayError(EduStackError):
    """The payment provider rejected a request or could not be reached."""

    status_code = 502
    error_code = "PAYMENT_PROVIDER_ERROR"
