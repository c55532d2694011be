"""
Error taxonomy shared by the service layer and the API.

Each error is an `HTTPException`, so service functions can raise them directly
and the router lets them propagate to the exception handlers installed by
`create_app`, which render `{"success": false, "message": ..., "error": category}`.
"""

from fastapi import HTTPException


class WhisperboxError(HTTPException):
    status_code = 500
    category = "internal"
    default_detail = "Internal server error"

    def __init__(self, detail=None, headers: dict[str, str] | None = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail if detail is not None else self.default_detail,
            headers=headers,
        )


class UnauthorizedError(WhisperboxError):
    """No session, an invalid or expired session token, or wrong credentials."""

    status_code = 401
    category = "unauthorized"
    default_detail = "Unauthorized"


class ForbiddenError(WhisperboxError):
    """Identified but not permitted (unverified sign in, inbox closed)."""

    status_code = 403
    category = "forbidden"
    default_detail = "Forbidden"


class NotFoundError(WhisperboxError):
    status_code = 404
    category = "not_found"
    default_detail = "Not found"


class ConflictError(WhisperboxError):
    """Username or email already owned by a verified account."""

    status_code = 400
    category = "conflict"
    default_detail = "Already taken"


class InvalidInputError(WhisperboxError):
    status_code = 400
    category = "validation"
    default_detail = "Invalid input"


class CodeExpiredError(InvalidInputError):
    default_detail = "Verification code has expired, please sign up again to get a new code"


class IncorrectCodeError(InvalidInputError):
    default_detail = "Incorrect verification code"


class InternalError(WhisperboxError):
    pass


class ServiceUnavailableError(WhisperboxError):
    status_code = 503
    category = "unavailable"
    default_detail = "Service unavailable"
