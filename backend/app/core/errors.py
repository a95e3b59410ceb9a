# app/core/errors.py
"""
Error taxonomy for account operations.

Every error carries the HTTP status it maps to and a user-facing message;
the exception handlers in app.main render them in the standard envelope
``{"success": false, "message": ..., "needVerification"?: ...}``.
"""


class AccountError(Exception):
    """Base class for failures reported to the client."""

    status_code = 500

    def __init__(self, message: str, *, status_code: int | None = None, need_verification: bool = False):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.need_verification = need_verification

    def to_body(self) -> dict:
        body = {"success": False, "message": self.message}
        if self.need_verification:
            body["needVerification"] = True
        return body


class ValidationError(AccountError):
    """Malformed or missing input."""
    status_code = 400


class ConflictError(AccountError):
    """Duplicate record, or the target is already in the requested state."""
    status_code = 409


class AuthError(AccountError):
    """Bad credentials or missing authentication."""
    status_code = 401


class ForbiddenError(AccountError):
    """Authenticated but not allowed (e.g. email not verified)."""
    status_code = 403


class NotFoundError(AccountError):
    status_code = 404


class TokenError(AccountError):
    """Invalid, expired or mismatched signed/opaque token."""
    status_code = 400


class ServerError(AccountError):
    """Unexpected infrastructure failure."""
    status_code = 500
