"""Error taxonomy for the auth service.

Each error carries an HTTP status and a stable machine-readable code; the API
layer renders them as {"detail": {"code": ..., "message": ...}}. Messages are
fixed strings so nothing from the store or a traceback reaches the caller.
"""


class AuthError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 400
    code: str = "auth_error"
    default_message: str = "Request could not be processed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_detail(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class InvalidInputError(AuthError):
    """Request failed boundary validation (malformed email, short password)."""

    status_code = 422
    code = "invalid_input"
    default_message = "Invalid input."


class DuplicateCredentialError(AuthError):
    """Email is already registered."""

    status_code = 409
    code = "duplicate_credential"
    default_message = "Email already registered."


class InvalidCredentialsError(AuthError):
    """Unknown email or wrong password; the two cases are not distinguished."""

    status_code = 401
    code = "invalid_credentials"
    default_message = "Invalid email or password."


class AccountDeactivatedError(AuthError):
    status_code = 403
    code = "account_deactivated"
    default_message = "User is deactivated."


class InvalidRefreshTokenError(AuthError):
    """Refresh token is absent, expired, or its owner is missing or deactivated."""

    status_code = 401
    code = "invalid_refresh_token"
    default_message = "Invalid refresh token."


class NotFoundError(AuthError):
    status_code = 404
    code = "not_found"
    default_message = "User not found."


class ForbiddenError(AuthError):
    """Identity is known but its role is not allowed on this route."""

    status_code = 403
    code = "forbidden"
    default_message = "Insufficient role."


class UnauthenticatedError(AuthError):
    """No, malformed, forged or expired access token."""

    status_code = 401
    code = "unauthenticated"
    default_message = "Authentication required."
