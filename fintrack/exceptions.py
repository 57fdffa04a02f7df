"""
Typed exceptions for business-rule violations.

Services raise these at the point of detection and never catch
them. The API layer translates each one to an HTTP status and a
structured error payload (see main.py). Catch by type, not by
message text.

    FinTrackError
    +-- NotFoundError                404
    +-- ConflictError                409
    +-- BadRequestError              400
    +-- UnauthorizedError            403
    +-- InvalidCredentialsError      401
    +-- AuthenticationRequiredError  401
"""


class FinTrackError(Exception):
    """Base class for every error the service reports to clients."""

    kind: str = "InternalError"
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(FinTrackError):
    """A referenced entity does not exist."""

    kind = "NotFound"
    status_code = 404


class ConflictError(FinTrackError):
    """A uniqueness or referential rule would be broken."""

    kind = "Conflict"
    status_code = 409


class BadRequestError(FinTrackError):
    """An invalid field value or an illegal state transition."""

    kind = "BadRequest"
    status_code = 400


class UnauthorizedError(FinTrackError):
    """The caller is authenticated but not allowed to do this."""

    kind = "Unauthorized"
    status_code = 403


class InvalidCredentialsError(FinTrackError):
    """Login failed: unknown email, inactive account or wrong password."""

    kind = "InvalidCredentials"
    status_code = 401


class AuthenticationRequiredError(FinTrackError):
    """No usable bearer token was presented."""

    kind = "AuthenticationRequired"
    status_code = 401
