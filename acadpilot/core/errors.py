"""Account errors.

Every error here carries the HTTP status it maps to and a message that is
safe to show to the caller. Anything that is not an ``AccountError`` is
reported to the caller as a generic internal error.
"""


class AccountError(Exception):
    status_code = 400
    default_message = "Request could not be completed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInputError(AccountError):
    """Missing or malformed request fields."""

    status_code = 400
    default_message = "Invalid input."


class ConflictError(AccountError):
    """The email address is already registered."""

    status_code = 409
    default_message = "This email address is already registered."


class InvalidCredentialsError(AccountError):
    """Login failed. Unknown email and wrong password are not told apart."""

    status_code = 401
    default_message = "Incorrect email or password."


class InvalidCodeError(AccountError):
    """Verification code is wrong, expired or already used."""

    status_code = 400
    default_message = "The verification code is invalid or has expired."


class UnauthorizedError(AccountError):
    status_code = 401
    default_message = "Not authenticated."


class TooManyRequestsError(AccountError):
    status_code = 429
    default_message = "Please wait before requesting another code."


class InternalError(AccountError):
    status_code = 500
    default_message = "Something went wrong. Please try again later."
