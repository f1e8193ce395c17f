import re

from pydantic import BaseModel, ConfigDict, field_validator

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def normalize_email(value: str | None) -> str:
    return (value or '').strip().lower()


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value))


# Request fields are optional here; the registrar and authenticator decide
# which missing field is reported first.
class SignupRequest(BaseModel):
    email: str | None = None
    password: str | None = None
    name: str | None = None
    role: str | None = None
    institution: str | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class SendCodeRequest(BaseModel):
    email: str | None = None


class VerifyCodeRequest(BaseModel):
    email: str | None = None
    code: str | None = None


class PublicUser(BaseModel):
    """The fields of a user that may leave the server."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    role: str
    institution: str = ''

    @field_validator('institution', mode='before')
    @classmethod
    def default_institution(cls, value: str | None) -> str:
        return value or ''
