"""Request/response schemas for the register and login endpoints."""

import re

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic_core import PydanticCustomError

from app.core.security import BCRYPT_MAX_BYTES, password_fits
from app.models.user import Role

USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 24
PASSWORD_MIN_LEN = 5
PASSWORD_MAX_LEN = 24

# Error type used for signup policy violations; the message already names the field.
POLICY_ERROR_TYPE = "policy_rule"

_LOWERCASE = re.compile(r"[a-z]")
_UPPERCASE = re.compile(r"[A-Z]")
# Anything outside letters, digits and underscore (ASCII word characters).
_SPECIAL = re.compile(r"[^A-Za-z0-9_]")


def _policy_error(message: str) -> PydanticCustomError:
    return PydanticCustomError(POLICY_ERROR_TYPE, message)


class SignupRequest(BaseModel):
    """
    New account payload. Strings are trimmed before any rule is checked.

    The role is sent as `type` on the wire.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(..., description="Unique username (3-24 characters)")
    email: EmailStr = Field(..., description="Unique email address")
    role: Role = Field(..., alias="type", description="Account type: user or admin")
    password: str = Field(
        ...,
        description="5-24 characters with lower case, upper case and a special character",
    )

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        if not v:
            raise _policy_error("username must not be empty or whitespace")
        if not (USERNAME_MIN_LEN <= len(v) <= USERNAME_MAX_LEN):
            raise _policy_error(
                f"username must be between {USERNAME_MIN_LEN} and {USERNAME_MAX_LEN} characters"
            )
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v:
            raise _policy_error("password must not be empty or whitespace")
        if not (PASSWORD_MIN_LEN <= len(v) <= PASSWORD_MAX_LEN):
            raise _policy_error(
                f"password must be between {PASSWORD_MIN_LEN} and {PASSWORD_MAX_LEN} characters"
            )
        if not password_fits(v):
            raise _policy_error(
                f"password must not exceed {BCRYPT_MAX_BYTES} bytes when UTF-8 encoded"
            )
        if not _LOWERCASE.search(v):
            raise _policy_error("password must contain at least one lower case letter")
        if not _UPPERCASE.search(v):
            raise _policy_error("password must contain at least one upper case letter")
        if not _SPECIAL.search(v):
            raise _policy_error("password must contain at least one special character")
        return v


class LoginRequest(BaseModel):
    """Credentials for login. No policy checks; a bad pair is just a failed login."""

    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(..., description="Username")
    password: str = Field(..., description="Password")


class MessageResponse(BaseModel):
    """Success body for register and login."""

    message: str


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    error: str
