"""Pydantic request/response schemas."""

from app.schemas.auth import (
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    SignupRequest,
)
from app.schemas.health import HealthResponse

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "SignupRequest",
]
