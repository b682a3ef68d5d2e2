"""Register and login endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.config import Settings, get_settings
from app.core.store import CredentialStore, get_store
from app.schemas.auth import ErrorResponse, LoginRequest, MessageResponse, SignupRequest
from app.services.accounts import AuthenticationError, ConflictError, authenticate_user, register_user

router = APIRouter()


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid signup data"},
        409: {"model": ErrorResponse, "description": "Username or email already registered"},
    },
)
def register(
    body: SignupRequest,
    store: Annotated[CredentialStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> MessageResponse:
    """
    Register a new account. The password is hashed with a fresh salt and never echoed back.
    Returns 400 on the first failed validation rule and 409 if the username or email is taken.
    """
    try:
        register_user(store, body, settings)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e
    return MessageResponse(message="User registered successfully")


@router.post(
    "/login",
    response_model=MessageResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid username or password"}},
)
def login(
    body: LoginRequest,
    store: Annotated[CredentialStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> MessageResponse:
    """Verify username and password. No token or session is issued."""
    try:
        authenticate_user(store, body, settings)
    except AuthenticationError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message) from e
    return MessageResponse(message="Login successful")
