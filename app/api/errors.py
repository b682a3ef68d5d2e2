"""Exception handlers that render every failure as {"error": "<message>"}."""

import logging
from collections.abc import Sequence
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.schemas.auth import POLICY_ERROR_TYPE

logger = logging.getLogger(__name__)


def describe_first_error(errors: Sequence[Any]) -> str:
    """
    Turn the first pydantic error into a human-readable message naming the field.

    Policy rule messages already name the field and are returned as-is.
    """
    if not errors:
        return "Invalid request"
    err = errors[0]
    loc = [str(part) for part in err.get("loc", ()) if part != "body"]
    field = ".".join(loc) or "request body"
    if err.get("type") == POLICY_ERROR_TYPE:
        return err.get("msg", "Invalid request")
    if err.get("type") == "json_invalid":
        return f"request body: {err.get('msg', 'JSON decode error')}"
    if err.get("type") == "missing":
        return f"{field} is required"
    return f"{field}: {err.get('msg', 'invalid value')}"


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    message = describe_first_error(exc.errors())
    logger.info("Request rejected", extra={"path": request.url.path, "reason": message})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error-body handlers on the application."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
