import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from tokengate.errors import AuthenticationError, NotFoundError, ServiceUnavailableError, ValidationError

logger = logging.getLogger(__name__)


def create_json_error_response(
    status_code: int, message: str, error_type: str | None = None, errors: list[dict[str, str]] | None = None
) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing."""
    content: dict[str, Any] = {"message": message}
    if error_type:
        content["type"] = error_type
    if errors is not None:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    if isinstance(exc, AuthenticationError):
        status_code = 401
        error_type = "authentication_error"
    elif isinstance(exc, NotFoundError):
        status_code = 404
        error_type = "not_found"
    elif isinstance(exc, ValidationError):
        status_code = 400
        error_type = "validation_error"
    else:
        # Default for any other UserError subclass
        status_code = 400
        error_type = "bad_request"

    return create_json_error_response(status_code=status_code, message=str(exc), error_type=error_type)


async def request_validation_error_handler(_: Request, exc: Exception) -> Response:
    """Report malformed request bodies as 400 with one entry per problem."""
    errors = []
    for error in exc.errors() if isinstance(exc, RequestValidationError) else []:
        field = str(error["loc"][-1]) if error.get("loc") else "body"
        if error.get("type") == "missing":
            message = f"should have required property '{field}'"
        else:
            message = str(error.get("msg", "invalid value"))
        errors.append({"field": field, "message": message})
    return create_json_error_response(
        status_code=400, message="Invalid request", error_type="validation_error", errors=errors
    )


async def service_unavailable_handler(_: Request, exc: Exception) -> Response:
    """Handle outages of backing services (503), detail stays in the logs."""
    logger.error("Service unavailable: %s", exc)
    return create_json_error_response(
        status_code=503, message="Service temporarily unavailable.", error_type="service_unavailable"
    )


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("Unexpected error: %s", exc)
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )
