from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

from tokengate.web.deps import ACCESS_TOKEN_HEADER


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="tokengate API",
            version="0.1.0",
            summary="Token-based session authentication",
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "AccessToken": {
                "type": "apiKey",
                "in": "header",
                "name": ACCESS_TOKEN_HEADER,
                "description": "Session token returned by login",
            },
        }

        # Apply security globally (will be overridden for public endpoints)
        openapi_schema["security"] = [{"AccessToken": []}]

        public_endpoints = {
            ("POST", "/api/login"),
            ("GET", "/health"),
        }

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                if (method.upper(), path) in public_endpoints:
                    operation["security"] = []

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "Invalid credentials", "type": "authentication_error"},
                {"message": "Invalid or expired session", "type": "authentication_error"},
                {"message": "Service temporarily unavailable.", "type": "service_unavailable"},
            ]
        }
    }


class FieldError(BaseModel):
    field: str = Field(..., description="Offending request field")
    message: str = Field(..., description="What is wrong with it")


class ValidationErrorResponse(ErrorResponse):
    """Error response for malformed requests."""

    errors: list[FieldError] = Field(default_factory=list, description="One entry per problem")
