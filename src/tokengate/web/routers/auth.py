from fastapi import APIRouter
from pydantic import BaseModel, Field

from tokengate.core.modules.session.models import SessionRecord, SessionView
from tokengate.web.deps import AppDep, AuthTokenDep
from tokengate.web.openapi import ErrorResponse, ValidationErrorResponse

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    """Authentication request."""

    email: str = Field(..., description="Email for authentication")
    password: str = Field(..., description="Password for authentication")


class LogoutResponse(BaseModel):
    message: str = Field(default="Logged out")


@router.post(
    "/login",
    summary="Authenticate user",
    description="Authenticate with email and password to open a session.",
    operation_id="login",
    response_model_by_alias=True,
    responses={
        200: {"description": "Successfully authenticated"},
        400: {"model": ValidationErrorResponse, "description": "Missing or malformed fields"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        503: {"model": ErrorResponse, "description": "Credential lookup unavailable"},
    },
)
async def login(login_data: LoginRequest, app: AppDep) -> SessionView:
    session = await app.login(login_data.email, login_data.password)
    return SessionView.from_domain(session)


@router.get(
    "/logout",
    summary="End session",
    description="Revoke the session identified by the x-access-token header.",
    operation_id="logout",
    responses={
        200: {"description": "Successfully logged out"},
        401: {"model": ErrorResponse, "description": "Missing, unknown or expired token"},
    },
)
async def logout(app: AppDep, auth_token: AuthTokenDep) -> LogoutResponse:
    await app.logout(auth_token)
    return LogoutResponse()


@router.get(
    "/session",
    summary="Get current session",
    description="Return the active session for the x-access-token header. Counts as an authenticated access.",
    operation_id="getCurrentSession",
    response_model_by_alias=True,
    responses={
        200: {"description": "Active session"},
        401: {"model": ErrorResponse, "description": "Missing, unknown or expired token"},
    },
)
async def get_session(app: AppDep, auth_token: AuthTokenDep) -> SessionRecord:
    session = await app.get_current_session(auth_token)
    return SessionRecord.from_domain(session)
