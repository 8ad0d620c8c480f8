from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from tokengate.app import App
from tokengate.core.modules.session.models import AuthToken

ACCESS_TOKEN_HEADER = "x-access-token"

token_header_scheme = APIKeyHeader(name=ACCESS_TOKEN_HEADER, auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_auth_token(token: Annotated[str | None, Depends(token_header_scheme)] = None) -> AuthToken | None:
    """Extract the bearer token from the x-access-token header, if any.

    Validation happens in the session service so a missing header never reaches the store.
    """
    if not token:
        return None
    return AuthToken(token)


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
AuthTokenDep = Annotated[AuthToken | None, Depends(get_auth_token)]
