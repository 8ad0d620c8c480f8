from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from tokengate.config import Config
from tokengate.core.core import Core
from tokengate.core.modules.session.models import AuthToken, Session
from tokengate.core.modules.user.models import UserView


class App:
    """Facade for all application operations, delegates to Core services."""

    def __init__(self, config: Config, core: Core | None = None) -> None:
        self._core = core if core is not None else Core(config)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    async def login(self, email: str, password: str) -> Session:
        """Authenticate user and create session."""
        return await self._core.services.session.login(email, password)

    async def logout(self, auth_token: AuthToken | None) -> None:
        """Revoke the session behind the token."""
        await self._core.services.session.logout(auth_token)

    async def get_current_session(self, auth_token: AuthToken | None) -> Session:
        """Get the active session for the token, counting the access."""
        return await self._core.services.session.get_active_session(auth_token)

    async def create_user(self, email: str, password: str) -> UserView:
        user = await self._core.services.user.create_user(email, password)
        return UserView.from_domain(user)
