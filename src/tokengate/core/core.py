from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from tokengate.config import Config

if TYPE_CHECKING:
    from tokengate.core.modules.session.service import SessionService
    from tokengate.core.modules.session.store import SessionStore
    from tokengate.core.modules.user.models import CredentialVerifier
    from tokengate.core.modules.user.service import UserService


class Service:
    """Base class for services with startup and shutdown hooks."""

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""


class Services:
    """Service registry, wired explicitly from config.

    `session_store` and `verifier` replace the configured backends when given.
    """

    user: UserService
    session: SessionService

    def __init__(
        self,
        config: Config,
        database: AsyncDatabase[dict[str, Any]] | None,
        session_store: SessionStore | None = None,
        verifier: CredentialVerifier | None = None,
    ) -> None:
        from tokengate.core.modules.session.service import SessionService  # noqa: PLC0415
        from tokengate.core.modules.session.store import InMemorySessionStore, MongoSessionStore  # noqa: PLC0415
        from tokengate.core.modules.user.service import UserService  # noqa: PLC0415

        self.user = UserService(database)

        store = session_store
        if store is None:
            if config.session_backend == "mongo" and database is not None:
                store = MongoSessionStore(database)
            else:
                store = InMemorySessionStore()

        self.session = SessionService(
            store=store,
            verifier=verifier if verifier is not None else self.user,
            lifetime=timedelta(seconds=config.session_lifetime_seconds),
            token_bytes=config.token_bytes,
            verifier_timeout=config.verifier_timeout_seconds,
            sweep_interval=config.sweep_interval_seconds,
        )

        # Order matters for initialization - users are loaded before sessions resolve
        self._services: list[Service] = [self.user, self.session]

    async def start_all(self) -> None:
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        for service in reversed(self._services):
            await service.on_stop()


class Core:
    """Container providing config, optional database, and all service instances."""

    config: Config
    mongo_client: AsyncMongoClient[dict[str, Any]] | None
    database: AsyncDatabase[dict[str, Any]] | None
    services: Services

    def __init__(
        self,
        config: Config,
        session_store: SessionStore | None = None,
        verifier: CredentialVerifier | None = None,
    ) -> None:
        """Initialize core with config, MongoDB when configured, and wire services."""
        self.config = config
        self.mongo_client = None
        self.database = None
        if config.database_url:
            self.mongo_client = AsyncMongoClient(config.database_url, uuidRepresentation="standard", tz_aware=True)
            self.database = self.mongo_client.get_database(urlparse(config.database_url).path[1:])
        self.services = Services(config, self.database, session_store=session_store, verifier=verifier)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        await self.services.start_all()
        if self.config.admin_email and self.config.admin_password:
            await self.services.user.ensure_admin_user_exists(self.config.admin_email, self.config.admin_password)

    async def on_stop(self) -> None:
        """Stop services and close MongoDB connection on shutdown."""
        await self.services.stop_all()
        if self.mongo_client is not None:
            await self.mongo_client.aclose()
