import asyncio
import contextlib
import secrets
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import TypeVar

import structlog
from pymongo.errors import PyMongoError

from tokengate.core.core import Service
from tokengate.core.modules.session.models import AuthToken, Session
from tokengate.core.modules.session.store import SessionStore
from tokengate.core.modules.user.models import CredentialVerifier
from tokengate.errors import AuthenticationError, ServiceUnavailableError
from tokengate.utils import now

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class SessionService(Service):
    """Creates, resolves and revokes sessions.

    The store and the credential verifier are passed in, so tests can use
    in-memory or scripted implementations.
    """

    def __init__(
        self,
        store: SessionStore,
        verifier: CredentialVerifier,
        lifetime: timedelta = timedelta(hours=24),
        token_bytes: int = 32,
        verifier_timeout: float = 5.0,
        sweep_interval: float = 0,
        clock: Callable[[], datetime] = now,
    ) -> None:
        super().__init__()
        self._store = store
        self._verifier = verifier
        self._lifetime = lifetime
        self._token_bytes = token_bytes
        self._verifier_timeout = verifier_timeout
        self._sweep_interval = sweep_interval
        self._clock = clock
        self._sweeper: asyncio.Task[None] | None = None

    async def on_start(self) -> None:
        await self._store.on_start()
        if self._sweep_interval > 0:
            self._sweeper = asyncio.create_task(self._sweep_forever())

    async def on_stop(self) -> None:
        if self._sweeper is not None:
            self._sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._sweeper
            self._sweeper = None

    async def login(self, email: str, password: str) -> Session:
        """Verify credentials and open a new session.

        Raises:
            AuthenticationError: no user matches the email/password pair
            ServiceUnavailableError: the verifier failed or timed out
        """
        try:
            async with asyncio.timeout(self._verifier_timeout):
                user = await self._verifier.find_with_credentials(email, password)
        except (TimeoutError, PyMongoError) as e:
            logger.warning("credential_verifier_unavailable", error=type(e).__name__)
            raise ServiceUnavailableError("Credential lookup failed") from e

        if user is None:
            logger.info("login_failed")
            raise AuthenticationError("Invalid credentials")

        session = Session(
            user_id=user.id,
            token=self._generate_token(),
            expires_at=self._clock() + self._lifetime,
        )
        await self._storage(self._store.put(session))
        logger.info("session_created", session_id=str(session.id), user_id=str(user.id))
        return session

    async def find_active_token(self, token: AuthToken) -> Session | None:
        """Return the active session for token, or None if unknown, revoked or expired."""
        return await self._storage(self._store.get_by_token(token))

    async def increment(self, session: Session) -> Session:
        """Record one authenticated access on the session.

        The store bumps the counter in place, so a session deleted by a
        concurrent logout stays deleted; in that case the given session is
        returned unchanged.
        """
        updated = await self._storage(self._store.increment_usage(session.token))
        if updated is None:
            logger.debug("session_gone_before_increment", session_id=str(session.id))
            return session
        return updated

    async def delete_by_token(self, token: AuthToken) -> None:
        """Remove the session for token. Idempotent."""
        await self._storage(self._store.delete_by_token(token))

    async def get_active_session(self, token: AuthToken | None) -> Session:
        """Resolve token to its active session and count the access."""
        if not token:
            raise AuthenticationError
        session = await self.find_active_token(token)
        if session is None:
            raise AuthenticationError("Invalid or expired session")
        return await self.increment(session)

    async def logout(self, token: AuthToken | None) -> None:
        """Revoke the session behind token.

        A missing token fails before the store is consulted; an unknown,
        expired or already revoked token fails the same way.
        """
        session = await self.get_active_session(token)
        await self.delete_by_token(AuthToken(session.token))
        logger.info("session_revoked", session_id=str(session.id), usage_count=session.usage_count)

    async def purge_expired(self) -> int:
        """Reclaim expired session records."""
        removed = await self._storage(self._store.purge_expired())
        if removed:
            logger.info("expired_sessions_purged", count=removed)
        return removed

    def _generate_token(self) -> str:
        return secrets.token_urlsafe(self._token_bytes)

    async def _storage(self, operation: Awaitable[T]) -> T:
        try:
            return await operation
        except PyMongoError as e:
            logger.exception("session_store_unavailable")
            raise ServiceUnavailableError("Session storage failed") from e

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            try:
                await self.purge_expired()
            except ServiceUnavailableError:
                continue
