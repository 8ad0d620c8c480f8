"""Shared pytest fixtures."""

from datetime import UTC, datetime, timedelta
from uuid import UUID

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from tokengate.core.modules.session.service import SessionService
from tokengate.core.modules.session.store import InMemorySessionStore
from tokengate.core.modules.user.models import User


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> None:
        self.current += delta


class ScriptedVerifier:
    """Credential verifier that accepts exactly one email/password pair."""

    def __init__(self, user: User, password: str) -> None:
        self.user = user
        self.password = password
        self.calls: list[tuple[str, str]] = []

    async def find_with_credentials(self, email: str, password: str) -> User | None:
        self.calls.append((email, password))
        if email == self.user.email and password == self.password:
            return self.user
        return None


class RecordingSessionStore(InMemorySessionStore):
    """In-memory store that remembers the usage count of each session at deletion."""

    def __init__(self, clock) -> None:
        super().__init__(clock=clock)
        self.usage_at_delete: list[int | None] = []

    async def delete_by_token(self, token: str) -> None:
        stored = await self.get_by_token(token)
        self.usage_at_delete.append(stored.usage_count if stored else None)
        await super().delete_by_token(token)


class UnreachableSessionStore:
    """Store whose backing database cannot be reached."""

    async def on_start(self) -> None:
        """Nothing to prepare."""

    async def _fail(self, *args):
        raise ServerSelectionTimeoutError("No servers found yet")

    put = get_by_token = increment_usage = delete_by_token = purge_expired = _fail


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def mock_user():
    """Create a mock user for testing."""
    return User(
        id=UUID("87654321-4321-8765-4321-876543218765"),
        email="testuser@example.com",
        password_hash="$2b$12$hashed_password_here",
    )


@pytest.fixture
def verifier(mock_user):
    return ScriptedVerifier(mock_user, "s3cret-pass")


@pytest.fixture
def store(clock):
    return InMemorySessionStore(clock=clock)


@pytest.fixture
def session_service(store, verifier, clock):
    return SessionService(store=store, verifier=verifier, lifetime=timedelta(hours=24), clock=clock)


@pytest.fixture
def recording_store(clock):
    return RecordingSessionStore(clock)


@pytest.fixture
def unreachable_store():
    return UnreachableSessionStore()
