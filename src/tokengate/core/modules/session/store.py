"""Session storage backends.

Both backends enforce expiry at read time: a record whose expires_at has passed
is invisible to lookups even if it has not been reclaimed yet.
"""

import asyncio
from collections.abc import Callable
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from tokengate.core.modules.session.models import Session
from tokengate.utils import now


class SessionStore(Protocol):
    async def on_start(self) -> None: ...

    async def put(self, session: Session) -> None:
        """Insert or overwrite a session record."""
        ...

    async def get_by_token(self, token: str) -> Session | None:
        """Return the session for token if present and not expired."""
        ...

    async def increment_usage(self, token: str) -> Session | None:
        """Atomically bump usage_count of an active session; None if it is gone."""
        ...

    async def delete_by_token(self, token: str) -> None:
        """Remove the session for token; no-op if absent."""
        ...

    async def purge_expired(self) -> int:
        """Remove expired records, return how many were removed."""
        ...


class InMemorySessionStore:
    """Process-local store keyed by id and by token.

    Expired records are dropped whenever a new session is stored, so the maps
    stay bounded without a sweeper.
    """

    def __init__(self, clock: Callable[[], datetime] = now) -> None:
        self._clock = clock
        self._lock = asyncio.Lock()
        self._by_id: dict[UUID, Session] = {}
        self._by_token: dict[str, Session] = {}

    async def on_start(self) -> None:
        """Nothing to prepare."""

    async def put(self, session: Session) -> None:
        async with self._lock:
            self._purge_expired_locked()
            previous = self._by_id.get(session.id)
            if previous is not None:
                self._by_token.pop(previous.token, None)
            holder = self._by_token.get(session.token)
            if holder is not None:
                self._by_id.pop(holder.id, None)
            stored = session.model_copy()
            self._by_id[stored.id] = stored
            self._by_token[stored.token] = stored

    async def get_by_token(self, token: str) -> Session | None:
        async with self._lock:
            session = self._by_token.get(token)
            if session is None or not session.is_active(self._clock()):
                return None
            return session.model_copy()

    async def increment_usage(self, token: str) -> Session | None:
        async with self._lock:
            session = self._by_token.get(token)
            if session is None or not session.is_active(self._clock()):
                return None
            session.usage_count += 1
            return session.model_copy()

    async def delete_by_token(self, token: str) -> None:
        async with self._lock:
            session = self._by_token.pop(token, None)
            if session is not None:
                self._by_id.pop(session.id, None)

    async def purge_expired(self) -> int:
        async with self._lock:
            return self._purge_expired_locked()

    def _purge_expired_locked(self) -> int:
        current = self._clock()
        expired = [s for s in self._by_token.values() if not s.is_active(current)]
        for session in expired:
            del self._by_token[session.token]
            self._by_id.pop(session.id, None)
        return len(expired)

    def __len__(self) -> int:
        return len(self._by_id)


class MongoSessionStore:
    """Sessions persisted in the `sessions` collection."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]], clock: Callable[[], datetime] = now) -> None:
        self._collection = database.get_collection("sessions")
        self._clock = clock

    async def on_start(self) -> None:
        """Create indexes on startup."""
        # Unique index for token (for authentication lookups)
        await self._collection.create_index([("token", 1)], unique=True)
        # Single index for user_id (for finding sessions by user)
        await self._collection.create_index([("user_id", 1)])
        # TTL index: MongoDB removes records once expires_at has passed
        await self._collection.create_index([("expires_at", 1)], expireAfterSeconds=0)

    async def put(self, session: Session) -> None:
        await self._collection.replace_one({"_id": session.id}, session.to_mongo(), upsert=True)

    async def get_by_token(self, token: str) -> Session | None:
        doc = await self._collection.find_one({"token": token, "expires_at": {"$gt": self._clock()}})
        return Session.from_mongo(doc)

    async def increment_usage(self, token: str) -> Session | None:
        doc = await self._collection.find_one_and_update(
            {"token": token, "expires_at": {"$gt": self._clock()}},
            {"$inc": {"usage_count": 1}},
            return_document=ReturnDocument.AFTER,
        )
        return Session.from_mongo(doc)

    async def delete_by_token(self, token: str) -> None:
        await self._collection.delete_one({"token": token})

    async def purge_expired(self) -> int:
        result = await self._collection.delete_many({"expires_at": {"$lte": self._clock()}})
        return result.deleted_count
