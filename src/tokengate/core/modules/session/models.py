"""Session management models."""

from datetime import datetime
from typing import NewType
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from tokengate.core.db import MongoModel
from tokengate.utils import now

AuthToken = NewType("AuthToken", str)


class Session(MongoModel):
    """Bearer token bound to a user until expires_at.

    Indexed on token - unique, user_id, expires_at (TTL).
    """

    user_id: UUID
    token: str
    expires_at: datetime
    usage_count: int = 0
    created_at: datetime = Field(default_factory=now)

    def is_active(self, at: datetime) -> bool:
        """Expiry is computed on every read, never stored as a flag."""
        return self.expires_at > at


class SessionView(BaseModel):
    """Session returned to the client after login."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID = Field(..., description="Session ID")
    user_id: UUID = Field(..., alias="userId", description="Owning user ID")
    token: str = Field(..., description="Bearer token, send back in the x-access-token header")
    expires_at: datetime = Field(..., alias="expiresAt", description="Absolute expiry timestamp")

    @classmethod
    def from_domain(cls, session: Session) -> "SessionView":
        return cls(id=session.id, user_id=session.user_id, token=session.token, expires_at=session.expires_at)


class SessionRecord(SessionView):
    """Full persisted session shape, for inspection and admin tooling."""

    usage_count: int = Field(..., alias="usageCount", description="Number of authenticated accesses")

    @classmethod
    def from_domain(cls, session: Session) -> "SessionRecord":
        return cls(
            id=session.id,
            user_id=session.user_id,
            token=session.token,
            expires_at=session.expires_at,
            usage_count=session.usage_count,
        )
