from typing import Protocol
from uuid import UUID

from pydantic import BaseModel, Field

from tokengate.core.db import MongoModel


class User(MongoModel):
    """User domain model with credentials."""

    email: str
    password_hash: str  # bcrypt hash


class UserView(BaseModel):
    """User account information (API representation)."""

    id: UUID = Field(..., description="User ID")
    email: str = Field(..., description="Email address")

    @classmethod
    def from_domain(cls, user: User) -> "UserView":
        """Create view model from domain model."""
        return cls(id=user.id, email=user.email)


class CredentialVerifier(Protocol):
    """Resolves an email/password pair to a user.

    Returns None when nothing matches, without telling an unknown email
    apart from a wrong password.
    """

    async def find_with_credentials(self, email: str, password: str) -> User | None: ...
