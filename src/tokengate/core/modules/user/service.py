from typing import Any
from uuid import UUID

import bcrypt
import structlog
from pymongo.asynchronous.database import AsyncDatabase

from tokengate.core.core import Service
from tokengate.core.modules.user.models import User
from tokengate.core.modules.user.validators import MAX_PASSWORD_BYTES, validate_email, validate_password
from tokengate.errors import NotFoundError, ValidationError
from tokengate.utils import normalize_email

logger = structlog.get_logger(__name__)

# Checked against when the email is unknown so both failure paths cost one bcrypt round
_DUMMY_HASH = bcrypt.hashpw(b"tokengate-dummy-password", bcrypt.gensalt()).decode("utf-8")


def _check_password(password: str, password_hash: str) -> bool:
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        # Stored passwords never exceed the limit; still spend one bcrypt round
        bcrypt.checkpw(encoded[:MAX_PASSWORD_BYTES], password_hash.encode("utf-8"))
        return False
    try:
        return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
    except ValueError:
        return False


class UserService(Service):
    """Manages users with in-memory cache, optionally persisted to MongoDB.

    Implements the CredentialVerifier protocol for the session service.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]] | None = None) -> None:
        super().__init__()
        self._collection = database.get_collection("users") if database is not None else None
        self._users: dict[UUID, User] = {}

    def get_user(self, user_id: UUID) -> User:
        """Get user by ID from cache."""
        if user_id not in self._users:
            raise NotFoundError(f"User '{user_id}' not found")
        return self._users[user_id]

    def has_user(self, user_id: UUID) -> bool:
        return user_id in self._users

    def has_email(self, email: str) -> bool:
        email = normalize_email(email)
        return any(user.email == email for user in self._users.values())

    async def create_user(self, email: str, password: str) -> User:
        """Create user with hashed password."""
        email = normalize_email(email)
        validate_email(email)
        if self.has_email(email):
            raise ValidationError(f"User '{email}' already exists")

        validate_password(password)
        password_hash = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
        user = User(email=email, password_hash=password_hash)
        if self._collection is not None:
            await self._collection.insert_one(user.to_mongo())
        self._users[user.id] = user
        logger.info("user_created", user_id=str(user.id))
        return user

    async def find_with_credentials(self, email: str, password: str) -> User | None:
        """Return the user whose email and password match, otherwise None."""
        email = normalize_email(email)
        user = next((u for u in self._users.values() if u.email == email), None)
        password_hash = user.password_hash if user is not None else _DUMMY_HASH
        matches = _check_password(password, password_hash)
        if user is None or not matches:
            return None
        return user

    async def ensure_admin_user_exists(self, email: str, password: str) -> None:
        """Create the seed account if not exists."""
        if not self.has_email(email):
            await self.create_user(email, password)

    async def update_all_users_cache(self) -> None:
        """Reload all users cache from database."""
        if self._collection is None:
            return
        users = await User.list_cursor(self._collection.find())
        self._users = {user.id: user for user in users}

    async def on_start(self) -> None:
        """Initialize indexes and cache."""
        if self._collection is not None:
            await self._collection.create_index([("email", 1)], unique=True)
        await self.update_all_users_cache()
        logger.debug("user_service_started", user_count=len(self._users))
