"""Tests for the App facade wired with in-memory storage."""

import asyncio

import pytest

from tokengate.app import App
from tokengate.config import Config
from tokengate.core.core import Core
from tokengate.core.modules.session.models import AuthToken
from tokengate.errors import AuthenticationError


@pytest.mark.asyncio
async def test_full_session_lifecycle():
    app = App(Config(_env_file=None))
    async with app.lifespan():
        user = await app.create_user("carol@example.com", "carol-password")

        session = await app.login("carol@example.com", "carol-password")
        assert session.user_id == user.id

        current = await app.get_current_session(AuthToken(session.token))
        assert current.usage_count == 1

        await app.logout(AuthToken(session.token))
        with pytest.raises(AuthenticationError):
            await app.get_current_session(AuthToken(session.token))


@pytest.mark.asyncio
async def test_logout_without_token():
    app = App(Config(_env_file=None))
    async with app.lifespan():
        with pytest.raises(AuthenticationError):
            await app.logout(None)


@pytest.mark.asyncio
async def test_default_memory_setup_reclaims_expired_sessions():
    config = Config(_env_file=None, session_lifetime_seconds=1)
    assert config.session_backend == "memory"
    assert config.sweep_interval_seconds == 0

    core = Core(config)
    app = App(config, core)
    async with app.lifespan():
        await app.create_user("dave@example.com", "dave-password")
        await app.login("dave@example.com", "dave-password")
        await asyncio.sleep(1.1)

        await app.login("dave@example.com", "dave-password")

        # the expired record went away with the second login
        assert await core.services.session.purge_expired() == 0
