"""
SQL Challenge Store Tests
=========================
Tests for the SQLAlchemy store on an in-memory SQLite database.
"""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy.pool import StaticPool


def make_challenge(message_id: str = "msg-1", code: str = "12345678"):
    from smsauth_core.models import Challenge

    created_at = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
    return Challenge(
        message_id=message_id,
        operation_id="op-1",
        operation_name="login",
        user_id="user-1",
        organization_id="RETAIL",
        code=code,
        salt="00ff",
        message_text=f"Code {code}",
        created_at=created_at,
        expires_at=created_at + timedelta(seconds=300),
    )


@pytest_asyncio.fixture
async def sql_store():
    from smsauth_core.database import close_engine, create_async_engine, get_session_factory, init_models
    from smsauth_core.persistence.sql import SqlAlchemyChallengeStore

    create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    await init_models()
    yield SqlAlchemyChallengeStore(get_session_factory())
    await close_engine()


class TestSqlAlchemyChallengeStore:
    """Tests for SqlAlchemyChallengeStore."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, sql_store):
        """Should round-trip a challenge with timezone-aware timestamps."""
        challenge = make_challenge()

        assert await sql_store.create(challenge) == "msg-1"
        stored = await sql_store.get("msg-1")

        assert stored == challenge
        assert stored.expires_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_get_missing(self, sql_store):
        """Should raise ChallengeNotFound for unknown IDs."""
        from smsauth_core.exceptions import ChallengeNotFound

        with pytest.raises(ChallengeNotFound):
            await sql_store.get("msg-unknown")

    @pytest.mark.asyncio
    async def test_duplicate_is_storage_failure(self, sql_store):
        """Primary key violations should surface as StorageFailure."""
        from smsauth_core.exceptions import StorageFailure

        await sql_store.create(make_challenge())

        with pytest.raises(StorageFailure):
            await sql_store.create(make_challenge())

    @pytest.mark.asyncio
    async def test_increment_returns_new_count(self, sql_store):
        """Each increment should return the updated counter."""
        await sql_store.create(make_challenge())

        assert await sql_store.increment_attempt_and_save("msg-1") == 1
        assert await sql_store.increment_attempt_and_save("msg-1") == 2
        assert (await sql_store.get("msg-1")).verify_attempt_count == 2

    @pytest.mark.asyncio
    async def test_increment_missing(self, sql_store):
        """Incrementing an unknown challenge should raise ChallengeNotFound."""
        from smsauth_core.exceptions import ChallengeNotFound

        with pytest.raises(ChallengeNotFound):
            await sql_store.increment_attempt_and_save("msg-unknown")

    @pytest.mark.asyncio
    async def test_mark_verified_only_once(self, sql_store):
        """Only the first call should set verified_at."""
        await sql_store.create(make_challenge())
        first_at = datetime(2024, 5, 1, 12, 1, 0, tzinfo=timezone.utc)

        assert await sql_store.mark_verified("msg-1", first_at) is True
        assert await sql_store.mark_verified("msg-1", first_at + timedelta(seconds=5)) is False

        stored = await sql_store.get("msg-1")
        assert stored.verified is True
        assert stored.verified_at == first_at

    @pytest.mark.asyncio
    async def test_mark_verified_missing(self, sql_store):
        """Marking an unknown challenge should raise ChallengeNotFound."""
        from smsauth_core.exceptions import ChallengeNotFound

        with pytest.raises(ChallengeNotFound):
            await sql_store.mark_verified("msg-unknown", datetime.now(timezone.utc))

    @pytest.mark.asyncio
    async def test_engine_on_sql_store(self, sql_store):
        """Full verification cycle on the SQL backend."""
        from smsauth_core.authorization.engine import OtpLifecycleEngine
        from smsauth_core.models import AuthorizationError

        from conftest import FakeClock

        clock = FakeClock()
        engine = OtpLifecycleEngine(sql_store, max_verify_attempts=5, otp_expiration_seconds=300, clock=clock)
        await sql_store.create(make_challenge())

        mismatch = await engine.verify("msg-1", "00000000")
        success = await engine.verify("msg-1", "12345678")
        replay = await engine.verify("msg-1", "12345678")

        assert mismatch.error == AuthorizationError.MISMATCH
        assert mismatch.remaining_attempts == 4
        assert success.succeeded
        assert replay.error == AuthorizationError.ALREADY_VERIFIED
        assert (await sql_store.get("msg-1")).verify_attempt_count == 3
