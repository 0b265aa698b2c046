"""
Redis Challenge Store Tests
===========================
Tests for the Redis store against a mocked async client.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from test_sql_store import make_challenge


@pytest.fixture
def redis_client():
    client = AsyncMock()
    client.script_load.return_value = b"sha-1"
    return client


@pytest.fixture
def redis_store(redis_client):
    from smsauth_core.persistence.redis_store import RedisChallengeStore

    return RedisChallengeStore(redis_client, retention_seconds=60)


class TestRedisChallengeStore:
    """Tests for RedisChallengeStore."""

    @pytest.mark.asyncio
    async def test_create_runs_script_with_fields(self, redis_store, redis_client):
        """Should load the create script once and pass every field."""
        redis_client.evalsha.return_value = 1

        await redis_store.create(make_challenge("msg-1"))
        await redis_store.create(make_challenge("msg-2"))

        assert redis_client.script_load.await_count == 1
        args = redis_client.evalsha.await_args_list[0].args
        assert args[:3] == ("sha-1", 1, "smsauth:challenge:msg-1")
        assert args[3] >= 61
        fields = dict(zip(args[4::2], args[5::2]))
        assert fields["code"] == "12345678"
        assert fields["verify_attempt_count"] == "0"
        assert "verified_at" not in fields

    @pytest.mark.asyncio
    async def test_expiry_follows_challenge_lifetime(self, redis_store, redis_client):
        """Key expiry should be the challenge TTL plus retention, whatever the wall clock says."""
        redis_client.evalsha.return_value = 1

        # Issued in 2024, long before the test runs
        await redis_store.create(make_challenge())

        assert redis_client.evalsha.await_args.args[3] == 300 + 60

    @pytest.mark.asyncio
    async def test_create_duplicate(self, redis_store, redis_client):
        """Existing keys should not be overwritten."""
        from smsauth_core.exceptions import StorageFailure

        redis_client.evalsha.return_value = 0

        with pytest.raises(StorageFailure):
            await redis_store.create(make_challenge())

    @pytest.mark.asyncio
    async def test_get_decodes_hash(self, redis_store, redis_client):
        """Should rebuild the challenge from a byte-valued hash."""
        challenge = make_challenge()
        redis_client.hgetall.return_value = {
            b"message_id": b"msg-1",
            b"operation_id": b"op-1",
            b"operation_name": b"login",
            b"user_id": b"user-1",
            b"organization_id": b"RETAIL",
            b"code": b"12345678",
            b"salt": b"00ff",
            b"message_text": b"Code 12345678",
            b"created_at": challenge.created_at.isoformat().encode(),
            b"expires_at": challenge.expires_at.isoformat().encode(),
            b"verify_attempt_count": b"2",
            b"verified": b"0",
        }

        stored = await redis_store.get("msg-1")

        assert stored == challenge.with_attempts(2)
        redis_client.hgetall.assert_awaited_with("smsauth:challenge:msg-1")

    @pytest.mark.asyncio
    async def test_get_missing(self, redis_store, redis_client):
        """Empty hash means no challenge."""
        from smsauth_core.exceptions import ChallengeNotFound

        redis_client.hgetall.return_value = {}

        with pytest.raises(ChallengeNotFound):
            await redis_store.get("msg-unknown")

    @pytest.mark.asyncio
    async def test_increment(self, redis_store, redis_client):
        """Should return the counter produced by the script."""
        redis_client.evalsha.return_value = 3

        assert await redis_store.increment_attempt_and_save("msg-1") == 3

    @pytest.mark.asyncio
    async def test_increment_missing(self, redis_store, redis_client):
        """Script result -1 means the key does not exist."""
        from smsauth_core.exceptions import ChallengeNotFound

        redis_client.evalsha.return_value = -1

        with pytest.raises(ChallengeNotFound):
            await redis_store.increment_attempt_and_save("msg-unknown")

    @pytest.mark.asyncio
    async def test_mark_verified(self, redis_store, redis_client):
        """Should report whether this call set the verified flag."""
        from smsauth_core.exceptions import ChallengeNotFound

        verified_at = datetime(2024, 5, 1, 12, 1, tzinfo=timezone.utc)

        redis_client.evalsha.return_value = 1
        assert await redis_store.mark_verified("msg-1", verified_at) is True
        assert redis_client.evalsha.await_args.args[-1] == verified_at.isoformat()

        redis_client.evalsha.return_value = 0
        assert await redis_store.mark_verified("msg-1", verified_at + timedelta(seconds=1)) is False

        redis_client.evalsha.return_value = -1
        with pytest.raises(ChallengeNotFound):
            await redis_store.mark_verified("msg-unknown", verified_at)

    @pytest.mark.asyncio
    async def test_redis_errors_become_storage_failures(self, redis_store, redis_client):
        """Connection errors should surface as StorageFailure."""
        from smsauth_core.exceptions import StorageFailure

        redis_client.evalsha.side_effect = RedisConnectionError("down")
        redis_client.hgetall.side_effect = RedisConnectionError("down")

        with pytest.raises(StorageFailure):
            await redis_store.increment_attempt_and_save("msg-1")
        with pytest.raises(StorageFailure):
            await redis_store.get("msg-1")
