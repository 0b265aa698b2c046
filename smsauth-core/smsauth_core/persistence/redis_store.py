"""
Redis Challenge Store
=====================
Redis-backed challenge store using Lua scripts for atomic operations.
"""

import math
from datetime import datetime
from typing import Dict, Optional

import structlog
from redis.exceptions import RedisError

from ..models import Challenge
from ..exceptions import ChallengeNotFound, StorageFailure
from .base import ChallengeStore

logger = structlog.get_logger(__name__)

# ARGV[1] = expire seconds, ARGV[2..] = field/value pairs
CREATE_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 1 then
    return 0
end
redis.call('HSET', KEYS[1], unpack(ARGV, 2))
redis.call('EXPIRE', KEYS[1], tonumber(ARGV[1]))
return 1
"""

INCREMENT_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 0 then
    return -1
end
return redis.call('HINCRBY', KEYS[1], 'verify_attempt_count', 1)
"""

# ARGV[1] = verified_at (ISO 8601); returns -1 missing, 0 already verified, 1 set
MARK_VERIFIED_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 0 then
    return -1
end
if redis.call('HGET', KEYS[1], 'verified') == '1' then
    return 0
end
redis.call('HSET', KEYS[1], 'verified', '1', 'verified_at', ARGV[1])
return 1
"""

_OPTIONAL_FIELDS = ("user_id", "organization_id", "verified_at")


def _decode(value) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


def _serialize(challenge: Challenge) -> Dict[str, str]:
    data = {
        "message_id": challenge.message_id,
        "operation_id": challenge.operation_id,
        "operation_name": challenge.operation_name,
        "code": challenge.code,
        "salt": challenge.salt,
        "message_text": challenge.message_text,
        "created_at": challenge.created_at.isoformat(),
        "expires_at": challenge.expires_at.isoformat(),
        "verify_attempt_count": str(challenge.verify_attempt_count),
        "verified": "1" if challenge.verified else "0",
    }
    for name in _OPTIONAL_FIELDS:
        value = getattr(challenge, name)
        if value is not None:
            data[name] = value.isoformat() if isinstance(value, datetime) else value
    return data


def _deserialize(raw: Dict) -> Challenge:
    data = {_decode(k): _decode(v) for k, v in raw.items()}
    verified_at = data.get("verified_at")
    return Challenge(
        message_id=data["message_id"],
        operation_id=data["operation_id"],
        operation_name=data["operation_name"],
        user_id=data.get("user_id"),
        organization_id=data.get("organization_id"),
        code=data["code"],
        salt=data["salt"],
        message_text=data["message_text"],
        created_at=datetime.fromisoformat(data["created_at"]),
        expires_at=datetime.fromisoformat(data["expires_at"]),
        verify_attempt_count=int(data["verify_attempt_count"]),
        verified=data["verified"] == "1",
        verified_at=datetime.fromisoformat(verified_at) if verified_at else None,
    )


class RedisChallengeStore(ChallengeStore):
    """
    Redis-backed challenge store.

    Each challenge is a hash; keys expire ``retention_seconds`` after the
    challenge itself expires. Attempt counting runs inside a Lua script, so
    Redis serializes concurrent increments.
    """

    def __init__(
        self,
        redis_client,
        key_prefix: str = "smsauth:challenge",
        retention_seconds: int = 86400,
    ):
        """
        Args:
            redis_client: Async Redis client
            key_prefix: Prefix for challenge keys
            retention_seconds: How long to keep a challenge after it expires
        """
        self.redis = redis_client
        self.key_prefix = key_prefix
        self.retention_seconds = retention_seconds
        self._script_shas: Dict[str, str] = {}

    def _key(self, message_id: str) -> str:
        return f"{self.key_prefix}:{message_id}"

    async def _run_script(self, script: str, key: str, *args) -> int:
        """Load a Lua script into Redis if needed and run it."""
        try:
            sha = self._script_shas.get(script)
            if sha is None:
                sha = _decode(await self.redis.script_load(script))
                self._script_shas[script] = sha
            return int(await self.redis.evalsha(sha, 1, key, *args))
        except RedisError as e:
            logger.error("Redis script failed", key=key, error=str(e))
            raise StorageFailure("Challenge store unavailable", e)

    async def create(self, challenge: Challenge) -> str:
        # Measured from issuance, not the wall clock
        lifetime = (challenge.expires_at - challenge.created_at).total_seconds()
        expire_seconds = max(math.ceil(lifetime), 1) + self.retention_seconds

        args = [expire_seconds]
        for field_name, value in _serialize(challenge).items():
            args.extend([field_name, value])

        created = await self._run_script(CREATE_SCRIPT, self._key(challenge.message_id), *args)
        if not created:
            raise StorageFailure(f"Duplicate message ID: {challenge.message_id}")
        return challenge.message_id

    async def get(self, message_id: str) -> Challenge:
        try:
            raw: Optional[Dict] = await self.redis.hgetall(self._key(message_id))
        except RedisError as e:
            logger.error("Redis lookup failed", message_id=message_id, error=str(e))
            raise StorageFailure("Challenge store unavailable", e)
        if not raw:
            raise ChallengeNotFound(message_id)
        return _deserialize(raw)

    async def increment_attempt_and_save(self, message_id: str) -> int:
        count = await self._run_script(INCREMENT_SCRIPT, self._key(message_id))
        if count < 0:
            raise ChallengeNotFound(message_id)
        return count

    async def mark_verified(self, message_id: str, verified_at: datetime) -> bool:
        result = await self._run_script(
            MARK_VERIFIED_SCRIPT, self._key(message_id), verified_at.isoformat()
        )
        if result < 0:
            raise ChallengeNotFound(message_id)
        return result == 1
