"""
In-Memory Challenge Store
=========================
Simple lock-guarded challenge store for development and testing.
"""

import asyncio
from dataclasses import replace
from datetime import datetime
from typing import Dict

from ..models import Challenge
from ..exceptions import ChallengeNotFound, StorageFailure
from .base import ChallengeStore


class InMemoryChallengeStore(ChallengeStore):
    """
    In-memory challenge store.

    For development and testing only.
    Use SqlAlchemyChallengeStore or RedisChallengeStore in production.
    """

    def __init__(self):
        self._challenges: Dict[str, Challenge] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._challenges)

    async def create(self, challenge: Challenge) -> str:
        async with self._lock:
            if challenge.message_id in self._challenges:
                raise StorageFailure(f"Duplicate message ID: {challenge.message_id}")
            self._challenges[challenge.message_id] = challenge
        return challenge.message_id

    async def get(self, message_id: str) -> Challenge:
        challenge = self._challenges.get(message_id)
        if challenge is None:
            raise ChallengeNotFound(message_id)
        return challenge

    async def increment_attempt_and_save(self, message_id: str) -> int:
        async with self._lock:
            challenge = await self.get(message_id)
            count = challenge.verify_attempt_count + 1
            self._challenges[message_id] = challenge.with_attempts(count)
        return count

    async def mark_verified(self, message_id: str, verified_at: datetime) -> bool:
        async with self._lock:
            challenge = await self.get(message_id)
            if challenge.verified:
                return False
            self._challenges[message_id] = replace(
                challenge, verified=True, verified_at=verified_at
            )
        return True
