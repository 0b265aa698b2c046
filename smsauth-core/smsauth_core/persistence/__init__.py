"""
Challenge Persistence
=====================
Challenge store contract and its in-memory, SQL and Redis backends.
"""

from .base import ChallengeStore
from .memory import InMemoryChallengeStore
from .orm import SmsAuthorizationRecord
from .sql import SqlAlchemyChallengeStore
from .redis_store import RedisChallengeStore

__all__ = [
    "ChallengeStore",
    "InMemoryChallengeStore",
    "SmsAuthorizationRecord",
    "SqlAlchemyChallengeStore",
    "RedisChallengeStore",
]
