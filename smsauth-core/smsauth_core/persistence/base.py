"""
Challenge Store Contract
========================
Durable keyed storage for issued SMS challenges.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from ..models import Challenge


class ChallengeStore(ABC):
    """
    Abstract base class for challenge stores.

    Every call is durable before it returns. Implementations must make
    ``increment_attempt_and_save`` a single atomic increment-and-fetch so
    concurrent verifications of one message can never lose an increment.
    """

    @abstractmethod
    async def create(self, challenge: Challenge) -> str:
        """Persist a new challenge and return its message ID."""

    @abstractmethod
    async def get(self, message_id: str) -> Challenge:
        """
        Load a challenge.

        Raises:
            ChallengeNotFound: If no challenge has this message ID
        """

    @abstractmethod
    async def increment_attempt_and_save(self, message_id: str) -> int:
        """
        Atomically increment the verify attempt counter.

        Returns:
            The counter value after this increment

        Raises:
            ChallengeNotFound: If no challenge has this message ID
        """

    @abstractmethod
    async def mark_verified(self, message_id: str, verified_at: datetime) -> bool:
        """
        Mark a challenge verified.

        Only the first call sets ``verified`` and ``verified_at``; later calls
        leave the stored record untouched.

        Returns:
            True if this call performed the transition

        Raises:
            ChallengeNotFound: If no challenge has this message ID
        """
