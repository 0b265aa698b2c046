"""
SQL Challenge Store
===================
SQLAlchemy-backed challenge store with atomic attempt counting.
"""

from datetime import datetime, timezone
from typing import Optional

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..models import Challenge
from ..exceptions import ChallengeNotFound, StorageFailure
from .base import ChallengeStore
from .orm import SmsAuthorizationRecord

logger = structlog.get_logger(__name__)


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo on read; stored values are always UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_challenge(record: SmsAuthorizationRecord) -> Challenge:
    return Challenge(
        message_id=record.message_id,
        operation_id=record.operation_id,
        operation_name=record.operation_name,
        user_id=record.user_id,
        organization_id=record.organization_id,
        code=record.authorization_code,
        salt=record.salt,
        message_text=record.message_text,
        created_at=_aware(record.timestamp_created),
        expires_at=_aware(record.timestamp_expires),
        verify_attempt_count=record.verify_request_count,
        verified=record.verified,
        verified_at=_aware(record.timestamp_verified),
    )


class SqlAlchemyChallengeStore(ChallengeStore):
    """
    Challenge store on a relational database.

    Attempt counting is a single ``UPDATE ... RETURNING`` statement, so the
    database serializes concurrent increments on the same row.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def create(self, challenge: Challenge) -> str:
        record = SmsAuthorizationRecord(
            message_id=challenge.message_id,
            operation_id=challenge.operation_id,
            operation_name=challenge.operation_name,
            user_id=challenge.user_id,
            organization_id=challenge.organization_id,
            authorization_code=challenge.code,
            salt=challenge.salt,
            message_text=challenge.message_text,
            verify_request_count=challenge.verify_attempt_count,
            verified=challenge.verified,
            timestamp_created=challenge.created_at,
            timestamp_expires=challenge.expires_at,
            timestamp_verified=challenge.verified_at,
        )
        try:
            async with self.session_factory() as session:
                session.add(record)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("Challenge insert failed", message_id=challenge.message_id, error=str(e))
            raise StorageFailure("Failed to persist challenge", e)
        return challenge.message_id

    async def get(self, message_id: str) -> Challenge:
        try:
            async with self.session_factory() as session:
                record = await session.get(SmsAuthorizationRecord, message_id)
        except SQLAlchemyError as e:
            logger.error("Challenge lookup failed", message_id=message_id, error=str(e))
            raise StorageFailure("Failed to load challenge", e)
        if record is None:
            raise ChallengeNotFound(message_id)
        return _to_challenge(record)

    async def increment_attempt_and_save(self, message_id: str) -> int:
        stmt = (
            update(SmsAuthorizationRecord)
            .where(SmsAuthorizationRecord.message_id == message_id)
            .values(verify_request_count=SmsAuthorizationRecord.verify_request_count + 1)
            .returning(SmsAuthorizationRecord.verify_request_count)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                count = result.scalar_one_or_none()
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("Attempt increment failed", message_id=message_id, error=str(e))
            raise StorageFailure("Failed to increment verify attempts", e)
        if count is None:
            raise ChallengeNotFound(message_id)
        return count

    async def mark_verified(self, message_id: str, verified_at: datetime) -> bool:
        stmt = (
            update(SmsAuthorizationRecord)
            .where(
                SmsAuthorizationRecord.message_id == message_id,
                SmsAuthorizationRecord.verified.is_(False),
            )
            .values(verified=True, timestamp_verified=verified_at)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                await session.commit()
                if result.rowcount:
                    return True
                exists = (
                    await session.execute(
                        select(SmsAuthorizationRecord.message_id).where(
                            SmsAuthorizationRecord.message_id == message_id
                        )
                    )
                ).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Mark verified failed", message_id=message_id, error=str(e))
            raise StorageFailure("Failed to mark challenge verified", e)
        if exists is None:
            raise ChallengeNotFound(message_id)
        return False
