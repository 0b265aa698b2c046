"""
SMS Authorization ORM Model
===========================
SQLAlchemy mapping of the ``da_sms_authorization`` table.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class SmsAuthorizationRecord(Base):
    """One row per issued SMS authorization challenge."""

    __tablename__ = "da_sms_authorization"

    message_id: Mapped[str] = mapped_column(String(256), primary_key=True)
    operation_id: Mapped[str] = mapped_column(String(256), nullable=False)
    operation_name: Mapped[str] = mapped_column(String(256), nullable=False)
    user_id: Mapped[Optional[str]] = mapped_column(String(256), nullable=True, index=True)
    organization_id: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
    authorization_code: Mapped[str] = mapped_column(String(32), nullable=False)
    salt: Mapped[str] = mapped_column(String(64), nullable=False)
    message_text: Mapped[str] = mapped_column(Text, nullable=False)
    verify_request_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    timestamp_created: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    timestamp_expires: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    timestamp_verified: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
