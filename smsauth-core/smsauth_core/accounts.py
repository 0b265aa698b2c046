"""
Account Directory
=================
User lookup and account status collaborators.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

import structlog

from .models import AccountStatus, UserDetail

logger = structlog.get_logger(__name__)


class AccountDirectory(ABC):
    """Abstract base class for user and account status lookup."""

    @abstractmethod
    async def lookup_user(self, username: str, organization_id: Optional[str]) -> UserDetail:
        """
        Translate a username into user details.

        Unknown or blocked users come back with ``id=None`` instead of an
        error, so SMS delivery can be faked for them.
        """

    @abstractmethod
    async def account_status(
        self, user_id: Optional[str], organization_id: Optional[str]
    ) -> AccountStatus:
        """Status of the user's account."""


@dataclass(frozen=True)
class AccountRecord:
    user_id: str
    username: str
    organization_id: Optional[str]
    status: AccountStatus = AccountStatus.ACTIVE
    given_name: Optional[str] = None
    family_name: Optional[str] = None


class InMemoryAccountDirectory(AccountDirectory):
    """Account directory backed by a fixed list of records."""

    def __init__(self, accounts: Iterable[AccountRecord] = ()):
        self._by_username: Dict[str, AccountRecord] = {}
        self._by_user_id: Dict[str, AccountRecord] = {}
        for account in accounts:
            self.add(account)

    def add(self, account: AccountRecord) -> None:
        self._by_username[account.username] = account
        self._by_user_id[account.user_id] = account

    async def lookup_user(self, username: str, organization_id: Optional[str]) -> UserDetail:
        account = self._by_username.get(username)
        if account is None or account.organization_id != organization_id:
            logger.info("User lookup masked", reason="unknown")
            return UserDetail(id=None, organization_id=None)
        if account.status != AccountStatus.ACTIVE:
            logger.info("User lookup masked", reason="not_active")
            return UserDetail(id=None, organization_id=None, account_status=account.status)
        return UserDetail(
            id=account.user_id,
            organization_id=account.organization_id,
            given_name=account.given_name,
            family_name=account.family_name,
            account_status=account.status,
        )

    async def account_status(
        self, user_id: Optional[str], organization_id: Optional[str]
    ) -> AccountStatus:
        if user_id is None:
            return AccountStatus.UNKNOWN
        account = self._by_user_id.get(user_id)
        if account is None or account.organization_id != organization_id:
            return AccountStatus.UNKNOWN
        return account.status
