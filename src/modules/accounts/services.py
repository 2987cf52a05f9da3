"""Account service layer (Use Cases).

- Account lookup for the profile endpoint.
- Manual balance top-up (no ledger entry is written).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from django.db import transaction

from modules.accounts.exceptions import AccountNotFound

if TYPE_CHECKING:
    from modules.accounts.dtos import AddBalanceDTO
    from modules.accounts.models import Account
    from modules.accounts.repositories.interfaces import IAccountRepository

logger = structlog.get_logger(__name__)


class AccountService:
    """Application service for Account use-cases.

    Receives an ``IAccountRepository`` via constructor injection.
    """

    def __init__(self, repository: IAccountRepository) -> None:
        self._repo = repository

    def get_account(self, id: str) -> Account:
        """Raises:
        AccountNotFound: if the account does not exist.
        """
        account = self._repo.get_by_id(id)
        if not account:
            raise AccountNotFound("Account not found.")
        return account

    @transaction.atomic
    def add_balance(self, dto: AddBalanceDTO) -> Account:
        """Credit ``dto.amount`` to the account balance.

        Raises:
            AccountNotFound: if the account does not exist.
        """
        log = logger.bind(account_id=str(dto.account_id), amount=str(dto.amount))
        if not self._repo.credit_balance(str(dto.account_id), dto.amount):
            log.warning("account.add_balance_missing_account")
            raise AccountNotFound("Account not found.")
        log.info("account.balance_added")
        return self.get_account(str(dto.account_id))
