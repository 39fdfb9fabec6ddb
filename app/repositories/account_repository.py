"""
app/repositories/account_repository.py

Persistence for accounts touched by points imports.
"""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.account import Account, AccountRole


class AccountRepository:
    """
    Lookup, creation and crediting of accounts keyed by punctuated CPF.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_cpf(self, cpf: str) -> Account | None:
        stmt = select(Account).where(Account.cpf == cpf)
        return self._session.scalars(stmt).first()

    def create_client(
        self,
        *,
        cpf: str,
        points: int,
        organization_id: uuid.UUID,
        password_hash: str,
        full_name: str,
        email: str | None = None,
    ) -> Account:
        account = Account(
            cpf=cpf,
            full_name=full_name,
            email=email,
            password_hash=password_hash,
            points=points,
            role=AccountRole.CLIENT,
            organization_id=organization_id,
            is_active=True,
            first_access=True,
        )
        self._session.add(account)
        self._session.flush()
        return account

    def credit(
        self,
        account: Account,
        *,
        points: int,
        full_name: str | None = None,
        email: str | None = None,
    ) -> Account:
        """
        Add points to the balance with an in-database increment.

        Name and email are only replaced by non-empty values.
        """

        account.points = Account.points + points
        if full_name:
            account.full_name = full_name
        if email:
            account.email = email
        self._session.flush()
        return account
