import uuid
from datetime import datetime

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from whisperbox.database.entities import Account


class AccountDao:

    @staticmethod
    def create(
        db: Session,
        *,
        username: str,
        email: str,
        password_hash: str,
        verify_code: str,
        verify_code_expiry: datetime,
    ) -> Account:
        """
        Add a new, unverified account that accepts messages and has an empty inbox.

        The row is flushed so that constraint violations surface immediately,
        but the transaction is left open for the caller.
        """
        account = Account(
            username=username,
            email=email,
            password_hash=password_hash,
            verify_code=verify_code,
            verify_code_expiry=verify_code_expiry,
            is_verified=False,
            is_accepting_messages=True,
        )
        db.add(account)
        db.flush()
        return account

    @staticmethod
    def get_by_id(db: Session, account_id: uuid.UUID) -> Account | None:
        return db.get(Account, account_id)

    @staticmethod
    def get_by_username(db: Session, username: str, verified: bool | None = None) -> Account | None:
        stmt = select(Account).where(Account.username == username)
        if verified is not None:
            stmt = stmt.where(Account.is_verified == verified)
        return db.scalars(stmt).first()

    @staticmethod
    def get_by_email(db: Session, email: str, verified: bool | None = None) -> Account | None:
        stmt = select(Account).where(Account.email == email)
        if verified is not None:
            stmt = stmt.where(Account.is_verified == verified)
        return db.scalars(stmt).first()

    @staticmethod
    def get_by_identifier(db: Session, identifier: str) -> Account | None:
        """Fetch the account whose username or email equals `identifier`."""
        stmt = select(Account).where(or_(Account.username == identifier, Account.email == identifier))
        return db.scalars(stmt).first()

    @staticmethod
    def reissue_code(
        db: Session,
        account: Account,
        *,
        username: str,
        password_hash: str,
        verify_code: str,
        verify_code_expiry: datetime,
    ) -> Account:
        """Overwrite an unverified account's claim with a fresh password and code."""
        account.username = username
        account.password_hash = password_hash
        account.verify_code = verify_code
        account.verify_code_expiry = verify_code_expiry
        db.flush()
        return account

    @staticmethod
    def mark_verified(db: Session, account: Account) -> Account:
        account.is_verified = True
        db.flush()
        return account

    @staticmethod
    def set_accepting_messages(db: Session, account: Account, accepting: bool) -> Account:
        account.is_accepting_messages = accepting
        db.flush()
        return account

    @staticmethod
    def delete(db: Session, account: Account) -> None:
        db.delete(account)
        db.flush()
