"""
Service layer of the account and inbox workflow.

Every function receives the request's SQLAlchemy `Session` and, for
owner-only operations, the authenticated `Principal` explicitly. Functions
commit their own unit of work and raise the errors of `core.errors`; the
router turns those into responses.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from whisperbox.database.config.config import Settings
from whisperbox.database.core.errors import (
    CodeExpiredError,
    ConflictError,
    ForbiddenError,
    IncorrectCodeError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
)
from whisperbox.database.core.mailer import VerificationMailer
from whisperbox.database.core.security import (
    check_password,
    code_expiry,
    codes_match,
    generate_verify_code,
    hash_password,
)
from whisperbox.database.daos import AccountDao, MessageDao
from whisperbox.database.entities import Account, Message, as_utc, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """The authenticated identity carried by a session token."""

    id: uuid.UUID
    username: str
    is_verified: bool
    is_accepting_messages: bool

    @classmethod
    def from_account(cls, account: Account) -> "Principal":
        return cls(
            id=account.id,
            username=account.username,
            is_verified=account.is_verified,
            is_accepting_messages=account.is_accepting_messages,
        )


async def check_create_account(
    db: Session,
    mailer: VerificationMailer,
    settings: Settings,
    *,
    username: str,
    email: str,
    password: str,
) -> Account:
    """
    Register an account, or refresh a pending (unverified) registration.

    Verified owners of the username or the email block registration. An
    unverified account with the same email is overwritten with the new
    username, password and code. An unverified account holding the username
    under another email is released (last registration wins).

    Nothing is written until the verification email was delivered; the
    account is then persisted in one short transaction. Database work and
    hashing run in the threadpool, off the event loop.

    Raises:
        ConflictError: username or email belongs to a verified account.
        InternalError: the verification email could not be delivered.
    """
    await run_in_threadpool(_ensure_unclaimed, db, username, email)

    verify_code = generate_verify_code()
    expiry = code_expiry(settings.VERIFY_CODE_TTL_MINUTES)
    password_hash = await run_in_threadpool(hash_password, password)

    delivery = await mailer.send_verification_email(email, username, verify_code)
    if not delivery.success:
        logger.warning("Registration of %s aborted: %s", username, delivery.message)
        raise InternalError(delivery.message)

    account = await run_in_threadpool(
        _persist_registration,
        db,
        username=username,
        email=email,
        password_hash=password_hash,
        verify_code=verify_code,
        verify_code_expiry=expiry,
    )
    logger.info("Registered account %s, awaiting verification", username)
    return account


def _ensure_unclaimed(db: Session, username: str, email: str) -> None:
    try:
        if AccountDao.get_by_username(db, username, verified=True) is not None:
            raise ConflictError("Username is already taken")
        if AccountDao.get_by_email(db, email, verified=True) is not None:
            raise ConflictError("User already exists with this email")
    finally:
        # no transaction stays open between the check and the write
        db.rollback()


def _persist_registration(
    db: Session,
    *,
    username: str,
    email: str,
    password_hash: str,
    verify_code: str,
    verify_code_expiry: datetime,
) -> Account:
    # a verified owner may have appeared while the email was in flight
    _ensure_unclaimed(db, username, email)
    try:
        pending = AccountDao.get_by_email(db, email, verified=False)
        stale = AccountDao.get_by_username(db, username, verified=False)
        if stale is not None and stale is not pending:
            logger.info("Releasing unverified claim on username %s", username)
            AccountDao.delete(db, stale)

        if pending is not None:
            account = AccountDao.reissue_code(
                db,
                pending,
                username=username,
                password_hash=password_hash,
                verify_code=verify_code,
                verify_code_expiry=verify_code_expiry,
            )
        else:
            account = AccountDao.create(
                db,
                username=username,
                email=email,
                password_hash=password_hash,
                verify_code=verify_code,
                verify_code_expiry=verify_code_expiry,
            )
        db.commit()
    except IntegrityError:
        # a concurrent registration won the unique constraint
        db.rollback()
        raise ConflictError("Username or email is already taken")
    return account


def check_verification_code(db: Session, username: str, code: str, now: datetime | None = None) -> Account:
    """
    Mark the account verified if `code` matches and has not expired.

    Expiry is checked independently of correctness: an expired code is
    reported as expired even when it matches.

    Raises:
        NotFoundError: no account with this username.
        CodeExpiredError: the stored code's expiry is not in the future.
        IncorrectCodeError: the code does not match.
    """
    account = AccountDao.get_by_username(db, username)
    if account is None:
        raise NotFoundError("User not found")

    now = now or utcnow()
    is_code_valid = codes_match(account.verify_code, code)
    is_code_not_expired = as_utc(account.verify_code_expiry) > now

    if not is_code_not_expired:
        raise CodeExpiredError()
    if not is_code_valid:
        raise IncorrectCodeError()

    AccountDao.mark_verified(db, account)
    db.commit()
    logger.info("Account %s verified", username)
    return account


def login_account(db: Session, identifier: str, password: str) -> Principal:
    """
    Authenticate by username or email.

    Raises:
        NotFoundError: no account matches the identifier.
        ForbiddenError: the account has not been verified yet.
        UnauthorizedError: the password does not match.
    """
    account = AccountDao.get_by_identifier(db, identifier)
    if account is None:
        raise NotFoundError("No user found with this username or email")
    if not account.is_verified:
        raise ForbiddenError("Please verify your account before logging in")
    if not check_password(password, account.password_hash):
        logger.info("Failed sign in for %s", account.username)
        raise UnauthorizedError("Invalid credentials")
    return Principal.from_account(account)


def check_username_available(db: Session, username: str) -> bool:
    """Only a verified owner makes a username unavailable."""
    return AccountDao.get_by_username(db, username, verified=True) is None


def _owned_account(db: Session, principal: Principal) -> Account:
    account = AccountDao.get_by_id(db, principal.id)
    if account is None:
        raise NotFoundError("User not found")
    return account


def get_accepting_status(db: Session, principal: Principal) -> bool:
    return _owned_account(db, principal).is_accepting_messages


def set_accepting_status(db: Session, principal: Principal, accept_messages: bool) -> Account:
    account = _owned_account(db, principal)
    AccountDao.set_accepting_messages(db, account, accept_messages)
    db.commit()
    return account


def send_message(db: Session, username: str, content: str) -> Message:
    """
    Append an anonymous message to `username`'s inbox.

    Raises:
        NotFoundError: no such user.
        ForbiddenError: the user is not accepting messages.
    """
    account = AccountDao.get_by_username(db, username)
    if account is None:
        raise NotFoundError("User not found")
    if not account.is_accepting_messages:
        raise ForbiddenError("User is not accepting messages")

    message = MessageDao.append(db, account.id, content)
    db.commit()
    return message


def get_account_messages(db: Session, principal: Principal) -> list[Message]:
    """The principal's inbox, newest first."""
    account = _owned_account(db, principal)
    return MessageDao.list_for_account(db, account.id)


def delete_message(db: Session, principal: Principal, message_id: uuid.UUID | str) -> None:
    """Remove one message from the principal's inbox; unknown and malformed ids are both NotFound."""
    if not isinstance(message_id, uuid.UUID):
        try:
            message_id = uuid.UUID(str(message_id))
        except ValueError:
            raise NotFoundError("Message not found or already deleted")
    removed = MessageDao.remove(db, principal.id, message_id)
    if removed == 0:
        db.rollback()
        raise NotFoundError("Message not found or already deleted")
    db.commit()
    logger.info("Message %s deleted by %s", message_id, principal.username)
