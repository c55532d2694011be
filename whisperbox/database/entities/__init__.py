"""
The `entities` package defines the ORM models of the application,
representing the database tables as Python classes via SQLAlchemy 2.0
typed mappings (`Mapped[...]` + `mapped_column(...)`).

These entity classes are the foundation of the persistence layer,
used by DAOs (`daos` package) to perform CRUD operations.

Contents
--------
- Base
    Declarative base shared by every entity; `Base.metadata` creates the schema.

- Account
    Represents a registered user able to receive anonymous messages.
    * Stores credentials (hashed password), username and email
    * Tracks email verification code, its expiry and the verified flag
    * Holds the message-acceptance flag
    * Owns its inbox (`messages`), deleted together with the account

- Message
    Represents a single anonymous message in an account's inbox.
    * Fields: `id` (UUID PK), `account_id` (FK -> account.id)
    * Stores `content` and `created_at` (UTC, tz-aware)
"""

from whisperbox.database.entities.base import Base, utcnow, as_utc
from whisperbox.database.entities.account import Account
from whisperbox.database.entities.message import Message

__all__ = ["Base", "Account", "Message", "utcnow", "as_utc"]
