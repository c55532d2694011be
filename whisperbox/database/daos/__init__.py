"""
The `daos` package provides the Data Access Layer for the application.

It is responsible for all interactions with the database entities,
encapsulating CRUD operations that support the core functionality
of the system. Each DAO operates on a specific entity and abstracts
away the direct SQLAlchemy queries, offering a cleaner API to the
service layer (`core.funcs`).

Every DAO method receives the request's `Session` explicitly; DAOs never
commit, the service layer owns the transaction.

Contents
--------
- AccountDao
    Handles account persistence:
    * Creates accounts with an issued verification code
    * Fetches accounts by id, username, email or either identifier
    * Filters on verification state (verified owners block names/emails)
    * Updates verification state, codes and the acceptance flag

- MessageDao
    Manages inbox records:
    * Appends a message to an account's inbox
    * Lists an account's messages, newest first (query-time sort)
    * Removes a single message owned by an account
"""

from whisperbox.database.daos.account_dao import AccountDao
from whisperbox.database.daos.message_dao import MessageDao

__all__ = ["AccountDao", "MessageDao"]
