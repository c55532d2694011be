import uuid

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from whisperbox.database.entities import Message, utcnow


class MessageDao:

    @staticmethod
    def append(db: Session, account_id: uuid.UUID, content: str) -> Message:
        """Insert one message row; the parent account record is not rewritten."""
        message = Message(account_id=account_id, content=content, created_at=utcnow())
        db.add(message)
        db.flush()
        return message

    @staticmethod
    def list_for_account(db: Session, account_id: uuid.UUID) -> list[Message]:
        """Messages of an account ordered newest first."""
        stmt = (
            select(Message)
            .where(Message.account_id == account_id)
            .order_by(Message.created_at.desc())
        )
        return list(db.scalars(stmt).all())

    @staticmethod
    def remove(db: Session, account_id: uuid.UUID, message_id: uuid.UUID) -> int:
        """
        Delete the message `message_id` if it belongs to `account_id`.

        Returns the number of rows removed (0 or 1).
        """
        stmt = delete(Message).where(Message.id == message_id, Message.account_id == account_id)
        result = db.execute(stmt)
        return result.rowcount
