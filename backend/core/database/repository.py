"""
Database Repository - High-level database operations for messages.

Every content write goes through _write_content(), which signs the new content
before it touches the row. Creating a message and editing one therefore follow
the same rule: content changed => signature recomputed. If signing fails the
row is left as it was.
"""
from typing import Optional, List
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import desc
import logging

from .models import Message
from backend.core.integrity import MessageIntegrityService, SigningError

logger = logging.getLogger(__name__)


def sanitize_content(text: str) -> str:
    """
    Remove NUL bytes, which PostgreSQL text columns cannot store.

    Runs before signing so the signature covers exactly what is persisted.
    """
    if '\x00' in text:
        logger.debug(f"Sanitized {text.count(chr(0))} NUL byte(s) from message content")
        return text.replace('\x00', '')
    return text


class MessageRepository:
    """Repository for message persistence with write-time signing."""

    def __init__(self, db: Session, integrity: MessageIntegrityService):
        self.db = db
        self.integrity = integrity

    def list_messages(self, limit: Optional[int] = None) -> List[Message]:
        """All messages, newest first."""
        query = self.db.query(Message).order_by(desc(Message.created_at))
        if limit:
            query = query.limit(limit)
        return query.all()

    def get_message(self, message_id: UUID) -> Optional[Message]:
        return self.db.query(Message).filter(Message.id == message_id).first()

    def create_message(self, author: str, content: str) -> Message:
        """
        Store a new signed message.

        Raises:
            SigningError: If content cannot be signed (nothing is stored)
        """
        message = Message(author=author)
        self._write_content(message, content)

        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)

        logger.info(f"Created message {message.id} by {author}")
        return message

    def update_content(self, message: Message, content: str) -> Message:
        """
        Replace a message's content and re-sign it.

        Raises:
            SigningError: If content cannot be signed (row is unchanged)
        """
        self._write_content(message, content)

        self.db.commit()
        self.db.refresh(message)

        logger.info(f"Updated message {message.id} (re-signed)")
        return message

    def delete_message(self, message: Message) -> None:
        message_id = message.id
        self.db.delete(message)
        self.db.commit()
        logger.info(f"Deleted message {message_id}")

    def is_trusted(self, message: Message) -> bool:
        """Verify the stored signature against the stored content."""
        result = self.integrity.check_detailed(message.content, message.signature)
        if not result.success:
            logger.debug(f"Message {message.id} untrusted: {result.error.value}")
        return result.success

    def _write_content(self, message: Message, content: str) -> None:
        content = sanitize_content(content)
        try:
            signature = self.integrity.protect(content)
        except SigningError as e:
            logger.error(f"Refusing to write message content: {e}")
            raise

        message.content = content
        message.signature = signature
