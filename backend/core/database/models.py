"""
SQLAlchemy Database Models

Stores:
- Messages (content, signature, author, timestamps)

Integrity:
- signature holds the base64 RSA signature over content as stored
- NULL signature means the message was never signed; it reads as untrusted
- See backend/core/integrity/ for signing and verification
"""
from sqlalchemy import Column, String, DateTime, Text, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base
from datetime import datetime
import uuid

Base = declarative_base()


class Message(Base):
    """
    A message posted to the board.

    content and signature are always written together; the integrity
    subsystem only reads and produces these two fields.
    """
    __tablename__ = "messages"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    content = Column(Text, nullable=False)
    signature = Column(Text, nullable=True)  # base64, NULL = unsigned

    # Author reference (username asserted by the auth layer)
    author = Column(String(50), nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('ix_messages_created_at', 'created_at'),
    )

    def __repr__(self) -> str:
        return f"<Message {self.id} by {self.author}>"
