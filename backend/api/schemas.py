"""
Pydantic schemas for FastAPI endpoints
"""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from uuid import UUID

from backend.core.config import get_settings


def _validate_content(value: str) -> str:
    # NUL bytes are dropped before storage, so they do not count as content
    if not value.replace("\x00", "").strip():
        raise ValueError("Message cannot be empty")
    max_length = get_settings().message_max_length
    if len(value) > max_length:
        raise ValueError(f"Message is too long (max {max_length} characters)")
    return value


class MessageCreateRequest(BaseModel):
    """Create message request"""
    content: str = Field(..., description="Message text, stored and signed exactly as sent")

    @field_validator("content")
    @classmethod
    def check_content(cls, value: str) -> str:
        return _validate_content(value)


class MessageUpdateRequest(MessageCreateRequest):
    """Update message request (content is re-signed)"""


class MessageResponse(BaseModel):
    """Message response with integrity flag"""
    id: UUID
    content: str
    signature: Optional[str] = None
    author: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    # False when the signature is missing or does not match content
    trusted: bool = False

    class Config:
        from_attributes = True


class MessageListResponse(BaseModel):
    """Message list response"""
    messages: List[MessageResponse]
    total: int
    untrusted: int


class DeleteResponse(BaseModel):
    """Delete confirmation"""
    message: str


class PublicKeyResponse(BaseModel):
    """Process signing key description"""
    algorithm: str
    padding: str
    key_size: int
    public_key_pem: str
    fingerprint: str


class IntegrityCheckRequest(BaseModel):
    """Ad-hoc signature check request"""
    content: str
    signature: Optional[str] = None


class IntegrityCheckResponse(BaseModel):
    """Ad-hoc signature check result"""
    trusted: bool
    reason: Optional[str] = None
