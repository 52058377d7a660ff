"""
Shared FastAPI dependencies.
"""
import logging

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from backend.core.database import get_db, MessageRepository
from backend.core.integrity import MessageIntegrityService

logger = logging.getLogger(__name__)


def get_integrity_service(request: Request) -> MessageIntegrityService:
    """
    The process-wide integrity service created at startup.

    Raises:
        HTTPException: 503 if startup did not create one
    """
    service = getattr(request.app.state, "integrity", None)
    if service is None:
        logger.error("Integrity service requested before startup completed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Message integrity service not initialized"
        )
    return service


def get_message_repository(
    db: Session = Depends(get_db),
    integrity: MessageIntegrityService = Depends(get_integrity_service),
) -> MessageRepository:
    return MessageRepository(db, integrity)
