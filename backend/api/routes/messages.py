"""
Message board API endpoints

Every response carries a `trusted` flag computed from the stored signature.
Untrusted messages are still returned; clients show a warning next to them.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from uuid import UUID
import logging

from backend.api.auth import verify_api_key, get_current_author
from backend.api.dependencies import get_message_repository
from backend.api.schemas import (
    MessageCreateRequest,
    MessageUpdateRequest,
    MessageResponse,
    MessageListResponse,
    DeleteResponse,
)
from backend.core.database import Message, MessageRepository
from backend.core.integrity import SigningError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/messages", tags=["messages"])


def _to_response(message: Message, repo: MessageRepository) -> MessageResponse:
    response = MessageResponse.model_validate(message)
    response.trusted = repo.is_trusted(message)
    return response


def _get_owned_message(message_id: UUID, author: str, repo: MessageRepository) -> Message:
    """Load a message the current author may modify (404 / 403 otherwise)."""
    message = repo.get_message(message_id)
    if not message:
        raise HTTPException(status_code=404, detail="Message not found")
    if message.author != author:
        logger.warning(f"{author} attempted to modify message {message_id} owned by {message.author}")
        raise HTTPException(status_code=403, detail="Unauthorized")
    return message


def _signing_unavailable(e: SigningError) -> HTTPException:
    logger.error(f"Message write aborted, signing failed: {e}")
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Message signing unavailable"
    )


@router.get("", response_model=MessageListResponse, dependencies=[Depends(verify_api_key)])
async def list_messages(repo: MessageRepository = Depends(get_message_repository)):
    """
    List all messages, newest first.

    **Returns each message with its `trusted` flag**
    """
    messages = [_to_response(m, repo) for m in repo.list_messages()]
    untrusted = sum(1 for m in messages if not m.trusted)

    return MessageListResponse(
        messages=messages,
        total=len(messages),
        untrusted=untrusted,
    )


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def create_message(
    request: MessageCreateRequest,
    author: str = Depends(get_current_author),
    repo: MessageRepository = Depends(get_message_repository),
):
    """
    Post a new message.

    The content is signed before it is stored. If signing fails nothing is
    stored and the request fails with 503.
    """
    try:
        message = repo.create_message(author, request.content)
    except SigningError as e:
        raise _signing_unavailable(e)

    return _to_response(message, repo)


@router.get("/{message_id}", response_model=MessageResponse, dependencies=[Depends(verify_api_key)])
async def get_message(
    message_id: UUID,
    repo: MessageRepository = Depends(get_message_repository),
):
    """Get a single message with its `trusted` flag."""
    message = repo.get_message(message_id)
    if not message:
        raise HTTPException(status_code=404, detail="Message not found")
    return _to_response(message, repo)


@router.put("/{message_id}", response_model=MessageResponse)
async def update_message(
    message_id: UUID,
    request: MessageUpdateRequest,
    author: str = Depends(get_current_author),
    repo: MessageRepository = Depends(get_message_repository),
):
    """
    Edit a message (author only).

    Ownership is checked first, then the new content is signed and stored
    together with its new signature.
    """
    message = _get_owned_message(message_id, author, repo)

    try:
        message = repo.update_content(message, request.content)
    except SigningError as e:
        raise _signing_unavailable(e)

    return _to_response(message, repo)


@router.delete("/{message_id}", response_model=DeleteResponse)
async def delete_message(
    message_id: UUID,
    author: str = Depends(get_current_author),
    repo: MessageRepository = Depends(get_message_repository),
):
    """Delete a message (author only)."""
    message = _get_owned_message(message_id, author, repo)

    try:
        repo.delete_message(message)
    except Exception as e:
        repo.db.rollback()
        logger.error(f"Failed to delete message {message_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete message")

    return DeleteResponse(message="Message deleted successfully")
