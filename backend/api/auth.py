"""
API Key Authentication for FastAPI

Two dependencies:
1. verify_api_key → X-API-Key header checked against settings.api_key
2. get_current_author → X-Author header naming the authenticated user

Session handling lives upstream (reverse proxy / login service); it asserts
the user's name in X-Author on requests it has authenticated.
"""
import re
import secrets
from typing import Optional
from fastapi import HTTPException, Security, Header, status, Depends
from fastapi.security import APIKeyHeader

from backend.core.config import get_settings

# API Key header name
API_KEY_NAME = "X-API-Key"

# Author header name
AUTHOR_HEADER = "X-Author"

# Usernames: 3-50 letters, digits or underscores (max matches messages.author)
MIN_AUTHOR_LENGTH = 3
MAX_AUTHOR_LENGTH = 50
AUTHOR_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")

# Create API key header security scheme
api_key_header = APIKeyHeader(name=API_KEY_NAME, auto_error=False)


async def verify_api_key(
    api_key: Optional[str] = Security(api_key_header)
) -> str:
    """
    Verify the API key from request headers.

    Args:
        api_key: API key from X-API-Key header

    Returns:
        The verified API key

    Raises:
        HTTPException: If authentication fails
    """
    configured_key = get_settings().api_key
    if not configured_key:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="API_KEY not configured on server"
        )

    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API Key. Include 'X-API-Key' header."
        )

    # Use constant-time comparison to prevent timing attacks
    if not secrets.compare_digest(api_key, configured_key):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API Key"
        )

    return api_key


async def get_current_author(
    _api_key: str = Depends(verify_api_key),
    x_author: Optional[str] = Header(None, alias=AUTHOR_HEADER),
) -> str:
    """
    Resolve the authenticated author for write operations.

    Returns:
        Author username

    Raises:
        HTTPException: 401 if the header is missing or blank, 400 if it is
            not a valid username
    """
    author = (x_author or "").strip()
    if not author:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Unauthorized. Include '{AUTHOR_HEADER}' header."
        )
    if not MIN_AUTHOR_LENGTH <= len(author) <= MAX_AUTHOR_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Author name must be {MIN_AUTHOR_LENGTH}-{MAX_AUTHOR_LENGTH} characters"
        )
    if not AUTHOR_PATTERN.match(author):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Author name can only contain letters, numbers, and underscores"
        )
    return author
