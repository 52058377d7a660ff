"""
Message integrity API endpoints

Publishes the process public key so clients can verify signatures themselves,
and checks arbitrary content/signature pairs.
"""
from fastapi import APIRouter, Depends, HTTPException, status
import logging

from backend.api.auth import verify_api_key
from backend.api.dependencies import get_integrity_service
from backend.api.schemas import (
    PublicKeyResponse,
    IntegrityCheckRequest,
    IntegrityCheckResponse,
)
from backend.core.integrity import KeyInitializationError, MessageIntegrityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/integrity", tags=["integrity"])


@router.get("/public-key", response_model=PublicKeyResponse)
async def get_public_key(integrity: MessageIntegrityService = Depends(get_integrity_service)):
    """
    Describe the signing key of this server process.

    The key changes whenever the server restarts.
    """
    key_manager = integrity.key_manager
    try:
        pem = key_manager.public_key_pem()
        fingerprint = key_manager.fingerprint()
    except KeyInitializationError as e:
        logger.error(f"Public key requested but key is unavailable: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Signing key unavailable"
        )

    return PublicKeyResponse(
        algorithm=integrity.algorithm,
        padding=integrity.padding_name,
        key_size=key_manager.key_size,
        public_key_pem=pem,
        fingerprint=fingerprint,
    )


@router.post("/check", response_model=IntegrityCheckResponse, dependencies=[Depends(verify_api_key)])
async def check_signature(
    request: IntegrityCheckRequest,
    integrity: MessageIntegrityService = Depends(get_integrity_service),
):
    """
    Check whether a signature matches content under the current key.

    **Never fails on bad input; returns trusted=false with a reason instead**
    """
    result = integrity.check_detailed(request.content, request.signature)
    return IntegrityCheckResponse(
        trusted=result.success,
        reason=result.error.value if result.error else None,
    )
