"""
Signature Verification

Checks base64 signatures over message content against the process public key.

Verification never raises. Every failure (absent or malformed signature,
wrong key, altered content, unavailable key) yields an untrusted result, so a
single corrupted message cannot break reading the others.
"""

import base64
import binascii
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from cryptography.exceptions import InvalidSignature

from backend.core.integrity.errors import KeyInitializationError
from backend.core.integrity.keys import KeyManager
from backend.core.integrity.scheme import (
    PADDING_PKCS1V15,
    content_digest,
    digest_algorithm,
    signature_padding,
)

logger = logging.getLogger(__name__)


class VerificationError(Enum):
    """Enumeration of possible verification failures."""
    MISSING_SIGNATURE = "missing_signature"
    INVALID_SIGNATURE_FORMAT = "invalid_signature_format"
    INVALID_CONTENT = "invalid_content"
    KEY_UNAVAILABLE = "key_unavailable"
    SIGNATURE_VERIFICATION_FAILED = "signature_verification_failed"


@dataclass
class VerificationResult:
    """
    Result of signature verification.

    Attributes:
        success: Whether the signature matches the content
        error: Error type if verification failed
        error_message: Human-readable error message
    """
    success: bool
    error: Optional[VerificationError] = None
    error_message: Optional[str] = None

    @classmethod
    def ok(cls) -> "VerificationResult":
        """Create a successful result."""
        return cls(success=True)

    @classmethod
    def fail(cls, error: VerificationError, message: str) -> "VerificationResult":
        """Create a failed result."""
        return cls(success=False, error=error, error_message=message)


def decode_signature(signature_b64: str) -> bytes:
    """
    Strictly decode a base64 signature.

    Raises:
        ValueError: If the text is not valid padded base64
    """
    try:
        raw = base64.b64decode(signature_b64, validate=True)
    except (binascii.Error, TypeError, ValueError) as e:
        raise ValueError(f"Invalid base64 signature: {e}") from e
    if not raw:
        raise ValueError("Empty signature")
    return raw


class Verifier:
    """Answers whether a signature attests to exactly the given content."""

    def __init__(self, key_manager: KeyManager, padding_name: str = PADDING_PKCS1V15):
        self._key_manager = key_manager
        self._padding_name = padding_name
        signature_padding(padding_name)

    def verify(self, content: str, signature: Optional[str]) -> bool:
        """
        Check a signature.

        Args:
            content: Message text as persisted
            signature: Base64 signature, or None if the message was never signed

        Returns:
            True only if the signature matches content under the public key
        """
        return self.verify_detailed(content, signature).success

    def verify_detailed(self, content: str, signature: Optional[str]) -> VerificationResult:
        """
        Check a signature and report why it failed.

        Performs the following checks in order:
        1. Signature present
        2. Signature is valid base64
        3. Content is UTF-8 encodable text
        4. Public key available
        5. RSA signature matches the SHA-256 digest of content

        Returns:
            VerificationResult with success status and failure reason
        """
        # 1. Presence
        if not signature:
            return VerificationResult.fail(
                VerificationError.MISSING_SIGNATURE,
                "Message has no signature"
            )

        # 2. Decode signature
        try:
            signature_bytes = decode_signature(signature)
        except ValueError as e:
            return self._failed(VerificationError.INVALID_SIGNATURE_FORMAT, str(e))

        # 3. Digest content
        try:
            digest = content_digest(content)
        except (TypeError, UnicodeEncodeError) as e:
            return self._failed(VerificationError.INVALID_CONTENT, f"Content cannot be digested: {e}")

        # 4. Public key
        try:
            public_key = self._key_manager.get_verification_key()
        except KeyInitializationError as e:
            return self._failed(VerificationError.KEY_UNAVAILABLE, str(e))

        # 5. Verify
        try:
            public_key.verify(
                signature_bytes,
                digest,
                signature_padding(self._padding_name),
                digest_algorithm(),
            )
        except InvalidSignature:
            return self._failed(
                VerificationError.SIGNATURE_VERIFICATION_FAILED,
                "Signature verification failed"
            )
        except Exception as e:
            return self._failed(
                VerificationError.SIGNATURE_VERIFICATION_FAILED,
                f"Signature verification error: {type(e).__name__}: {e}"
            )

        return VerificationResult.ok()

    @staticmethod
    def _failed(error: VerificationError, message: str) -> VerificationResult:
        logger.debug(f"Signature rejected ({error.value}): {message}")
        return VerificationResult.fail(error, message)
