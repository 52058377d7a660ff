"""
Message Integrity Service

The two operations the message layer uses:
- protect(content) -> signature, on every content write
- check(content, signature) -> trusted, on every read

The service owns one KeyManager (and therefore one keypair) for its whole
lifetime. The web app creates a single service at startup; tests create as
many as they need, each standing in for a separate process.
"""

import logging
from typing import Optional

from backend.core.config import Settings
from backend.core.integrity.keys import KeyManager
from backend.core.integrity.scheme import PADDING_PKCS1V15, SIGNATURE_ALGORITHM
from backend.core.integrity.signer import Signer
from backend.core.integrity.verify import Verifier, VerificationResult

logger = logging.getLogger(__name__)


class MessageIntegrityService:
    """Composes KeyManager, Signer and Verifier."""

    def __init__(self, key_manager: Optional[KeyManager] = None, padding_name: str = PADDING_PKCS1V15):
        self.key_manager = key_manager or KeyManager()
        self.padding_name = padding_name
        self._signer = Signer(self.key_manager, padding_name)
        self._verifier = Verifier(self.key_manager, padding_name)

    @classmethod
    def from_settings(cls, settings: Settings) -> "MessageIntegrityService":
        """Build a service from application settings (key not generated yet)."""
        return cls(
            key_manager=KeyManager(key_size=settings.integrity_key_size),
            padding_name=settings.integrity_padding,
        )

    @property
    def algorithm(self) -> str:
        return SIGNATURE_ALGORITHM

    @property
    def is_available(self) -> bool:
        """False once key generation has failed."""
        return not self.key_manager.has_failed

    def initialize(self) -> None:
        """
        Generate the keypair eagerly.

        Raises:
            KeyInitializationError: If key generation fails
        """
        self.key_manager.initialize()

    def protect(self, content: str) -> str:
        """
        Sign content for persistence.

        Args:
            content: Message text exactly as it will be stored

        Returns:
            Base64 signature to store alongside content

        Raises:
            SigningError: If the content cannot be signed; the caller must not
                persist the content as signed
        """
        return self._signer.sign(content)

    def check(self, content: str, signature: Optional[str]) -> bool:
        """
        Decide whether stored content is trusted.

        Args:
            content: Stored message text
            signature: Stored signature, None for unsigned messages

        Returns:
            True if the signature matches content under this process's key
        """
        return self._verifier.verify(content, signature)

    def check_detailed(self, content: str, signature: Optional[str]) -> VerificationResult:
        """Like check(), with the failure reason."""
        return self._verifier.verify_detailed(content, signature)
