"""
Message Signer

Signs message content with the process private key.
"""

import base64
import logging

from backend.core.integrity.errors import KeyInitializationError, SigningError
from backend.core.integrity.keys import KeyManager
from backend.core.integrity.scheme import (
    PADDING_PKCS1V15,
    content_digest,
    digest_algorithm,
    signature_padding,
)

logger = logging.getLogger(__name__)


class Signer:
    """
    Produces base64 signatures over UTF-8 text.

    Input is deterministic, output need not be: with PSS padding two
    signatures over the same content differ, and both verify.
    """

    def __init__(self, key_manager: KeyManager, padding_name: str = PADDING_PKCS1V15):
        self._key_manager = key_manager
        self._padding_name = padding_name
        signature_padding(padding_name)  # ValueError on unknown padding

    @property
    def padding_name(self) -> str:
        return self._padding_name

    def sign(self, content: str) -> str:
        """
        Sign content.

        Args:
            content: Message text (any length)

        Returns:
            Base64-encoded signature

        Raises:
            SigningError: If the key is unavailable, content is not valid
                UTF-8 text, or the signing primitive fails
        """
        try:
            private_key = self._key_manager.get_signing_key()
        except KeyInitializationError as e:
            raise SigningError(f"Signing key unavailable: {e}") from e

        try:
            digest = content_digest(content)
        except (TypeError, UnicodeEncodeError) as e:
            raise SigningError(f"Content cannot be signed: {e}") from e

        try:
            signature = private_key.sign(
                digest,
                signature_padding(self._padding_name),
                digest_algorithm(),
            )
        except Exception as e:
            logger.error(f"RSA signing failed: {type(e).__name__}: {e}")
            raise SigningError(f"Failed to sign message: {e}") from e

        return base64.b64encode(signature).decode("ascii")
