"""
RSA Key Management

Owns the process-lifetime RSA keypair used to sign and verify message content.
Uses the cryptography library for all cryptographic operations.

Keys live in memory only. Restarting the process generates a new keypair, and
signatures issued under the previous one no longer verify.
"""

import base64
import hashlib
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from backend.core.config import MIN_KEY_SIZE
from backend.core.integrity.errors import KeyInitializationError

logger = logging.getLogger(__name__)


PUBLIC_EXPONENT = 65537


@dataclass(frozen=True)
class Keypair:
    """
    An RSA keypair.

    Attributes:
        private_key: Private half, used for signing
        public_key: Public half, used for verification
    """
    private_key: RSAPrivateKey
    public_key: RSAPublicKey


def generate_keypair(key_size: int = MIN_KEY_SIZE) -> Keypair:
    """
    Generate a new RSA keypair.

    Args:
        key_size: Modulus size in bits

    Returns:
        Keypair with matching private and public halves

    Example:
        >>> keypair = generate_keypair()
        >>> pem = public_key_to_pem(keypair.public_key)
    """
    private_key = rsa.generate_private_key(
        public_exponent=PUBLIC_EXPONENT,
        key_size=key_size,
    )
    return Keypair(private_key=private_key, public_key=private_key.public_key())


def public_key_to_pem(public_key: RSAPublicKey) -> str:
    """
    Serialize a public key to a PEM string (SubjectPublicKeyInfo).

    Args:
        public_key: RSA public key object

    Returns:
        PEM text, safe to publish
    """
    pem = public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return pem.decode("ascii")


def public_key_fingerprint(public_key: RSAPublicKey) -> str:
    """
    Compute a short fingerprint for a public key.

    Args:
        public_key: RSA public key object

    Returns:
        "SHA256:" followed by the base64 SHA-256 digest of the DER encoding
    """
    der = public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    digest = hashlib.sha256(der).digest()
    return "SHA256:" + base64.b64encode(digest).decode("ascii")


class KeyManager:
    """
    Holds exactly one RSA keypair for the lifetime of the instance.

    The keypair is generated on first access (or eagerly via initialize()).
    Concurrent first access is serialized by a lock so every caller sees the
    same keypair; once generated, reads do not touch the lock.

    A generation failure is recorded and re-raised on every later access.
    """

    def __init__(
        self,
        key_size: int = MIN_KEY_SIZE,
        generator: Callable[[int], Keypair] = generate_keypair,
    ):
        if key_size < MIN_KEY_SIZE:
            raise ValueError(f"RSA key size must be at least {MIN_KEY_SIZE} bits, got {key_size}")
        self._key_size = key_size
        self._generator = generator
        self._keypair: Optional[Keypair] = None
        self._failure: Optional[KeyInitializationError] = None
        self._lock = threading.Lock()

    @property
    def key_size(self) -> int:
        """Modulus size in bits."""
        return self._key_size

    @property
    def is_initialized(self) -> bool:
        """Whether the keypair has been generated."""
        return self._keypair is not None

    @property
    def has_failed(self) -> bool:
        """Whether key generation failed (permanently)."""
        return self._failure is not None

    def initialize(self) -> None:
        """
        Generate the keypair now instead of on first use.

        Raises:
            KeyInitializationError: If generation fails (now or previously)
        """
        self._get_keypair()

    def get_signing_key(self) -> RSAPrivateKey:
        """
        Get the private half of the keypair.

        Raises:
            KeyInitializationError: If the keypair is unavailable
        """
        return self._get_keypair().private_key

    def get_verification_key(self) -> RSAPublicKey:
        """
        Get the public half of the keypair.

        Raises:
            KeyInitializationError: If the keypair is unavailable
        """
        return self._get_keypair().public_key

    def public_key_pem(self) -> str:
        """PEM encoding of the public key."""
        return public_key_to_pem(self.get_verification_key())

    def fingerprint(self) -> str:
        """Fingerprint of the public key."""
        return public_key_fingerprint(self.get_verification_key())

    def _get_keypair(self) -> Keypair:
        keypair = self._keypair
        if keypair is not None:
            return keypair

        with self._lock:
            if self._keypair is not None:
                return self._keypair
            if self._failure is not None:
                # Fresh instance; re-raising the stored one grows its traceback
                raise KeyInitializationError(str(self._failure)) from self._failure.__cause__
            self._keypair = self._generate()
            return self._keypair

    def _generate(self) -> Keypair:
        """Run the generator (caller must hold lock)."""
        started = time.monotonic()
        try:
            keypair = self._generator(self._key_size)
        except Exception as e:
            logger.critical(f"RSA key generation failed ({self._key_size} bits): {e}")
            failure = KeyInitializationError(
                f"Failed to generate {self._key_size}-bit RSA keypair: {e}"
            )
            self._failure = failure
            raise failure from e

        elapsed_ms = (time.monotonic() - started) * 1000
        logger.info(
            f"Generated {self._key_size}-bit RSA signing key "
            f"{public_key_fingerprint(keypair.public_key)} in {elapsed_ms:.0f}ms"
        )
        return keypair
