"""
Message Integrity Module

RSA-SHA256 signatures over message content.
Content is signed when written and verified when read; a failed check marks a
message untrusted but never hides it.
"""

from backend.core.integrity.errors import (
    IntegrityError,
    KeyInitializationError,
    SigningError,
)
from backend.core.integrity.keys import (
    KeyManager,
    Keypair,
    generate_keypair,
    public_key_to_pem,
    public_key_fingerprint,
)
from backend.core.integrity.signer import Signer
from backend.core.integrity.verify import (
    Verifier,
    VerificationError,
    VerificationResult,
)
from backend.core.integrity.service import MessageIntegrityService

__all__ = [
    # Errors
    "IntegrityError",
    "KeyInitializationError",
    "SigningError",
    # Keys
    "KeyManager",
    "Keypair",
    "generate_keypair",
    "public_key_to_pem",
    "public_key_fingerprint",
    # Signing / verification
    "Signer",
    "Verifier",
    "VerificationError",
    "VerificationResult",
    # Service
    "MessageIntegrityService",
]
