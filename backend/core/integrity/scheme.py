"""
Signature scheme shared by the Signer and the Verifier.

Content is hashed as UTF-8 with SHA-256; the digest is signed with RSA using
either PKCS#1 v1.5 or PSS padding.
"""

import hashlib

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.padding import AsymmetricPadding
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed

PADDING_PKCS1V15 = "pkcs1v15"
PADDING_PSS = "pss"

SIGNATURE_ALGORITHM = "RSA-SHA256"


def content_digest(content: str) -> bytes:
    """
    SHA-256 digest of the UTF-8 encoding of content.

    Raises:
        TypeError: If content is not a str
        UnicodeEncodeError: If content is not representable as UTF-8
    """
    if not isinstance(content, str):
        raise TypeError(f"content must be str, not {type(content).__name__}")
    return hashlib.sha256(content.encode("utf-8")).digest()


def digest_algorithm() -> Prehashed:
    """Algorithm marker telling cryptography the input is already a SHA-256 digest."""
    return Prehashed(hashes.SHA256())


def signature_padding(name: str) -> AsymmetricPadding:
    """
    Build the padding object for a configured padding name.

    Args:
        name: "pkcs1v15" or "pss"

    Raises:
        ValueError: If the name is unknown
    """
    if name == PADDING_PKCS1V15:
        return padding.PKCS1v15()
    if name == PADDING_PSS:
        return padding.PSS(
            mgf=padding.MGF1(hashes.SHA256()),
            salt_length=padding.PSS.MAX_LENGTH,
        )
    raise ValueError(f"Unknown signature padding: {name!r}")
