"""
Message integrity exceptions.
"""


class IntegrityError(Exception):
    """Base class for message integrity failures."""


class KeyInitializationError(IntegrityError):
    """
    The process keypair could not be generated.

    Fatal for the owning KeyManager: the failure is recorded and re-raised on
    every later access instead of retrying generation.
    """


class SigningError(IntegrityError):
    """Content could not be signed (key unavailable or primitive failure)."""
