"""
Unit tests for the process keypair (KeyManager).
"""
import threading
import time

import pytest
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from backend.core.integrity import (
    KeyManager,
    KeyInitializationError,
    generate_keypair,
    public_key_fingerprint,
)


class TestKeyManager:
    """KeyManager generation and access."""

    def test_default_key_is_2048_bit_rsa(self, key_manager):
        """The process key is RSA with at least a 2048-bit modulus."""
        private_key = key_manager.get_signing_key()
        public_key = key_manager.get_verification_key()

        assert isinstance(private_key, RSAPrivateKey)
        assert isinstance(public_key, RSAPublicKey)
        assert private_key.key_size == 2048
        assert key_manager.key_size == 2048

    def test_halves_belong_together(self, key_manager):
        """The public half is derived from the private half."""
        derived = key_manager.get_signing_key().public_key().public_numbers()
        assert derived == key_manager.get_verification_key().public_numbers()

    def test_same_key_on_every_access(self, key_manager):
        """Repeated access returns the same objects, never a new key."""
        assert key_manager.get_signing_key() is key_manager.get_signing_key()
        assert key_manager.get_verification_key() is key_manager.get_verification_key()

    def test_rejects_small_key_size(self):
        """Moduli below 2048 bits are refused up front."""
        with pytest.raises(ValueError, match="at least 2048"):
            KeyManager(key_size=1024)

    def test_generation_is_lazy(self, session_keypair):
        """No key exists until first access."""
        calls = []

        def generator(key_size):
            calls.append(key_size)
            return session_keypair

        manager = KeyManager(generator=generator)
        assert not manager.is_initialized
        assert calls == []

        manager.get_verification_key()

        assert manager.is_initialized
        assert calls == [2048]

    def test_concurrent_first_access_generates_once(self, session_keypair):
        """Threads racing on first access all observe one keypair."""
        calls = []
        calls_lock = threading.Lock()

        def slow_generator(key_size):
            with calls_lock:
                calls.append(key_size)
            time.sleep(0.05)
            return session_keypair

        manager = KeyManager(generator=slow_generator)
        thread_count = 8
        barrier = threading.Barrier(thread_count)
        results = []

        def worker():
            barrier.wait()
            results.append((manager.get_signing_key(), manager.get_verification_key()))

        threads = [threading.Thread(target=worker) for _ in range(thread_count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert len(calls) == 1
        assert len(results) == thread_count
        assert len({id(private) for private, _ in results}) == 1
        assert len({id(public) for _, public in results}) == 1

    def test_concurrent_real_generation_matches(self):
        """Without a stub, racing callers still get matching halves."""
        manager = KeyManager()
        barrier = threading.Barrier(4)
        results = []

        def worker():
            barrier.wait()
            results.append((manager.get_signing_key(), manager.get_verification_key()))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        fingerprints = {public_key_fingerprint(public) for _, public in results}
        assert len(fingerprints) == 1
        for private, public in results:
            assert private.public_key().public_numbers() == public.public_numbers()

    def test_fresh_manager_has_different_key(self, key_manager):
        """A new KeyManager (process restart) owns a new keypair."""
        restarted = KeyManager()
        assert restarted.fingerprint() != key_manager.fingerprint()


class TestKeyInitializationFailure:
    """Generation failures are fatal and not retried."""

    def test_failure_raises_key_initialization_error(self, failing_key_manager):
        with pytest.raises(KeyInitializationError, match="simulated allocation failure"):
            failing_key_manager.get_signing_key()

        assert failing_key_manager.has_failed
        assert not failing_key_manager.is_initialized

    def test_failure_is_not_retried(self):
        """Every later access re-raises without calling the generator again."""
        calls = []

        def generator(key_size):
            calls.append(key_size)
            raise OSError("entropy source unavailable")

        manager = KeyManager(generator=generator)

        with pytest.raises(KeyInitializationError):
            manager.initialize()
        with pytest.raises(KeyInitializationError):
            manager.get_signing_key()
        with pytest.raises(KeyInitializationError):
            manager.get_verification_key()

        assert len(calls) == 1

    def test_failure_keeps_original_cause(self, failing_key_manager):
        with pytest.raises(KeyInitializationError) as exc_info:
            failing_key_manager.initialize()
        assert isinstance(exc_info.value.__cause__, MemoryError)

    def test_later_accesses_keep_original_cause(self, failing_key_manager):
        with pytest.raises(KeyInitializationError):
            failing_key_manager.initialize()

        with pytest.raises(KeyInitializationError, match="simulated allocation failure") as exc_info:
            failing_key_manager.get_verification_key()
        assert isinstance(exc_info.value.__cause__, MemoryError)

    def test_repeated_access_does_not_grow_stored_traceback(self, failing_key_manager):
        """A failed manager stays cheap to query on every read."""
        for _ in range(1000):
            with pytest.raises(KeyInitializationError):
                failing_key_manager.get_verification_key()

        frames = 0
        tb = failing_key_manager._failure.__traceback__
        while tb is not None:
            frames += 1
            tb = tb.tb_next
        assert frames < 10


class TestKeySerialization:
    """Public key export helpers."""

    def test_public_key_pem(self, key_manager):
        pem = key_manager.public_key_pem()
        assert pem.startswith("-----BEGIN PUBLIC KEY-----")
        assert pem.rstrip().endswith("-----END PUBLIC KEY-----")
        assert "PRIVATE" not in pem

    def test_fingerprint_format_and_stability(self, key_manager):
        fingerprint = key_manager.fingerprint()
        assert fingerprint.startswith("SHA256:")
        # 32-byte digest -> 44 base64 characters
        assert len(fingerprint) == len("SHA256:") + 44
        assert key_manager.fingerprint() == fingerprint

    def test_generate_keypair_respects_size(self):
        keypair = generate_keypair(3072)
        assert keypair.private_key.key_size == 3072
        assert keypair.public_key.key_size == 3072
