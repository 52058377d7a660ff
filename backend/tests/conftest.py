"""
Shared fixtures for message board tests.

RSA key generation takes hundreds of milliseconds, so one key is generated per
test session and shared. Tests that need a different key (simulated restart)
build their own KeyManager.
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.core.database.models import Base
from backend.core.integrity import (
    KeyManager,
    Keypair,
    MessageIntegrityService,
)


def _fail_generation(key_size):
    raise MemoryError("simulated allocation failure")


@pytest.fixture(scope="session")
def key_manager():
    """Initialized KeyManager shared by the whole session."""
    manager = KeyManager()
    manager.initialize()
    return manager


@pytest.fixture(scope="session")
def session_keypair(key_manager):
    """The session keypair, for stub generators."""
    return Keypair(
        private_key=key_manager.get_signing_key(),
        public_key=key_manager.get_verification_key(),
    )


@pytest.fixture(scope="session")
def integrity_service(key_manager):
    """Integrity service (PKCS#1 v1.5) over the session key."""
    return MessageIntegrityService(key_manager)


@pytest.fixture(scope="session")
def pss_integrity_service(key_manager):
    """Integrity service (PSS) over the session key."""
    return MessageIntegrityService(key_manager, padding_name="pss")


@pytest.fixture
def failing_key_manager():
    """KeyManager whose key generation always fails."""
    return KeyManager(generator=_fail_generation)


@pytest.fixture
def failing_integrity_service(failing_key_manager):
    """Integrity service that can neither sign nor verify."""
    return MessageIntegrityService(failing_key_manager)


@pytest.fixture(scope="function")
def test_db():
    """Create in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()
