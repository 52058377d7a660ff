"""
Test fixtures for the message board API.

Uses the shared in-memory SQLite database and session signing key; API key
checks are overridden, the X-Author header is exercised for real.
"""
import pytest
from fastapi.testclient import TestClient

from backend.api.main import app
from backend.api.auth import verify_api_key
from backend.api.dependencies import get_integrity_service
from backend.core.database import get_db, Message


def _override_client(test_db, integrity):
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    # Mock verify_api_key to always pass
    async def mock_verify_api_key():
        return "test-api-key"

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[verify_api_key] = mock_verify_api_key
    app.dependency_overrides[get_integrity_service] = lambda: integrity
    return TestClient(app)


@pytest.fixture(scope="function")
def client(test_db, integrity_service):
    """Test client with a working integrity service."""
    test_client = _override_client(test_db, integrity_service)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def broken_signing_client(test_db, failing_integrity_service):
    """Test client whose key generation has failed."""
    test_client = _override_client(test_db, failing_integrity_service)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def alice_message(test_db, integrity_service):
    """A signed message owned by alice."""
    content = "Alice's first post"
    message = Message(
        author="alice",
        content=content,
        signature=integrity_service.protect(content),
    )
    test_db.add(message)
    test_db.commit()
    test_db.refresh(message)
    return message
