from contextlib import contextmanager
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from nohumanallowed.config import settings
from nohumanallowed.main import app

TEST_SECRET = "test-secret-key-that-is-at-least-32-chars"


@pytest.fixture
def secret():
    """Signing secret shared by issuer and verifier in tests."""
    return TEST_SECRET


@contextmanager
def server_settings(challenge_secret, require_signature):
    with patch.object(settings, "challenge_secret", challenge_secret), patch.object(
        settings, "require_signature", require_signature
    ):
        yield


@pytest.fixture
def server_signing(secret):
    """Switch the server into signing mode inside a with-block."""

    def enable(required: bool = True):
        return server_settings(secret, required)

    return enable


@pytest.fixture
def client():
    """Create a test client with signing disabled."""
    with server_settings(None, False):
        with TestClient(app) as test_client:
            yield test_client


@pytest.fixture
def signed_client(secret):
    """Create a test client whose server signs challenges and requires signatures."""
    with server_settings(secret, True):
        with TestClient(app) as test_client:
            yield test_client
