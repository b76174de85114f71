"""
Shared fixtures for Supabase Bridge tests.
"""

from unittest.mock import Mock, patch

import pytest
import requests
from fastapi.testclient import TestClient

from supabase_bridge.config import BridgeSettings
from supabase_bridge.main import create_app

SUPABASE_URL = "https://example-project.supabase.co"
SERVICE_KEY = "service-role-key-123"
API_KEY = "bridge-secret-456"


def make_response(status_code=200, payload=None, json_error=None):
    """Build a mock requests.Response."""
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.ok = status_code < 400
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def settings():
    """Settings built explicitly so the environment is never consulted."""
    return BridgeSettings(
        supabase_url=SUPABASE_URL,
        supabase_service_role_key=SERVICE_KEY,
        api_key=API_KEY,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_headers():
    return {"x-api-key": API_KEY}


@pytest.fixture
def mock_request():
    """Patch the outbound HTTP call made by the REST client."""
    with patch("supabase_bridge.services.rest_client.requests.request") as mocked:
        yield mocked
