"""Fixtures for API tests: an app with an injected container and a token"""
import pytest
from fastapi.testclient import TestClient

from lumin.api.server import create_api_application
from lumin.services.ai_service import AIService
from lumin.services.container import ServiceContainer
from lumin.utils.security import create_access_token


@pytest.fixture
def container(clock, fake_completion):
    """Services pinned to the test clock with a fake model transport"""
    return ServiceContainer(clock=clock, ai_service=AIService(completion=fake_completion))


@pytest.fixture
def app(container):
    return create_api_application(container=container)


@pytest.fixture
def client(app, mock_queries):
    # Not used as a context manager: the lifespan (and its DB pool) never starts
    return TestClient(app)


@pytest.fixture
def auth_headers(test_user_id):
    return {"Authorization": f"Bearer {create_access_token(test_user_id)}"}
