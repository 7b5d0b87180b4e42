"""API test fixtures: TestClient over the real app with mocked stores."""

from unittest.mock import Mock

import pytest
from starlette.testclient import TestClient

from api import create_app
from core.catalog import sort_with_subservices
from core.config import QuoteConfig
from core.services.catalog_service import CatalogService
from core.services.draft_service import DraftService
from core.services.saved_quote_service import SavedQuoteService


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def catalog_service(catalog_services, catalog):
    """CatalogService double serving the shared in-memory catalog."""
    mock = Mock(spec=CatalogService)
    mock.list_all.return_value = sort_with_subservices(catalog_services.values())
    mock.lookup.return_value = catalog
    return mock


@pytest.fixture
def saved_quote_service():
    mock = Mock(spec=SavedQuoteService)
    mock.list_all.return_value = []
    mock.list_active.return_value = []
    return mock


@pytest.fixture
def draft_service():
    mock = Mock(spec=DraftService)
    mock.load.return_value = None
    return mock


# =============================================================================
# SERVICES DICT
# =============================================================================


@pytest.fixture
def services(catalog_service, saved_quote_service, draft_service):
    return {
        "config": QuoteConfig(),
        "catalog": catalog_service,
        "saved_quote": saved_quote_service,
        "draft": draft_service,
    }


# =============================================================================
# APP & CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def app(services):
    """FastAPI app with request IDs, error handlers, and data/actions routes."""
    return create_app(services)


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def action(client):
    """POST an action and return the response."""

    def post(domain: str, action_name: str, data: dict):
        return client.post("/api/actions", json={
            "domain": domain,
            "action": action_name,
            "data": data,
        })

    return post
