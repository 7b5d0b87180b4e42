"""Tests for the global exception handlers."""

import pytest
from fastapi import FastAPI
from starlette.testclient import TestClient

from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware
from core.exceptions import DateOrderError, QuoteNameConflictError, ServiceInUseError


@pytest.fixture
def client():
    """App whose routes raise the errors under test."""
    app = FastAPI()
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    @app.get("/in-use")
    async def in_use():
        raise ServiceInUseError("Event Photography", ["Drone Photography"])

    @app.get("/taken")
    async def taken():
        raise QuoteNameConflictError("Smith Wedding")

    @app.get("/date")
    async def bad_date():
        raise DateOrderError("Date must be after Day 1 (Sat, Jun 1, 2024)")

    @app.get("/missing")
    async def missing():
        raise ValueError("Service 123 not found")

    @app.get("/bad")
    async def bad():
        raise ValueError("Percentage discount cannot exceed 100")

    @app.get("/crash")
    async def crash():
        raise RuntimeError("connection reset")

    return TestClient(app, raise_server_exceptions=False)


class TestDomainErrors:

    def test_service_in_use_lists_dependents(self, client):
        response = client.get("/in-use")

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "SERVICE_IN_USE"
        assert error["details"] == {"dependent_services": ["Drone Photography"]}

    def test_name_conflict(self, client):
        response = client.get("/taken")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "ALREADY_EXISTS"

    def test_date_order(self, client):
        response = client.get("/date")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_DATE_ORDER"


class TestGenericErrors:

    def test_not_found(self, client):
        response = client.get("/missing")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_other_value_error_is_invalid_request(self, client):
        response = client.get("/bad")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_unhandled_error_hides_details(self, client):
        response = client.get("/crash", headers={"X-Request-ID": "req-9"})

        assert response.status_code == 500
        body = response.json()
        assert body["error"]["code"] == "INTERNAL_ERROR"
        assert "connection reset" not in body["error"]["message"]
