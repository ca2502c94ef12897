"""Shared fixtures for API tests."""

from typing import Any, Iterator

import pytest
from fastapi.testclient import TestClient

from variant_listing.infrastructure.catalog_store import set_catalog_store
from variant_listing.infrastructure.config import settings
from variant_listing.main import app


@pytest.fixture(autouse=True)
def reset_catalog_store() -> Iterator[None]:
    """Every test starts with an empty catalog."""
    set_catalog_store(None)
    yield
    set_catalog_store(None)


@pytest.fixture
def client() -> TestClient:
    """Create test client without authentication."""
    return TestClient(app)


@pytest.fixture
def auth_client() -> TestClient:
    """Create test client with valid API key authentication."""
    return TestClient(
        app,
        headers={"Authorization": f"Bearer {settings.api_key}"},
    )


def variant(variant_id: int, option_ids: list[int], in_stock: int, **extra: Any) -> dict[str, Any]:
    """Variant payload of product 1."""
    return {
        "id": variant_id,
        "product_id": 1,
        "number": f"SW{variant_id}",
        "option_ids": option_ids,
        "in_stock": in_stock,
        **extra,
    }


@pytest.fixture
def snapshot_payload() -> dict[str, Any]:
    """Snapshot of the sample catalog as sent over the wire."""
    return {
        "groups": [
            {"id": 10, "options": [100, 101], "name": "Size"},
            {"id": 20, "options": [200, 201], "name": "Color"},
        ],
        "variants": [
            variant(1001, [100, 200], 5),
            variant(1002, [101, 200], 3),
            variant(1003, [100, 201], 0),
            variant(1004, [101, 201], 9, active=False),
        ],
        "prices": [
            {"variant_id": 1001, "customer_group_key": "EK", "price": "8.00"},
            {"variant_id": 1002, "customer_group_key": "EK", "price": "7.00"},
            {"variant_id": 1003, "customer_group_key": "EK", "price": "9.00"},
            {"variant_id": 1004, "customer_group_key": "EK", "price": "3.00"},
            {"variant_id": 1001, "customer_group_key": "H", "price": "4.00"},
            {"variant_id": 1002, "customer_group_key": "EK", "price": "1.00", "to_quantity": 10},
        ],
        "shops": [
            {"id": 1, "currency_id": 1},
            {"id": 2, "currency_id": 1, "is_main": False, "parent_id": 1},
        ],
        "shop_currencies": {"1": [1, 2]},
        "currencies": [
            {"id": 1, "factor": "1", "code": "EUR"},
            {"id": 2, "factor": "1.5", "code": "USD"},
        ],
        "customer_groups": [{"id": 1, "key": "EK"}, {"id": 2, "key": "H"}],
        "fallback_customer_group": "EK",
    }


@pytest.fixture
def loaded_client(auth_client: TestClient, snapshot_payload: dict[str, Any]) -> TestClient:
    """Authenticated client with the sample catalog loaded."""
    response = auth_client.put("/catalog/snapshot", json=snapshot_payload)
    assert response.status_code == 200
    return auth_client
