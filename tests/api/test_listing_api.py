"""Tests for listing endpoints."""

import inspect

import pytest
from fastapi.testclient import TestClient

from variant_listing.infrastructure.config import settings
from variant_listing.main import app


def endpoint_for(path: str):
    """Handler function registered for a path."""
    return next(route.endpoint for route in app.routes if getattr(route, "path", None) == path)


class TestListingPrices:
    """Tests for POST /listing/prices."""

    def test_prices_without_facet(self, loaded_client: TestClient) -> None:
        """Prices are serialized as decimal strings per context and subset."""
        response = loaded_client.post(
            "/listing/prices", json={"shop_id": 1, "variant_ids": [1001]}
        )

        assert response.status_code == 200
        prices = response.json()["prices"]
        assert list(prices) == ["SW1001"]
        assert prices["SW1001"]["EK_1"] == {"g10": "7.00", "g20": "7.00", "g10-20": "7.00"}
        assert prices["SW1001"]["EK_2"]["g10"] == "10.50"
        assert prices["SW1001"]["H_1"]["g10"] == "4.00"
        assert prices["SW1001"]["H_2"]["g10"] == "6.00"

    def test_prices_with_facet(self, loaded_client: TestClient) -> None:
        """Expand groups restrict subsets to their baseline options."""
        response = loaded_client.post(
            "/listing/prices",
            json={"shop_id": 1, "variant_ids": [1001], "expand_group_ids": [10, 20]},
        )

        assert response.status_code == 200
        assert response.json()["prices"]["SW1001"]["EK_1"] == {
            "g10": "8.00",
            "g20": "7.00",
            "g10-20": "8.00",
        }

    def test_sub_shop(self, loaded_client: TestClient) -> None:
        """Sub shops are priced in the main shop's currencies."""
        response = loaded_client.post(
            "/listing/prices", json={"shop_id": 2, "variant_ids": [1001]}
        )

        assert response.status_code == 200
        assert set(response.json()["prices"]["SW1001"]) == {"EK_1", "EK_2", "H_1", "H_2"}

    def test_explicit_configuration(self, loaded_client: TestClient) -> None:
        """Configurations sent with the request override the catalog."""
        response = loaded_client.post(
            "/listing/prices",
            json={
                "shop_id": 1,
                "variant_ids": [1001],
                "expand_group_ids": [10],
                "configurations": {
                    "SW1001": [
                        {"id": 10, "options": [101, 100]},
                        {"id": 20, "options": [200, 201]},
                    ]
                },
            },
        )

        assert response.status_code == 200
        # baseline of group 10 is now 101: variant 1002 at 7.00
        assert response.json()["prices"]["SW1001"]["EK_1"]["g10"] == "7.00"

    def test_unknown_shop(self, loaded_client: TestClient) -> None:
        """Unknown shops are reported as unknown references."""
        response = loaded_client.post(
            "/listing/prices", json={"shop_id": 99, "variant_ids": [1001]}
        )

        assert response.status_code == 404
        data = response.json()
        assert data["error_code"] == "UNKNOWN_REFERENCE"
        assert data["request_id"]

    def test_unknown_variant(self, loaded_client: TestClient) -> None:
        """Unknown variants are reported as unknown references."""
        response = loaded_client.post(
            "/listing/prices", json={"shop_id": 1, "variant_ids": [9999]}
        )
        assert response.status_code == 404

    def test_empty_batch_rejected(self, loaded_client: TestClient) -> None:
        """At least one variant must be listed."""
        response = loaded_client.post("/listing/prices", json={"shop_id": 1, "variant_ids": []})
        assert response.status_code == 422

    def test_group_without_options(self, loaded_client: TestClient) -> None:
        """A configured group without options is a configuration error."""
        response = loaded_client.post(
            "/listing/prices",
            json={
                "shop_id": 1,
                "variant_ids": [1001],
                "configurations": {"SW1001": [{"id": 10, "options": []}]},
            },
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "INVALID_CONFIGURATION"

    def test_too_many_groups(self, loaded_client: TestClient) -> None:
        """Configurations beyond the combination limit are rejected."""
        group_count = settings.max_combination_groups + 1
        groups = [
            {"id": group_id, "options": [group_id * 1000]}
            for group_id in range(1, group_count + 1)
        ]

        response = loaded_client.post(
            "/listing/prices",
            json={"shop_id": 1, "variant_ids": [1001], "configurations": {"SW1001": groups}},
        )

        assert response.status_code == 422
        data = response.json()
        assert data["error_code"] == "INVALID_CONFIGURATION"
        limit = str(settings.max_combination_groups)
        assert {"field": "limit", "message": limit} in data["details"]


class TestListingAvailability:
    """Tests for POST /listing/availability."""

    def test_availability(self, loaded_client: TestClient) -> None:
        """Any available variant makes a subset available."""
        response = loaded_client.post("/listing/availability", json={"variant_ids": [1001]})

        assert response.status_code == 200
        assert response.json() == {
            "availability": {"SW1001": {"g10": True, "g20": True, "g10-20": True}}
        }

    def test_availability_with_facet(self, loaded_client: TestClient) -> None:
        """Expanded subsets follow the variants carrying the baseline options."""
        response = loaded_client.post(
            "/listing/availability",
            json={"variant_ids": [1001], "expand_group_ids": [10, 20]},
        )

        assert response.status_code == 200
        assert response.json()["availability"]["SW1001"] == {
            "g10": True,
            "g20": True,
            "g10-20": True,
        }


class TestListingVisibility:
    """Tests for POST /listing/visibility."""

    def test_collapsed_variant(self, loaded_client: TestClient) -> None:
        """A variant sharing the color with the representative is hidden by color."""
        response = loaded_client.post(
            "/listing/visibility", json={"variant_id": 1002, "expand_group_ids": [10, 20]}
        )

        assert response.status_code == 200
        assert response.json() == {
            "number": "SW1002",
            "visibility": {"g10": True, "g20": False, "g10-20": True},
        }

    def test_without_expand_groups(self, loaded_client: TestClient) -> None:
        """Without expand groups there is nothing to decide."""
        response = loaded_client.post("/listing/visibility", json={"variant_id": 1001})

        assert response.status_code == 200
        assert response.json()["visibility"] == {}

    def test_unknown_variant(self, loaded_client: TestClient) -> None:
        """Unknown variants are reported as unknown references."""
        response = loaded_client.post("/listing/visibility", json={"variant_id": 9999})
        assert response.status_code == 404

    def test_requires_auth(self, client: TestClient) -> None:
        """Listing endpoints require an API key."""
        response = client.post("/listing/visibility", json={"variant_id": 1001})
        assert response.status_code == 401


class TestHandlerExecution:
    """Tests for how listing handlers are scheduled."""

    @pytest.mark.parametrize(
        "path", ["/listing/prices", "/listing/availability", "/listing/visibility"]
    )
    def test_listing_handlers_run_in_threadpool(self, path: str) -> None:
        """Aggregation must not block the event loop."""
        endpoint = endpoint_for(path)
        assert not inspect.iscoroutinefunction(endpoint)

    @pytest.mark.parametrize("path", ["/health", "/ready", "/catalog/snapshot"])
    def test_light_handlers_are_async(self, path: str) -> None:
        """Health checks and snapshot upload run on the event loop."""
        endpoint = endpoint_for(path)
        assert inspect.iscoroutinefunction(endpoint)
