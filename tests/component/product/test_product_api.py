"""
Component Tests for the Product API
"""

import pytest

pytestmark = pytest.mark.component


class TestListings:

    def test_featured(self, client):
        response = client.get("/api/v1/products/featured", params={"limit": 5})

        assert response.status_code == 200
        items = response.json()["data"]
        assert [p["id"] for p in items] == ["p1"]
        assert items[0]["image_url"] == "https://img.example.com/p1.jpg"

    def test_limit_bounds(self, client):
        assert client.get("/api/v1/products/trending", params={"limit": 0}).status_code == 400
        assert client.get("/api/v1/products/trending", params={"limit": 51}).status_code == 400

    def test_info_is_not_a_product_id(self, client):
        response = client.get("/api/v1/products/info")

        assert response.status_code == 200
        assert response.json()["data"]["service_name"] == "product_service"


class TestBrowsing:

    def test_page(self, client):
        body = client.get("/api/v1/products", params={"page": 0, "size": 2}).json()["data"]

        assert body["total_items"] == 3
        assert body["total_pages"] == 2
        assert len(body["items"]) == 2

    def test_search(self, client):
        body = client.get("/api/v1/products/search", params={"q": "phone"}).json()["data"]

        assert [p["id"] for p in body["items"]] == ["p1"]

    def test_search_requires_query(self, client):
        assert client.get("/api/v1/products/search").status_code == 400

    def test_category(self, client):
        body = client.get("/api/v1/products/category/electronics").json()["data"]

        assert {p["id"] for p in body["items"]} == {"p1", "p2"}

    def test_get_product(self, client):
        assert client.get("/api/v1/products/p2").json()["data"]["name"] == "Bravo Cable"

    def test_missing_product(self, client):
        response = client.get("/api/v1/products/nope")

        assert response.status_code == 404
        assert response.json()["message"] == "Product not found: nope"


class TestInventory:

    def test_read(self, client):
        data = client.get("/api/v1/products/p2/inventory").json()["data"]

        assert data["available_quantity"] == 3
        assert data["stock_status"] == "low_stock"

    def test_reserve(self, client, event_bus):
        response = client.post("/api/v1/products/p1/inventory/reserve", json={"quantity": 4})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Stock reserved"
        assert body["data"]["applied"] is True
        assert body["data"]["available_quantity"] == 16
        assert event_bus.get_published_by_subject("product.inventory.reserved")

    def test_reserve_too_much_is_not_applied(self, client, mock_repository):
        response = client.post("/api/v1/products/p2/inventory/reserve", json={"quantity": 4})

        assert response.status_code == 200
        assert response.json()["message"] == "Reservation not applied"
        assert response.json()["data"]["applied"] is False
        assert mock_repository.products["p2"].inventory.reserved_quantity == 0

    def test_release_and_consume(self, client):
        client.post("/api/v1/products/p1/inventory/reserve", json={"quantity": 5})

        released = client.post("/api/v1/products/p1/inventory/release", json={"quantity": 2}).json()
        consumed = client.post("/api/v1/products/p1/inventory/consume", json={"quantity": 3}).json()

        assert released["message"] == "Stock released"
        assert consumed["data"]["quantity"] == 17
        assert consumed["data"]["reserved_quantity"] == 0

    def test_adjust_missing_product(self, client):
        response = client.post("/api/v1/products/nope/inventory/consume", json={"quantity": 1})

        assert response.status_code == 404

    def test_body_required(self, client):
        assert client.post("/api/v1/products/p1/inventory/reserve", json={}).status_code == 400
