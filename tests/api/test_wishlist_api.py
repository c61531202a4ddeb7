"""Tests for wishlist API endpoints."""

from fastapi.testclient import TestClient


class TestWishlistApi:
    """Tests for /wishlist endpoints."""

    def test_requires_user(self, client: TestClient) -> None:
        response = client.post("/wishlist/items", json={"product_id": "p-tshirt"})
        assert response.status_code == 401

    def test_add_and_get(self, user_client: TestClient) -> None:
        response = user_client.post(
            "/wishlist/items",
            json={"product_id": "p-tshirt", "variation_id": "v-tshirt-s"},
        )
        assert response.status_code == 200

        data = user_client.get("/wishlist").json()
        assert data["user_id"] == "user-1"
        assert [(i["product_id"], i["variation_id"]) for i in data["items"]] == [
            ("p-tshirt", "v-tshirt-s")
        ]

    def test_add_twice_lists_once(self, user_client: TestClient) -> None:
        user_client.post("/wishlist/items", json={"product_id": "p-widget"})
        response = user_client.post("/wishlist/items", json={"product_id": "p-widget"})

        assert len(response.json()["items"]) == 1

    def test_remove(self, user_client: TestClient) -> None:
        wishlist = user_client.post("/wishlist/items", json={"product_id": "p-widget"}).json()

        response = user_client.post(
            "/wishlist/items/remove",
            json={"wishlist_item_ids": [wishlist["items"][0]["id"]]},
        )

        assert response.status_code == 200
        assert response.json()["items"] == []

    def test_remove_unknown(self, user_client: TestClient) -> None:
        user_client.post("/wishlist/items", json={"product_id": "p-widget"})

        response = user_client.post("/wishlist/items/remove", json={"wishlist_item_ids": ["missing"]})

        assert response.status_code == 404
        assert response.json()["error_code"] == "WISHLIST_ITEM_NOT_FOUND"

    def test_missing_wishlist(self, user_client: TestClient) -> None:
        response = user_client.get("/wishlist")

        assert response.status_code == 404
        assert response.json()["error_code"] == "WISHLIST_NOT_FOUND"

    def test_moving_to_cart_drains_wishlist(self, user_client: TestClient) -> None:
        """Adding a wishlisted selection to the cart removes it from the wishlist."""
        user_client.post("/wishlist/items", json={"product_id": "p-widget"})

        user_client.post("/cart/items", json={"product_id": "p-widget", "quantity": 1})

        assert user_client.get("/wishlist").json()["items"] == []
