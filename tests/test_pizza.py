"""Tests for the ingredient catalog endpoints."""


class TestPublicCatalog:
    def test_groups_active_ingredients(self, client, db, catalog):
        catalog["meat"].is_active = False
        db.commit()

        response = client.get("/api/v1/pizza/ingredients")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert set(data) == {"bases", "sauces", "cheeses", "veggies", "meats"}
        assert [b["name"] for b in data["bases"]] == ["Thin Crust"]
        assert data["bases"][0]["type"] == "base"
        assert data["bases"][0]["price"] == 150.0
        assert data["meats"] == []

    def test_list_one_category(self, client, catalog):
        response = client.get("/api/v1/pizza/ingredients/sauce")

        assert response.status_code == 200
        assert response.json()["message"] == "Pizza Sauce options retrieved successfully"
        assert [s["name"] for s in response.json()["data"]] == ["Marinara"]

    def test_unknown_category_is_validation_error(self, client):
        response = client.get("/api/v1/pizza/ingredients/dessert")
        assert response.status_code == 400

    def test_get_ingredient(self, client, catalog):
        response = client.get(f"/api/v1/pizza/ingredients/veggie/{catalog['veggie'].id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Mushrooms"
        assert data["is_organic"] is False

    def test_get_missing_ingredient(self, client):
        response = client.get("/api/v1/pizza/ingredients/cheese/9999")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Cheese not found"}


class TestAdminCatalog:
    def test_create_requires_admin(self, client, auth_headers):
        response = client.post(
            "/api/v1/pizza/ingredients/veggie",
            headers=auth_headers,
            json={"name": "Jalapeños", "description": "Hot", "price": 30},
        )
        assert response.status_code == 403

    def test_create_ingredient(self, client, admin_headers):
        response = client.post(
            "/api/v1/pizza/ingredients/sauce",
            headers=admin_headers,
            json={"name": "Harissa", "description": "Chili paste", "price": 65, "spice_level": 5},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["type"] == "sauce"
        assert data["spice_level"] == 5
        assert data["stock"] == 50
        assert data["threshold"] == 10
        assert data["is_active"] is True
        assert data["is_available"] is True

    def test_create_with_zero_stock_is_unavailable(self, client, admin_headers):
        response = client.post(
            "/api/v1/pizza/ingredients/meat",
            headers=admin_headers,
            json={"name": "Salami", "description": "Cured", "price": 90, "stock": 0},
        )
        assert response.json()["data"]["is_available"] is False

    def test_duplicate_name_conflicts(self, client, admin_headers, catalog):
        response = client.post(
            "/api/v1/pizza/ingredients/base",
            headers=admin_headers,
            json={"name": "Thin Crust", "description": "Again", "price": 150},
        )
        assert response.status_code == 409

    def test_negative_price_rejected(self, client, admin_headers):
        response = client.post(
            "/api/v1/pizza/ingredients/base",
            headers=admin_headers,
            json={"name": "Free Crust", "description": "Nope", "price": -1},
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "price"

    def test_update_ingredient(self, client, admin_headers, catalog):
        response = client.put(
            f"/api/v1/pizza/ingredients/cheese/{catalog['cheese'].id}",
            headers=admin_headers,
            json={"description": "Buffalo mozzarella", "price": 130},
        )

        data = response.json()["data"]
        assert data["description"] == "Buffalo mozzarella"
        assert data["price"] == 130.0
        assert data["stock"] == 20

    def test_deactivate_is_soft_delete(self, client, db, admin_headers, catalog):
        response = client.delete(
            f"/api/v1/pizza/ingredients/base/{catalog['base'].id}", headers=admin_headers
        )

        assert response.status_code == 200
        db.refresh(catalog["base"])
        assert catalog["base"].is_active is False
        public = client.get("/api/v1/pizza/ingredients/base").json()["data"]
        assert public == []

    def test_toggle_flips_active_flag(self, client, admin_headers, catalog):
        url = f"/api/v1/pizza/ingredients/meat/{catalog['meat'].id}/toggle"

        first = client.patch(url, headers=admin_headers)
        second = client.patch(url, headers=admin_headers)

        assert first.json()["data"]["is_active"] is False
        assert "deactivated" in first.json()["message"]
        assert second.json()["data"]["is_active"] is True
