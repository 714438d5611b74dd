"""
HTTP tests for the catalog and admin routes.
"""
import pytest

from models.user import Role


@pytest.fixture
def admin(make_user):
    return make_user(role=Role.ADMIN)


@pytest.fixture
def admin_headers(admin, bearer):
    return bearer(admin.access_token)


class TestProductRoutes:
    def test_public_listing_hides_inactive(self, client, make_product):
        visible = make_product(title="Visible")
        make_product(title="Hidden", is_active=False)

        response = client.get("/api/v1/products")

        body = response.get_json()
        assert response.status_code == 200
        assert [p["id"] for p in body["data"]] == [visible.id]
        assert body["meta"]["total"] == 1
        assert body["data"][0]["price"] == "10.00"

    def test_listing_sort_and_filter(self, client, make_product):
        make_product(title="B", price="5.00")
        make_product(title="A", price="9.00", featured=True)

        by_price = client.get("/api/v1/products?sort=price").get_json()["data"]
        featured = client.get("/api/v1/products?featured=true").get_json()["data"]

        assert [p["title"] for p in by_price] == ["B", "A"]
        assert [p["title"] for p in featured] == ["A"]

    def test_bad_sort_field(self, client):
        response = client.get("/api/v1/products?sort=password")

        assert response.status_code == 400

    def test_get_inactive_product(self, client, make_product):
        product = make_product(is_active=False)

        assert client.get(f"/api/v1/products/{product.id}").status_code == 404

    def test_create_requires_admin(self, client, make_user, bearer):
        headers = bearer(make_user().access_token)
        payload = {"title": "Mug", "description": "A mug", "price": "4.99"}

        response = client.post("/api/v1/products", json=payload, headers=headers)

        assert response.status_code == 403
        assert response.get_json()["error"] == "FORBIDDEN"

    def test_create_and_patch(self, client, admin_headers):
        payload = {"title": "Mug", "description": "A mug", "price": "4.99", "stock": 2}

        created = client.post("/api/v1/products", json=payload, headers=admin_headers)
        product_id = created.get_json()["data"]["id"]
        patched = client.patch(f"/api/v1/products/{product_id}", json={"stock": 0}, headers=admin_headers)

        assert created.status_code == 201
        assert created.get_json()["data"]["delivery_time"] == "1 Week"
        assert patched.status_code == 200
        assert patched.get_json()["data"]["stock"] == 0

    def test_create_validation(self, client, admin_headers):
        response = client.post("/api/v1/products", json={"title": "Mug", "price": "-1"}, headers=admin_headers)

        assert response.status_code == 422
        assert set(response.get_json()["details"]) >= {"description", "price"}

    def test_delete_is_soft(self, client, admin_headers, make_product, make_user, bearer, cart_engine):
        product = make_product(stock=3)
        shopper = make_user()
        cart_engine.add_item(shopper.user.id, product.id, 1)
        headers = bearer(shopper.access_token)

        deleted = client.delete(f"/api/v1/products/{product.id}", headers=admin_headers)
        again = client.delete(f"/api/v1/products/{product.id}", headers=admin_headers)

        assert deleted.status_code == 204
        assert again.status_code == 404
        assert client.get(f"/api/v1/products/{product.id}").status_code == 404
        # lines already in carts survive; new adds are refused
        cart = client.get("/api/v1/cart", headers=headers).get_json()["data"]
        assert [i["product_id"] for i in cart["items"]] == [product.id]
        add = client.post("/api/v1/cart/items", json={"product_id": product.id}, headers=headers)
        assert add.status_code == 404

    def test_delete_requires_admin(self, client, make_user, make_product, bearer):
        product = make_product()

        response = client.delete(f"/api/v1/products/{product.id}", headers=bearer(make_user().access_token))

        assert response.status_code == 403

    def test_unknown_collection_on_create(self, client, admin_headers):
        payload = {"title": "Mug", "description": "A mug", "price": "4.99", "collection_id": "missing"}

        response = client.post("/api/v1/products", json=payload, headers=admin_headers)

        assert response.status_code == 404
        assert response.get_json()["message"] == "Collection not found"


class TestAdminRoutes:
    def test_non_admin_forbidden(self, client, make_user, bearer):
        response = client.get("/api/v1/admin/stats", headers=bearer(make_user().access_token))

        assert response.status_code == 403

    def test_stats(self, client, admin_headers, make_user, make_product, cart_engine):
        shopper = make_user()
        product = make_product(price="2.50", stock=4)
        cart_engine.add_item(shopper.user.id, product.id, 3)

        response = client.get("/api/v1/admin/stats", headers=admin_headers)

        data = response.get_json()["data"]
        assert data["total_users"] == 2
        assert data["total_admins"] == 1
        assert data["open_carts"] == 1
        assert data["open_cart_value"] == "7.50"

    def test_list_users(self, client, admin_headers, make_user):
        make_user()

        body = client.get("/api/v1/admin/users?limit=1", headers=admin_headers).get_json()

        assert body["meta"] == {"page": 1, "limit": 1, "total": 2}
        assert len(body["data"]) == 1

    def test_promote_then_act_as_admin(self, client, admin_headers, make_user, bearer):
        other = make_user()
        headers = bearer(other.access_token)

        before = client.get("/api/v1/admin/stats", headers=headers)
        promoted = client.put(f"/api/v1/admin/users/{other.user.id}/role", json={"role": "admin"},
                              headers=admin_headers)
        after = client.get("/api/v1/admin/stats", headers=headers)

        # the same access token picks up the new role
        assert before.status_code == 403
        assert promoted.get_json()["data"]["role"] == "admin"
        assert after.status_code == 200

    def test_invalid_role(self, client, admin_headers, make_user):
        other = make_user()

        response = client.put(f"/api/v1/admin/users/{other.user.id}/role", json={"role": "root"},
                              headers=admin_headers)

        assert response.status_code == 422
        assert response.get_json()["error"] == "INVALID_ROLE"

    def test_own_role(self, client, admin, admin_headers):
        response = client.put(f"/api/v1/admin/users/{admin.user.id}/role", json={"role": "user"},
                              headers=admin_headers)

        assert response.status_code == 400
        assert response.get_json()["error"] == "SELF_MODIFICATION"

    def test_delete_user(self, client, admin_headers, make_user, bearer):
        other = make_user()
        headers = bearer(other.access_token)

        deleted = client.delete(f"/api/v1/admin/users/{other.user.id}", headers=admin_headers)
        again = client.delete(f"/api/v1/admin/users/{other.user.id}", headers=admin_headers)

        assert deleted.status_code == 200
        assert again.status_code == 404
        # tokens of a deleted user stop working
        assert client.get("/api/v1/users/me", headers=headers).status_code == 401
