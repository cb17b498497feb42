from storefront.core.errors import PersistenceError
from storefront.services.cart_store import CartStore


def test_root_and_security_headers(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert "Cache-Control" not in r.headers


def test_storage_errors_map_to_500_with_code(client, temp_user, monkeypatch):
    def broken_get(self, user_id):
        raise PersistenceError()

    monkeypatch.setattr(CartStore, "get", broken_get)
    r = client.get("/api/cart", headers=temp_user["headers"])
    assert r.status_code == 500
    assert r.json() == {"detail": "Storage failure, please retry", "code": "persistence_error"}
