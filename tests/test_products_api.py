from fastapi.testclient import TestClient

import main
from conftest import FakeMinio
from storage import ImageStorage


def test_root_and_health(client):
    assert client.get("/").json() == {"message": "Storefront Backend Running"}
    health = client.get("/test").json()
    assert health["backend"] == "✅ Running"


def test_list_products_empty(client):
    response = client.get("/api/products")
    assert response.status_code == 200
    assert response.json() == {"products": []}


def test_create_requires_bearer_token(client, sample_product):
    response = client.post("/api/products", json=sample_product)
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}

    response = client.post("/api/products", json=sample_product, headers={"Authorization": "Bearer wrong"})
    assert response.status_code == 401


def test_create_get_update_delete_product(client, auth_headers, sample_product):
    created = client.post("/api/products", json=sample_product, headers=auth_headers).json()["product"]
    assert created["id"]
    assert created["createdAt"] == created["updatedAt"]
    assert created["imageUrl"] == sample_product["imageUrl"]

    fetched = client.get(f"/api/products/{created['id']}").json()["product"]
    assert fetched == created

    updated = client.put(
        f"/api/products/{created['id']}",
        json={"price": 7999, "id": "ignored"},
        headers=auth_headers,
    ).json()["product"]
    assert updated["id"] == created["id"]
    assert updated["price"] == 7999
    assert updated["name"] == sample_product["name"]
    assert updated["createdAt"] == created["createdAt"]

    assert client.delete(f"/api/products/{created['id']}", headers=auth_headers).json() == {"success": True}
    response = client.get(f"/api/products/{created['id']}")
    assert response.status_code == 404
    assert response.json() == {"error": "Product not found"}


def test_invalid_product_is_rejected(client, auth_headers, sample_product):
    response = client.post("/api/products", json={**sample_product, "stock": -1}, headers=auth_headers)
    assert response.status_code == 400
    assert "stock" in response.json()["error"]

    created = client.post("/api/products", json=sample_product, headers=auth_headers).json()["product"]
    response = client.put(f"/api/products/{created['id']}", json={"price": -5}, headers=auth_headers)
    assert response.status_code == 400


def test_update_missing_product(client, auth_headers):
    response = client.put("/api/products/nope", json={"price": 1}, headers=auth_headers)
    assert response.status_code == 404


def test_sizes_keep_numbers_and_labels(client, auth_headers, sample_product):
    body = {**sample_product, "sizes": [7, "S", 8.5]}
    created = client.post("/api/products", json=body, headers=auth_headers).json()["product"]
    assert created["sizes"] == [7, "S", 8.5]


def test_upload_image(client, auth_headers, minio_client):
    response = client.post(
        "/api/upload-image",
        files={"file": ("shoe.PNG", b"\x89PNG...", "image/png")},
        headers=auth_headers,
    )
    assert response.status_code == 200
    url = response.json()["imageUrl"]
    assert url.startswith("https://storage.test/product-images/")
    (bucket, name), (data, content_type) = next(iter(minio_client.objects.items()))
    assert name.endswith(".png")
    assert data == b"\x89PNG..."
    assert content_type == "image/png"


def test_upload_image_without_file(client, auth_headers):
    response = client.post("/api/upload-image", headers=auth_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "No file provided"}


def test_upload_image_requires_auth(client):
    response = client.post("/api/upload-image", files={"file": ("a.jpg", b"x", "image/jpeg")})
    assert response.status_code == 401


def test_init_sample_data_seeds_once(client, auth_headers, kv):
    first = client.post("/api/init-sample-data", headers=auth_headers).json()
    assert first["success"] is True
    assert first["count"] == len(kv.get_by_prefix("product:"))
    assert len(kv.get_by_prefix("delivery:")) == 10

    second = client.post("/api/init-sample-data", headers=auth_headers).json()
    assert second == {"success": True, "message": "Products already exist"}
    assert len(kv.get_by_prefix("product:")) == first["count"]


def test_storefront_shows_only_active_categories(client, auth_headers, sample_product):
    client.post("/api/init-categories", headers=auth_headers)
    client.post("/api/products", json=sample_product, headers=auth_headers)
    client.post("/api/products", json={**sample_product, "name": "Mystery", "category": "Unlisted"}, headers=auth_headers)

    body = client.get("/api/storefront/products").json()
    assert [p["name"] for p in body["products"]] == ["Urban Runner Pro"]
    assert body["maxPrice"] == 9000
    assert body["subcategories"][0] == "all"
    assert "Athletic Shoes" in body["subcategories"]


def test_storefront_filters_and_sorts(client, auth_headers, sample_product):
    client.post("/api/init-categories", headers=auth_headers)
    client.post("/api/products", json=sample_product, headers=auth_headers)
    client.post("/api/products", json={**sample_product, "name": "Budget Runner", "price": 3000, "featured": False}, headers=auth_headers)
    client.post("/api/products", json={**sample_product, "name": "Jeans", "category": "Jeans", "price": 3200}, headers=auth_headers)

    body = client.get("/api/storefront/products", params={"q": "runner", "sort": "price-low"}).json()
    assert [p["name"] for p in body["products"]] == ["Budget Runner", "Urban Runner Pro"]

    body = client.get("/api/storefront/products", params={"maxPrice": 3500, "sort": "name"}).json()
    assert [p["name"] for p in body["products"]] == ["Budget Runner", "Jeans"]

    body = client.get("/api/storefront/products", params={"category": "Jeans"}).json()
    assert [p["name"] for p in body["products"]] == ["Jeans"]


def test_update_accepts_snake_case_fields(client, auth_headers, sample_product):
    created = client.post("/api/products", json=sample_product, headers=auth_headers).json()["product"]
    updated = client.put(
        f"/api/products/{created['id']}",
        json={"image_url": "https://new.example/x.jpg", "stock": 3},
        headers=auth_headers,
    ).json()["product"]
    assert updated["imageUrl"] == "https://new.example/x.jpg"
    assert updated["stock"] == 3
    assert "image_url" not in updated


def test_unexpected_error_returns_500_envelope(client, kv, monkeypatch):
    def broken(prefix):
        raise RuntimeError("store exploded")

    monkeypatch.setattr(kv, "get_by_prefix", broken)
    response = TestClient(main.app, raise_server_exceptions=False).get("/api/products")
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_startup_creates_image_bucket(monkeypatch):
    minio = FakeMinio()
    monkeypatch.setattr(main, "get_storage", lambda: ImageStorage(minio, "product-images"))
    with TestClient(main.app):
        pass
    assert minio.bucket_exists("product-images")
