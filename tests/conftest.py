from datetime import timedelta

import mongomock
import pytest
from fastapi.testclient import TestClient

import main
from auth import AuthError, get_identity_provider
from database import KVStore, get_kv
from storage import ImageStorage, get_storage

ADMIN_TOKEN = "admin-token"


class FakeIdentityProvider:
    """Accepts ADMIN_TOKEN only; records created admin users."""

    def __init__(self):
        self.created = []
        self.reject_with = None

    def get_user(self, token):
        if token == ADMIN_TOKEN:
            return {"id": "admin-1", "email": "admin@example.com"}
        return None

    def create_admin_user(self, email, password, name):
        if self.reject_with:
            raise AuthError(self.reject_with)
        user = {"id": f"user-{len(self.created) + 1}", "email": email, "user_metadata": {"name": name, "role": "admin"}}
        self.created.append(user)
        return user


class FakeMinio:
    def __init__(self, buckets=()):
        self.buckets = set(buckets)
        self.objects = {}

    def bucket_exists(self, bucket):
        return bucket in self.buckets

    def make_bucket(self, bucket):
        self.buckets.add(bucket)

    def put_object(self, bucket, name, data, length, content_type="application/octet-stream"):
        self.objects[(bucket, name)] = (data.read(), content_type)

    def presigned_get_object(self, bucket, name, expires=timedelta(days=7)):
        return f"https://storage.test/{bucket}/{name}?expires={int(expires.total_seconds())}"


@pytest.fixture
def kv():
    return KVStore(mongomock.MongoClient().storefront.kv_store)


@pytest.fixture
def identity():
    return FakeIdentityProvider()


@pytest.fixture
def minio_client():
    return FakeMinio(buckets={"product-images"})


@pytest.fixture
def client(kv, identity, minio_client):
    main.app.dependency_overrides[get_kv] = lambda: kv
    main.app.dependency_overrides[get_identity_provider] = lambda: identity
    main.app.dependency_overrides[get_storage] = lambda: ImageStorage(minio_client, "product-images")
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def sample_product():
    return {
        "name": "Urban Runner Pro",
        "description": "Running shoes",
        "price": 8500,
        "category": "Athletic Shoes",
        "sizes": [7, 8, 9],
        "colors": ["Black", "White"],
        "imageUrl": "https://example.com/runner.jpg",
        "stock": 50,
        "featured": True,
    }


@pytest.fixture
def nairobi():
    return {"id": "loc-1", "name": "Nairobi CBD", "region": "Nairobi", "cost": 0}
