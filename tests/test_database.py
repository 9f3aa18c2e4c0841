import pytest
from fastapi import HTTPException

import database
from database import get_kv


def test_set_get_overwrite_delete(kv):
    kv.set("product:1", {"id": "1", "name": "A"})
    assert kv.get("product:1") == {"id": "1", "name": "A"}
    kv.set("product:1", {"id": "1", "name": "B"})
    assert kv.get("product:1")["name"] == "B"
    kv.delete("product:1")
    assert kv.get("product:1") is None


def test_prefix_scan_is_namespaced(kv):
    kv.set("product:1", {"id": "1"})
    kv.set("product:2", {"id": "2"})
    kv.set("order:1", {"id": "o1"})
    kv.set("productx:3", {"id": "x"})
    assert sorted(v["id"] for v in kv.get_by_prefix("product:")) == ["1", "2"]
    assert kv.get_by_prefix("payment:") == []


def test_prefix_is_escaped(kv):
    kv.set("a.b:1", {"id": "1"})
    kv.set("axb:2", {"id": "2"})
    assert [v["id"] for v in kv.get_by_prefix("a.b:")] == ["1"]


def test_mget_keeps_order_and_skips_missing(kv):
    kv.set("k:1", {"id": "1"})
    kv.set("k:2", {"id": "2"})
    assert [v["id"] for v in kv.mget(["k:2", "k:missing", "k:1"])] == ["2", "1"]


def test_ping(kv):
    kv.set("k:1", {"id": "1"})
    assert kv.ping()["keys"] == 1


def test_get_kv_without_database(monkeypatch):
    monkeypatch.setattr(database, "db", None)
    with pytest.raises(HTTPException) as exc:
        get_kv()
    assert exc.value.status_code == 500


def test_routes_report_missing_database(client, monkeypatch):
    from main import app
    monkeypatch.setattr(database, "db", None)
    app.dependency_overrides.pop(get_kv)
    response = client.get("/api/products")
    assert response.status_code == 500
    assert response.json() == {"error": "Database not configured"}
