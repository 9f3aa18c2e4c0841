"""
Key-value store

Every record lives in one MongoDB collection as {_id: key, value: record}.
Keys are namespaced with a string prefix ("product:", "order:", ...) and
listed with a prefix scan, so the collection behaves like a plain KV table.
"""
import os
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from dotenv import load_dotenv
from fastapi import HTTPException
from loguru import logger
from pymongo import MongoClient
from pymongo.collection import Collection

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")
KV_COLLECTION = os.getenv("KV_COLLECTION", "kv_store")

db = None
if DATABASE_URL and DATABASE_NAME:
    try:
        _client = MongoClient(DATABASE_URL)
        db = _client[DATABASE_NAME]
    except Exception as e:
        logger.error(f"Could not create MongoDB client: {e}")
        db = None


def new_id() -> str:
    return str(uuid.uuid4())


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class KVStore:
    def __init__(self, collection: Collection):
        self.collection = collection

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        doc = self.collection.find_one({"_id": key})
        if not doc:
            return None
        return doc.get("value")

    def set(self, key: str, value: Dict[str, Any]) -> None:
        self.collection.replace_one({"_id": key}, {"_id": key, "value": value}, upsert=True)

    def delete(self, key: str) -> None:
        self.collection.delete_one({"_id": key})

    def mget(self, keys: Iterable[str]) -> List[Dict[str, Any]]:
        keys = list(keys)
        docs = {d["_id"]: d.get("value") for d in self.collection.find({"_id": {"$in": keys}})}
        return [docs[k] for k in keys if docs.get(k) is not None]

    def get_by_prefix(self, prefix: str) -> List[Dict[str, Any]]:
        pattern = "^" + re.escape(prefix)
        return [d.get("value") for d in self.collection.find({"_id": {"$regex": pattern}}) if d.get("value") is not None]

    def ping(self) -> Dict[str, Any]:
        database = self.collection.database
        return {
            "database_name": database.name,
            "collection": self.collection.name,
            "keys": self.collection.count_documents({}),
        }


def get_kv() -> KVStore:
    """FastAPI dependency returning the configured store."""
    if db is None:
        raise HTTPException(status_code=500, detail="Database not configured")
    return KVStore(db[KV_COLLECTION])
