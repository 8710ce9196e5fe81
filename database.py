"""
MongoDB helpers for the SummerChamp API.

Every route talks to the store through these functions. Documents come back with
ObjectIds stringified, write results come back as the driver-style acknowledgement
objects the web client expects.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bson import ObjectId
from pymongo import MongoClient

import config

logger = logging.getLogger("summerchamp.database")

USERS = "users"
INSTRUCTORS = "instructors"
CLASSES = "classes"
SELECTED_CLASSES = "selectedClasses"
PAYMENTS = "payments"

client: Optional[MongoClient] = None
db = None

if config.DATABASE_URL:
    client = MongoClient(config.DATABASE_URL, serverSelectionTimeoutMS=config.DATABASE_TIMEOUT_MS)
    db = client[config.DATABASE_NAME]


def collection(name: str):
    if db is None:
        raise RuntimeError("Database not available. Check DATABASE_URL and DATABASE_NAME.")
    return db[name]


def ping() -> None:
    """Round-trip to the server; raises a PyMongoError when it is unreachable."""
    if client is None:
        raise RuntimeError("Database not available. Check DATABASE_URL and DATABASE_NAME.")
    client.admin.command("ping")


def key_filter(value: str) -> Dict[str, Any]:
    """Filter on a store-assigned `_id`, which may be an ObjectId or a plain string."""
    if ObjectId.is_valid(value):
        return {"_id": ObjectId(value)}
    return {"_id": value}


def serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    return {k: str(v) if isinstance(v, ObjectId) else v for k, v in doc.items()}


def get_documents(
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    sort: Optional[Sequence[Tuple[str, int]]] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    cursor = collection(collection_name).find(filter_dict or {})
    if sort:
        cursor = cursor.sort(list(sort))
    if limit:
        cursor = cursor.limit(limit)
    return [serialize(d) for d in cursor]


def find_document(collection_name: str, filter_dict: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return serialize(collection(collection_name).find_one(filter_dict))


def create_document(collection_name: str, data: Dict[str, Any]) -> Dict[str, Any]:
    # insert_one adds `_id` to the dict it is given
    result = collection(collection_name).insert_one(dict(data))
    return {"acknowledged": result.acknowledged, "insertedId": str(result.inserted_id)}


def upsert_document(
    collection_name: str, filter_dict: Dict[str, Any], data: Dict[str, Any]
) -> Dict[str, Any]:
    result = collection(collection_name).update_one(filter_dict, {"$set": data}, upsert=True)
    upserted_id = result.upserted_id
    ack = {
        "acknowledged": result.acknowledged,
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count,
        "upsertedId": str(upserted_id) if upserted_id is not None else None,
        "upsertedCount": 0 if upserted_id is None else 1,
    }
    logger.info("upsert %s %s -> %s", collection_name, filter_dict, ack)
    return ack


def delete_document(collection_name: str, filter_dict: Dict[str, Any]) -> Dict[str, Any]:
    result = collection(collection_name).delete_one(filter_dict)
    return {"acknowledged": result.acknowledged, "deletedCount": result.deleted_count}
