"""
MongoDB access for the storefront API.

The connection is configured from DATABASE_URL / DATABASE_NAME. When no URL is
set `db` stays None and the API reports the database as not configured.
"""

import logging
import os
from datetime import datetime
from typing import Any, Dict, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from dotenv import load_dotenv
from fastapi import HTTPException
from pydantic import BaseModel
from pymongo import MongoClient

from schemas import utcnow

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "ecommerce")

client: Optional[MongoClient] = None
db = None

if DATABASE_URL:
    client = MongoClient(DATABASE_URL)
    db = client[DATABASE_NAME]
    logger.info("MongoDB client configured for database %s", DATABASE_NAME)
else:
    logger.warning("DATABASE_URL not set, database is not available")


def now() -> datetime:
    return utcnow()


def get_db():
    if db is None:
        raise HTTPException(status_code=500, detail="Database not configured")
    return db


def create_document(collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a document, stamping created_at/updated_at. Returns the new id as str."""
    database = get_db()
    doc = data.model_dump() if isinstance(data, BaseModel) else dict(data)
    stamp = now()
    doc.setdefault("created_at", stamp)
    doc["updated_at"] = stamp
    res = database[collection_name].insert_one(doc)
    return str(res.inserted_id)


# Helpers

def is_object_id(value: Any) -> bool:
    return ObjectId.is_valid(str(value))


def to_obj_id(id_str: str, detail: str = "Invalid id") -> ObjectId:
    try:
        return ObjectId(id_str)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail=detail)


def sanitize(doc: Optional[Dict]) -> Optional[Dict]:
    """Turn a stored document into a JSON-friendly dict.

    `_id` becomes `id`, nested ObjectIds become strings and the password hash
    is dropped.
    """
    if not doc:
        return doc
    d = {k: _plain(v) for k, v in doc.items() if k != "password_hash"}
    if "_id" in d:
        d["id"] = d.pop("_id")
    return d


def _plain(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value
