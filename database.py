"""
Database access

A single shared handle to the hosted document backend, configured once from
the environment:
- DATABASE_URL  -> backend endpoint (carries the access key)
- DATABASE_NAME -> database holding the storefront collections

Collections used by the storefront:
- "products"      (read-only)
- "orders"        (insert + filtered read)
- "custom_orders" (insert + filtered read)
"""
import os
import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pymongo import DESCENDING, MongoClient
from pymongo.database import Database

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when the backend credentials are missing from the environment."""


def connect(database_url: Optional[str] = None, database_name: Optional[str] = None) -> Database:
    url = database_url or os.getenv("DATABASE_URL")
    name = database_name or os.getenv("DATABASE_NAME")
    missing = [var for var, value in (("DATABASE_URL", url), ("DATABASE_NAME", name)) if not value]
    if missing:
        raise ConfigurationError(f"Missing required environment variable(s): {', '.join(missing)}")
    client = MongoClient(url)
    logger.info("Database client configured for %s", name)
    return client[name]


db = connect()


# ---------- Helpers ----------

def doc_to_dict(doc: dict) -> dict:
    out = {}
    for k, v in doc.items():
        out[k] = str(v) if isinstance(v, ObjectId) else v
    if "_id" in out:
        out["id"] = out.pop("_id")
    return out


def create_document(collection_name: str, data: Union[BaseModel, dict]) -> str:
    """Insert one row and return its id. Timestamps are assigned here."""
    if isinstance(data, BaseModel):
        data_dict = data.model_dump()
    else:
        data_dict = dict(data)
    now = datetime.now(timezone.utc)
    data_dict["created_at"] = now
    data_dict["updated_at"] = now
    result = db[collection_name].insert_one(data_dict)
    return str(result.inserted_id)


def get_documents(
    collection_name: str,
    filter_dict: Optional[dict] = None,
    sort_by: Optional[str] = "created_at",
) -> List[dict]:
    """Filtered read, newest first on ``sort_by``."""
    cursor = db[collection_name].find(filter_dict or {})
    if sort_by:
        cursor = cursor.sort(sort_by, DESCENDING)
    return [doc_to_dict(d) for d in cursor]


def get_document(collection_name: str, document_id: str) -> Optional[dict]:
    try:
        oid = ObjectId(document_id)
    except (InvalidId, TypeError):
        return None
    doc = db[collection_name].find_one({"_id": oid})
    return doc_to_dict(doc) if doc else None
