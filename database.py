"""
MongoDB access for the listings and florists collections.

``Store`` wraps one database handle. The application opens it on startup
with ``connect`` and closes it on shutdown; request handlers receive it
as a dependency instead of reaching for a module-level global.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from pymongo import MongoClient
from pymongo.database import Database
from pydantic import BaseModel

from config import Settings
from filters import Contains, Equals, Expression, Filter, Range, SetIntersects, SetSupersets

logger = logging.getLogger(__name__)


def _clause(expression: Expression) -> Dict[str, Any]:
    if isinstance(expression, Equals):
        return {expression.field: expression.value}
    if isinstance(expression, Contains):
        return {expression.field: {"$regex": re.escape(expression.text), "$options": "i"}}
    if isinstance(expression, Range):
        bounds = {}
        if expression.gt is not None:
            bounds["$gt"] = expression.gt
        if expression.lt is not None:
            bounds["$lt"] = expression.lt
        return {expression.field: bounds} if bounds else {}
    if isinstance(expression, SetIntersects):
        return {expression.field: {"$in": list(expression.values)}}
    if isinstance(expression, SetSupersets):
        return {expression.field: {"$all": list(expression.values)}}
    raise TypeError(f"Unsupported filter expression: {expression!r}")


def to_mongo(query: Optional[Filter]) -> Dict[str, Any]:
    """Translate a ``Filter`` into a MongoDB query document."""
    if not query:
        return {}
    clauses = [c for c in (_clause(e) for e in query.expressions) if c]
    merged: Dict[str, Any] = {}
    for clause in clauses:
        if any(k in merged for k in clause):
            # Two conditions on one field would overwrite each other in a flat dict
            return {"$and": clauses}
        merged.update(clause)
    return merged


class Store:
    def __init__(self, db: Database, client: Optional[MongoClient] = None):
        self.db = db
        self.client = client

    @property
    def name(self) -> str:
        return self.db.name

    def find(self, collection_name: str, query: Optional[Filter] = None) -> List[dict]:
        return list(self.db[collection_name].find(to_mongo(query)))

    def find_by_id(self, collection_name: str, doc_id: ObjectId) -> Optional[dict]:
        return self.db[collection_name].find_one({"_id": doc_id})

    def count(self, collection_name: str, query: Optional[Filter] = None) -> int:
        return self.db[collection_name].count_documents(to_mongo(query))

    def insert_one(self, collection_name: str, data: Any) -> str:
        if isinstance(data, BaseModel):
            data_dict = data.model_dump(mode="json")
        else:
            data_dict = dict(data)
        now = datetime.now(timezone.utc)
        data_dict["created_at"] = now
        data_dict["updated_at"] = now

        result = self.db[collection_name].insert_one(data_dict)
        logger.info("Inserted %s into %s", result.inserted_id, collection_name)
        return str(result.inserted_id)

    def replace_one(self, collection_name: str, doc_id: ObjectId, data: Any) -> Tuple[int, int]:
        """Overwrite the whole document; fields missing from ``data`` are dropped."""
        if isinstance(data, BaseModel):
            data_dict = data.model_dump(mode="json")
        else:
            data_dict = dict(data)
        data_dict["updated_at"] = datetime.now(timezone.utc)

        result = self.db[collection_name].replace_one({"_id": doc_id}, data_dict)
        logger.info(
            "Replaced %s in %s (matched=%s modified=%s)",
            doc_id, collection_name, result.matched_count, result.modified_count,
        )
        return result.matched_count, result.modified_count

    def delete_one(self, collection_name: str, doc_id: ObjectId) -> int:
        result = self.db[collection_name].delete_one({"_id": doc_id})
        logger.info("Deleted %s from %s (count=%s)", doc_id, collection_name, result.deleted_count)
        return result.deleted_count

    def collection_names(self) -> List[str]:
        return self.db.list_collection_names()

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
            logger.info("Closed MongoDB connection")


def connect(settings: Settings) -> Store:
    client = MongoClient(settings.database_url)
    logger.info("Connected to MongoDB database %s", settings.database_name)
    return Store(client[settings.database_name], client)
