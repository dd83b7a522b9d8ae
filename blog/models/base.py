# ----------------------
# file   : blog/models/base.py
# function: model handle binding a collection to a pydantic schema (document mapper)
# ----------------------

from typing import Any, Callable, Dict, List, Optional, Type

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo import ReturnDocument

from blog.db.mongo import get_db


class InvalidIdError(ValueError):
    """Raised when a path id is not a valid ObjectId."""


# ----------------------
# param   : value - id string from the request path
# function: parse an ObjectId
# return  : ObjectId
# ----------------------
def to_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidIdError(f"invalid id: {value!r}")


class Model:
    """
    Handle for one collection. Query methods return raw documents (dicts
    with ObjectId ``_id``); use ``serialize`` before sending them out.
    """

    def __init__(
        self,
        model_name: str,
        collection_name: str,
        schema: Type[BaseModel],
        hidden: Optional[List[str]] = None,
        db_getter: Callable[[], AsyncIOMotorDatabase] = get_db,
    ):
        self.model_name = model_name
        self.collection_name = collection_name
        self.schema = schema
        self.hidden = hidden or []
        self._db_getter = db_getter

    def __repr__(self):
        return f"<Model {self.model_name}>"

    @property
    def collection(self) -> AsyncIOMotorCollection:
        return self._db_getter()[self.collection_name]

    # ----------------------
    # param   : conditions - filter, usually the raw query string
    # function: cast query-string values to the schema field types
    # return  : mongo filter
    # ----------------------
    def cast_filter(self, conditions: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        result = {}
        fields = self.schema.model_fields
        by_alias = {f.alias: f for f in fields.values() if f.alias}
        for key, value in (conditions or {}).items():
            if key == "_id":
                result[key] = to_object_id(value)
                continue
            field = fields.get(key) or by_alias.get(key)
            if field is not None and field.annotation is int and isinstance(value, str):
                try:
                    value = int(value)
                except ValueError:
                    pass
            result[key] = value
        return result

    async def find(self, conditions: Optional[Dict[str, Any]] = None) -> List[dict]:
        cursor = self.collection.find(self.cast_filter(conditions))
        return await cursor.to_list(length=None)

    async def find_one(self, conditions: Optional[Dict[str, Any]] = None) -> Optional[dict]:
        return await self.collection.find_one(self.cast_filter(conditions))

    async def find_by_id(self, id: Any) -> Optional[dict]:
        return await self.collection.find_one({"_id": to_object_id(id)})

    # ----------------------
    # param   : data - request body
    # function: validate through the schema and insert
    # return  : stored document
    # ----------------------
    async def create(self, data: Dict[str, Any]) -> dict:
        doc = self.schema.model_validate(data).model_dump(by_alias=True)
        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    # ----------------------
    # param   : id - document id
    # param   : data - fields to change
    # function: merge the changes into the stored document, validate the result, $set it
    # return  : document after the update, None when the id is unknown
    # ----------------------
    async def find_by_id_and_update(self, id: Any, data: Dict[str, Any]) -> Optional[dict]:
        oid = to_object_id(id)
        current = await self.collection.find_one({"_id": oid})
        if current is None:
            return None
        merged = {k: v for k, v in current.items() if k != "_id"}
        merged.update({k: v for k, v in data.items() if k not in ("_id", "id")})
        doc = self.schema.model_validate(merged).model_dump(by_alias=True)
        return await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": doc},
            return_document=ReturnDocument.AFTER,
        )

    async def find_by_id_and_remove(self, id: Any) -> Optional[dict]:
        return await self.collection.find_one_and_delete({"_id": to_object_id(id)})

    async def remove(self, conditions: Optional[Dict[str, Any]] = None) -> int:
        result = await self.collection.delete_many(self.cast_filter(conditions))
        return result.deleted_count

    # ----------------------
    # param   : doc - raw document
    # function: JSON friendly copy (_id as string, hidden fields dropped)
    # ----------------------
    def serialize(self, doc: Optional[dict]) -> Optional[dict]:
        if doc is None:
            return None
        out = {k: v for k, v in doc.items() if k not in self.hidden}
        if "_id" in out:
            out["_id"] = str(out["_id"])
        return out
