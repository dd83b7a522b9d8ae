# ----------------------
# file   : blog/services/tag_manager.py
# function: tag counters and category documents written alongside articles
# ----------------------

import asyncio
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from blog.models.category import Category
from blog.models.tag import Tag
from blog.utils.logger import logger


# ----------------------
# param   : db - MongoDB database
# function: unique index on tag name (one tag document per name)
# ----------------------
async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    await db[Tag.collection_name].create_index([("name", ASCENDING)], unique=True)
    logger.info("[INDEX] tags.name unique index ready")


# ----------------------
# param   : name - tag name
# function: create the tag with number 1 or increment an existing one, in one upsert
# return  : tag document after the update
# ----------------------
async def _upsert_tag(name: str) -> dict:
    try:
        return await Tag.collection.find_one_and_update(
            {"name": name},
            {"$inc": {"number": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError:
        # a concurrent upsert inserted the same name first; it exists now
        logger.debug(f"[TAG] upsert race on {name}, retrying")
        return await Tag.collection.find_one_and_update(
            {"name": name},
            {"$inc": {"number": 1}},
            return_document=ReturnDocument.AFTER,
        )


# ----------------------
# param   : tags - tag names sent with the article
# function: bump or create every tag concurrently
# return  : List of tag documents
# ----------------------
async def save_tags(tags: Optional[List[str]]) -> List[dict]:
    names = [tag for tag in (tags or []) if tag]
    if not names:
        return []
    docs = await asyncio.gather(*(_upsert_tag(name) for name in names))
    logger.info(f"[TAG] saved {len(docs)} tag(s): {', '.join(names)}")
    return list(docs)


# ----------------------
# param   : category - category name of the article
# function: insert a category document (no existence check)
# return  : category document
# ----------------------
async def save_category(category: str) -> dict:
    doc = await Category.create({"name": category})
    logger.info(f"[CATEGORY] saved {category}")
    return doc
