# ----------------------
# file   : blog/scripts/seed.py
# function: wipe articles / categories / tags and insert the fixture articles
# usage  : python -m blog.scripts.seed
# ----------------------

import asyncio
from datetime import datetime, timezone
from typing import List

from loguru import logger

from blog.db.mongo import close_db, get_db
from blog.models.article import Article
from blog.models.category import Category
from blog.models.tag import Tag
from blog.services.tag_manager import ensure_indexes, save_category, save_tags


# ----------------------
# function: fixture articles, createTime is taken at call time
# return  : List[dict]
# ----------------------
def fixture_articles() -> List[dict]:
    now = datetime.now(timezone.utc)
    return [
        {
            "title": "test1",
            "tags": ["tag1", "tag2"],
            "excerpt": "excerpt",
            "content": "content",
            "category": "test",
            "createTime": now,
        },
        {
            "title": "test2",
            "tags": ["tag1", "tag3"],
            "excerpt": "excerpt",
            "content": "content",
            "category": "test",
            "createTime": now,
        },
        {
            "title": "test3",
            "tags": ["tag1", "tag4"],
            "excerpt": "excerpt",
            "content": "content",
            "category": "test",
            "createTime": now,
        },
    ]


# ----------------------
# function: remove every document of the seeded collections
#           one failing collection does not stop the others
# ----------------------
async def wipe() -> None:
    for model in (Category, Article, Tag):
        try:
            deleted = await model.remove({})
            logger.info(f"[SEED] Delete all {model.model_name} ({deleted})")
        except Exception:
            logger.exception(f"[SEED] failed to clear {model.model_name}")


# ----------------------
# function: wipe, then save each fixture article with its tags and category
# return  : List of created article documents
# ----------------------
async def seed() -> List[dict]:
    await wipe()
    created = []
    for article in fixture_articles():
        try:
            await save_tags(article["tags"])
            await save_category(article["category"])
            doc = await Article.create(article)
            created.append(doc)
            logger.info(f"[SEED] Saved {article['title']}")
        except Exception:
            logger.exception(f"[SEED] failed to save {article['title']}")
    return created


async def main() -> None:
    db = get_db()
    try:
        await ensure_indexes(db)
        await seed()
    finally:
        close_db()


if __name__ == "__main__":
    asyncio.run(main())
