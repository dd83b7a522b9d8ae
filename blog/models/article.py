# ----------------------
# file   : blog/models/article.py
# function: article schema - tags and category are stored as plain strings
# ----------------------

from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, Field

from blog.models.base import Model


class ArticleSchema(BaseModel):
    title: str
    tags: List[str] = []
    excerpt: str = ""
    content: str = ""
    category: str = ""
    create_time: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), alias="createTime")

    # ----------------------
    # accept both createTime and create_time on input
    # ----------------------
    model_config = {
        "populate_by_name": True,
    }


Article = Model("article", "articles", ArticleSchema)
