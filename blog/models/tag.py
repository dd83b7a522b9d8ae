# ----------------------
# file   : blog/models/tag.py
# function: tag name and the number of articles using it
# ----------------------

from pydantic import BaseModel, Field

from blog.models.base import Model


class TagSchema(BaseModel):
    name: str
    number: int = Field(default=1, ge=1)


Tag = Model("tag", "tags", TagSchema)
