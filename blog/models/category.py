# ----------------------
# file   : blog/models/category.py
# function: article category (one document per saved article)
# ----------------------

from pydantic import BaseModel

from blog.models.base import Model


class CategorySchema(BaseModel):
    name: str


Category = Model("category", "categories", CategorySchema)
