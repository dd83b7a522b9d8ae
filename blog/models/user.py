# ----------------------
# file   : blog/models/user.py
# function: user account - email/name uniqueness is checked on register
# ----------------------

from typing import Optional

from pydantic import BaseModel

from blog.models.base import Model


class UserSchema(BaseModel):
    name: str
    email: str
    password: Optional[str] = None

    # ----------------------
    # extra profile fields are stored as sent
    # ----------------------
    model_config = {
        "extra": "allow",
    }


User = Model("user", "users", UserSchema, hidden=["password"])
