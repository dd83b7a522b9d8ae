# ----------------------
# file   : blog/api/routes.py
# function: mount the generic actions of each model on a router
# ----------------------

from fastapi import APIRouter

from blog.api.actions import make_actions
from blog.models.article import Article
from blog.models.base import Model
from blog.models.category import Category
from blog.models.tag import Tag
from blog.models.user import User


# ----------------------
# param   : model - model handle
# param   : with_auth - also mount POST /login and POST /register
# return  : APIRouter
# ----------------------
def build_router(model: Model, with_auth: bool = False) -> APIRouter:
    actions = make_actions(model)
    router = APIRouter(tags=[model.model_name])

    if with_auth:
        router.add_api_route("/login", actions["login"], methods=["POST"])
        router.add_api_route("/register", actions["register"], methods=["POST"])

    router.add_api_route("/", actions["find"], methods=["GET"])
    router.add_api_route("/", actions["create"], methods=["POST"])
    router.add_api_route("/{id}", actions["findById"], methods=["GET"])
    router.add_api_route("/{id}", actions["updateById"], methods=["PUT"])
    router.add_api_route("/{id}", actions["deleteById"], methods=["DELETE"])
    return router


api_router = APIRouter()
api_router.include_router(build_router(Category), prefix="/categories")
api_router.include_router(build_router(Tag), prefix="/tags")
api_router.include_router(build_router(Article), prefix="/articles")
api_router.include_router(build_router(User, with_auth=True), prefix="/users")
