# ----------------------
# file   : blog/api/actions.py
# function: generic CRUD handlers bound to a model (list, create, get, update, delete, login, register)
# ----------------------

import functools
from typing import Any, Awaitable, Callable, Dict

from fastapi import HTTPException, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError

from blog.models.base import InvalidIdError, Model
from blog.services.tag_manager import save_category, save_tags
from blog.utils.logger import logger

Handler = Callable[[Request], Awaitable[Response]]


# ----------------------
# param   : request - incoming request (body parsed by the middleware pipeline)
# return  : parsed body, {} when missing
# ----------------------
def get_body(request: Request) -> Any:
    body = getattr(request.state, "body", None)
    return body if body is not None else {}


def json_response(content: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=jsonable_encoder(content), status_code=status_code)


# ----------------------
# param   : label - log tag, e.g. "ARTICLE.create"
# function: turn model failures into explicit HTTP errors
#           bad id -> 400, schema error -> 422, duplicate key -> 409,
#           anything else -> 500 (logged)
# ----------------------
def handle_errors(label: str):
    def decorator(func: Handler) -> Handler:
        @functools.wraps(func)
        async def wrapper(request: Request) -> Response:
            try:
                return await func(request)
            except HTTPException:
                raise
            except InvalidIdError as e:
                raise HTTPException(status_code=400, detail=str(e))
            except ValidationError as e:
                errors = [{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()]
                raise HTTPException(status_code=422, detail=errors)
            except DuplicateKeyError:
                raise HTTPException(status_code=409, detail=f"{label.split('.')[0].lower()} already exists")
            except Exception:
                logger.exception(f"[{label}] request failed: {request.method} {request.url.path}")
                raise HTTPException(status_code=500, detail=f"{label} failed")
        return wrapper
    return decorator


def make_actions(model: Model) -> Dict[str, Handler]:
    """
    Build the handler set for ``model``. Every handler takes the request
    and returns a response; the caller decides which ones to mount.
    """
    name = model.model_name.upper()

    # ----------------------
    # function: list documents filtered by the query string
    # return  : [document]
    # ----------------------
    @handle_errors(f"{name}.find")
    async def find(request: Request) -> Response:
        docs = await model.find(dict(request.query_params))
        return json_response([model.serialize(doc) for doc in docs])

    # ----------------------
    # function: create a document; articles also bump tags and save the category
    # return  : created document (201)
    # ----------------------
    @handle_errors(f"{name}.create")
    async def create(request: Request) -> Response:
        body = get_body(request)
        if not isinstance(body, dict):
            raise HTTPException(status_code=400, detail="Body must be an object")
        if model.model_name == "article":
            article = model.schema.model_validate(body)
            await save_tags(article.tags)
            await save_category(article.category)
            body = article.model_dump(by_alias=True)
        doc = await model.create(body)
        return json_response(model.serialize(doc), status_code=201)

    @handle_errors(f"{name}.findById")
    async def find_by_id(request: Request) -> Response:
        doc = await model.find_by_id(request.path_params["id"])
        if doc is None:
            raise HTTPException(status_code=404, detail=f"{model.model_name} not found")
        return json_response(model.serialize(doc))

    # ----------------------
    # function: partial update ($set) by id
    # return  : document after the update
    # ----------------------
    @handle_errors(f"{name}.updateById")
    async def update_by_id(request: Request) -> Response:
        body = get_body(request)
        if not isinstance(body, dict) or not body:
            raise HTTPException(status_code=400, detail="Nothing to update")
        doc = await model.find_by_id_and_update(request.path_params["id"], body)
        if doc is None:
            raise HTTPException(status_code=404, detail=f"{model.model_name} not found")
        return json_response(model.serialize(doc))

    @handle_errors(f"{name}.deleteById")
    async def delete_by_id(request: Request) -> Response:
        doc = await model.find_by_id_and_remove(request.path_params["id"])
        if doc is None:
            raise HTTPException(status_code=404, detail=f"{model.model_name} not found")
        return Response(status_code=204)

    # ----------------------
    # function: find one user matching the query string
    # return  : {"status": "yes"|"no", "user": document|None}
    # ----------------------
    @handle_errors(f"{name}.login")
    async def login(request: Request) -> Response:
        doc = await model.find_one(dict(request.query_params))
        return json_response({
            "status": "yes" if doc else "no",
            "user": model.serialize(doc),
        })

    # ----------------------
    # function: create a user unless the email or the name is taken
    # return  : {"status": "yes", "user": ...} or {"status": "no", "message": ...}
    # ----------------------
    @handle_errors(f"{name}.register")
    async def register(request: Request) -> Response:
        body = get_body(request)
        if not isinstance(body, dict):
            raise HTTPException(status_code=400, detail="Body must be an object")

        if await model.find_one({"email": body.get("email")}):
            return json_response({"status": "no", "message": "This email is already saved"})
        if await model.find_one({"name": body.get("name")}):
            return json_response({"status": "no", "message": "This name is already saved"})

        doc = await model.create(body)
        logger.info(f"[{name}] registered {doc.get('name')}")
        return json_response({"status": "yes", "user": model.serialize(doc)})

    return {
        "find": find,
        "create": create,
        "findById": find_by_id,
        "updateById": update_by_id,
        "deleteById": delete_by_id,
        "login": login,
        "register": register,
    }
