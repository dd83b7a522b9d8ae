# ----------------------
# file   : blog/ssr/renderer.py
# function: bundle renderer - route table + Jinja2 templates -> streamed markup and page metadata
# ----------------------

import json
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple
from urllib.parse import urlsplit

from jinja2 import DictLoader, Environment
from markupsafe import Markup, escape
from starlette.routing import compile_path

from blog.ssr.cache import LRUCache


class RenderError(Exception):
    """Render failure; ``code`` 404 means no route matched the url."""

    def __init__(self, message: str, code: int = 500):
        super().__init__(message)
        self.code = code


@dataclass
class PageMeta:
    title: str = ""
    meta: str = ""
    link: str = ""

    def inject(self) -> str:
        return f"{self.title}{self.meta}{self.link}"


@dataclass
class RenderContext:
    url: str
    params: Dict[str, Any] = field(default_factory=dict)
    meta: Optional[PageMeta] = None
    state: Optional[Any] = None


def _attrs(tag: str, attrs: Dict[str, Any]) -> str:
    rendered = " ".join(f'{k}="{escape(v)}"' for k, v in attrs.items())
    return f"<{tag} {rendered}>"


# ----------------------
# param   : path - bundle file (JSON)
# function: read a serialized render bundle
# return  : dict with "templates" and "routes"
# ----------------------
def load_bundle(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        bundle = json.load(f)
    if "templates" not in bundle or "routes" not in bundle:
        raise ValueError(f"{path} is not a render bundle (templates/routes missing)")
    return bundle


class BundleRenderer:
    def __init__(self, bundle: dict, cache: Optional[LRUCache] = None):
        self.env = Environment(loader=DictLoader(dict(bundle["templates"])), autoescape=True, enable_async=True)
        self.cache = cache
        self.routes: List[Tuple[Any, Dict[str, Any], dict]] = []
        for route in bundle["routes"]:
            regex, _, convertors = compile_path(route["path"])
            self.routes.append((regex, convertors, route))

    # ----------------------
    # param   : url - request url (query string ignored)
    # return  : (route, params), RenderError(404) when nothing matches
    # ----------------------
    def match(self, url: str) -> Tuple[dict, Dict[str, Any]]:
        path = urlsplit(url).path or "/"
        for regex, convertors, route in self.routes:
            m = regex.match(path)
            if m:
                params = {k: convertors[k].convert(v) for k, v in m.groupdict().items()}
                return route, params
        raise RenderError(f"no route for {path}", code=404)

    async def _expand(self, source: Any, context: RenderContext) -> str:
        if not isinstance(source, str) or "{" not in source:
            return str(source)
        # autoescaped output, must not be escaped again
        rendered = await self.env.from_string(source).render_async(url=context.url, params=context.params)
        return Markup(rendered)

    # ----------------------
    # function: title / meta / link fragments of the matched route
    # ----------------------
    async def render_meta(self, route: dict, context: RenderContext) -> PageMeta:
        title = await self._expand(route.get("title", ""), context)
        meta = []
        for attrs in route.get("meta", []):
            meta.append(_attrs("meta", {k: await self._expand(v, context) for k, v in attrs.items()}))
        link = []
        for attrs in route.get("link", []):
            link.append(_attrs("link", {k: await self._expand(v, context) for k, v in attrs.items()}))
        return PageMeta(
            title=f"<title>{escape(title)}</title>" if title else "",
            meta="".join(meta),
            link="".join(link),
        )

    # ----------------------
    # param   : context - url in, params / meta / state filled in before the first chunk
    # function: stream the markup of the matched route, served from cache when fresh
    # return  : async iterator of str chunks
    # ----------------------
    async def render_to_stream(self, context: RenderContext) -> AsyncIterator[str]:
        route, params = self.match(context.url)
        context.params = params
        if context.state is None and "state" in route:
            context.state = route["state"]
        context.meta = await self.render_meta(route, context)

        key = urlsplit(context.url).path
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                yield cached
                return

        template = self.env.get_template(route["template"])
        parts = []
        async for chunk in template.generate_async(url=context.url, params=params, state=context.state):
            parts.append(chunk)
            yield chunk
        if self.cache is not None:
            self.cache.set(key, "".join(parts))


def create_renderer(bundle: dict) -> BundleRenderer:
    return BundleRenderer(bundle, cache=LRUCache(max_entries=1000, ttl=60 * 15))
